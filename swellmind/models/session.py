"""
User-side input models: preferences and logged sessions.

``UserPreferences`` is owned by the user profile and feeds the heuristic
scorer.  ``SessionRecord`` is one logged surf outing; it is append-only
history from the engine's point of view.  ``TrainingPair`` is the slice of
a session the trainer and the insights aggregator actually consume.
"""

from __future__ import annotations

from datetime import datetime
from typing import Iterable, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from swellmind.models.forecast import ForecastObservation
from swellmind.taxonomy.conditions import PerceivedWind, TimeOfDay
from swellmind.utils.time_utils import to_utc


class UserPreferences(BaseModel):
    """Stated preferences from the user profile.

    Attributes:
        ideal_wave_size_min: Lower bound of the preferred wave height (m).
        ideal_wave_size_max: Upper bound of the preferred wave height (m).
        crowd_tolerance: 1 (hates crowds) to 10 (does not care).
        preferred_times_of_day: Buckets that earn a time-of-day boost.
    """

    model_config = ConfigDict(frozen=True)

    ideal_wave_size_min: float = Field(default=0.5, ge=0.0, le=10.0)
    ideal_wave_size_max: float = Field(default=1.5, ge=0.0, le=10.0)
    crowd_tolerance: int = Field(default=5, ge=1, le=10)
    preferred_times_of_day: list[TimeOfDay] = []

    @model_validator(mode="after")
    def validate_wave_range(self) -> "UserPreferences":
        if self.ideal_wave_size_min > self.ideal_wave_size_max:
            raise ValueError(
                f"ideal_wave_size_min ({self.ideal_wave_size_min}) must be <= "
                f"ideal_wave_size_max ({self.ideal_wave_size_max})."
            )
        return self


class SessionRecord(BaseModel):
    """One logged surf session.

    Attributes:
        session_id: Auto-assigned DB PK; ``None`` before insertion.
        user_id: Owner of the session.
        spot_id: Where the session happened.
        surf_timestamp: When the session happened, normalised to UTC.
        rating: Overall subjective quality, 1–10.
        perceived_wind: Optional wind feedback.
        perceived_size: Optional perceived wave size, 1–10.
        perceived_crowd: Optional perceived crowd level, 1–10.
        notes: Free text, at most 500 characters.
        forecast: The linked forecast, or ``None`` when no forecast was
            close enough in time.
        created_at: Insertion time; set by the repository.
    """

    model_config = ConfigDict(frozen=True)

    session_id: Optional[int] = None
    user_id: str
    spot_id: str
    surf_timestamp: datetime
    rating: int = Field(ge=1, le=10)
    perceived_wind: Optional[PerceivedWind] = None
    perceived_size: Optional[int] = Field(default=None, ge=1, le=10)
    perceived_crowd: Optional[int] = Field(default=None, ge=1, le=10)
    notes: Optional[str] = Field(default=None, max_length=500)
    forecast: Optional[ForecastObservation] = None
    created_at: Optional[datetime] = None

    @field_validator("surf_timestamp")
    @classmethod
    def normalise_timestamp(cls, v: datetime) -> datetime:
        return to_utc(v)

    @property
    def is_linked(self) -> bool:
        """True when a forecast is attached to this session."""
        return self.forecast is not None


class TrainingPair(BaseModel):
    """A (forecast, rating) pair: the unit of training and insight input."""

    model_config = ConfigDict(frozen=True)

    forecast: ForecastObservation
    rating: int = Field(ge=1, le=10)


def training_pairs(sessions: Iterable[SessionRecord]) -> list[TrainingPair]:
    """Keep only linked sessions, in input order, as ``TrainingPair`` objects."""
    return [
        TrainingPair(forecast=s.forecast, rating=s.rating)
        for s in sessions
        if s.forecast is not None
    ]
