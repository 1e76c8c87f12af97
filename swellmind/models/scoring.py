"""
Derived models: per-user regression models, scoring results and insights.

``UserModel`` is recomputed in full every time a user's session set changes;
the previous model is discarded, never versioned.  ``UserModelStats`` is the
persisted envelope around it (phase label, session count, training time).

``ScoringResult`` and ``UserInsights`` are ephemeral: computed per request
and never stored.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from swellmind.models.forecast import ForecastObservation
from swellmind.taxonomy.conditions import (
    FitMethod,
    ModelConfidence,
    ModelType,
    TimeOfDay,
    WindOrientation,
)

FEATURE_COUNT = 5


class UserModel(BaseModel):
    """Linear model mapping a feature vector to a 1–10 rating.

    Attributes:
        coefficients: One weight per feature, positionally aligned with
            ``features.extractor.FEATURE_NAMES``.
        intercept: Bias term.
        fit_method: Regressor that produced the model.
    """

    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    coefficients: list[float]
    intercept: float
    fit_method: FitMethod = FitMethod.OLS

    @field_validator("coefficients")
    @classmethod
    def validate_length(cls, v: list[float]) -> list[float]:
        if len(v) != FEATURE_COUNT:
            raise ValueError(
                f"coefficients must have {FEATURE_COUNT} entries, got {len(v)}."
            )
        return v


class UserModelStats(BaseModel):
    """Persisted model state for one user.

    ``model_type`` is derived from ``num_sessions`` alone; it says nothing
    about whether ``model`` came from the full solver or the fallback.

    Attributes:
        user_id: Owner.
        num_sessions: Linked sessions the model was trained from.
        model_type: Scoring phase for this session count.
        model: The fitted model, or ``None`` below the training threshold.
        last_trained_at: When ``model`` was fitted.
        training_error: In-sample mean absolute rating error, if trained.
    """

    model_config = ConfigDict(frozen=True)

    user_id: str
    num_sessions: int = Field(ge=0)
    model_type: ModelType
    model: Optional[UserModel] = None
    last_trained_at: Optional[datetime] = None
    training_error: Optional[float] = None


class ScoringResult(BaseModel):
    """Suitability of one forecast window for one user.

    Attributes:
        score: Integer 0–100.
        explanation: Short human-readable reason.
        is_recommended: True iff ``score`` reaches the recommend threshold.
    """

    model_config = ConfigDict(frozen=True)

    score: int = Field(ge=0, le=100)
    explanation: str
    is_recommended: bool

    @field_validator("explanation")
    @classmethod
    def validate_explanation_not_empty(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("explanation must not be empty.")
        return v


class ScoredWindow(BaseModel):
    """A forecast window paired with its user-specific score."""

    model_config = ConfigDict(frozen=True)

    forecast: ForecastObservation
    result: ScoringResult


class UserInsights(BaseModel):
    """Ideal conditions and aggregate stats derived from rated sessions.

    Attributes:
        ideal_wave_height_min / ideal_wave_height_max: Preferred height range (m).
        ideal_wave_period_min / ideal_wave_period_max: Preferred period range (s).
        preferred_wind: Most common orientation among good sessions.
        preferred_time_of_day: Most common bucket among good sessions.
        crowd_tolerance: Placeholder default; not derived from sessions.
        total_sessions: All sessions considered.
        avg_rating: Mean rating over all sessions, one decimal.
        model_confidence: Tier by session count.
    """

    model_config = ConfigDict(frozen=True)

    ideal_wave_height_min: float
    ideal_wave_height_max: float
    ideal_wave_period_min: float
    ideal_wave_period_max: float
    preferred_wind: WindOrientation
    preferred_time_of_day: TimeOfDay
    crowd_tolerance: int = 5
    total_sessions: int
    avg_rating: float
    model_confidence: ModelConfidence
