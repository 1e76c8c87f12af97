"""
Forecast observation model.

``ForecastObservation`` is one point-in-time (or 3-hour window) snapshot of
ocean and wind conditions at a spot.  Every measurement is optional: the
forecast provider can drop any field for any window, and every consumer of
this model defines a neutral fallback instead of rejecting the record.
A missing reading is ``None``; NaN and infinity are rejected at validation.

The model is frozen: a forecast linked to a logged session is the ground
truth that session is trained against, and must not change underneath it.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator

from swellmind.taxonomy.conditions import WindOrientation
from swellmind.utils.time_utils import to_utc


class ForecastObservation(BaseModel):
    """Environmental snapshot for one spot and one forecast window.

    Attributes:
        forecast_id: Auto-assigned DB PK; ``None`` before insertion.
        spot_id: Spot this forecast belongs to, or ``None`` for ad-hoc input.
        timestamp: Window start, normalised to UTC.
        wave_height: Significant wave height in meters.
        wave_period: Dominant wave period in seconds.
        wave_direction: Direction waves come from, in degrees.
        wind_speed: 10 m wind speed in meters/second.
        wind_direction: Direction wind comes from, in degrees.
        wind_orientation: Wind relative to the beach, derived upstream from
            ``wind_direction`` and the spot orientation.
        data_source: Provider identifier.
    """

    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    forecast_id: Optional[int] = None
    spot_id: Optional[str] = None
    timestamp: datetime
    wave_height: Optional[float] = None
    wave_period: Optional[float] = None
    wave_direction: Optional[float] = None
    wind_speed: Optional[float] = None
    wind_direction: Optional[float] = None
    wind_orientation: Optional[WindOrientation] = None
    data_source: str = "open-meteo"

    @field_validator("timestamp")
    @classmethod
    def normalise_timestamp(cls, v: datetime) -> datetime:
        return to_utc(v)

    @field_validator("wave_height", "wave_period", "wind_speed")
    @classmethod
    def validate_non_negative(cls, v: Optional[float]) -> Optional[float]:
        if v is not None and v < 0:
            raise ValueError("Wave height, wave period and wind speed must be non-negative.")
        return v

    @field_validator("wave_direction", "wind_direction")
    @classmethod
    def validate_degrees(cls, v: Optional[float]) -> Optional[float]:
        if v is not None and not 0.0 <= v <= 360.0:
            raise ValueError(f"Direction must be in [0, 360] degrees, got {v}.")
        return v
