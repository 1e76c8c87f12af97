"""
Feature extraction for the per-user rating model.

Converts one ``ForecastObservation`` into the fixed 5-element vector used by
both training and prediction.  The order below is the contract between the
trainer and the scorer: ``UserModel.coefficients[i]`` weights
``FEATURE_NAMES[i]``.

Missing values
--------------
Every field has a neutral fallback, so a forecast with every measurement
missing still produces a valid vector:

  wave_height_m        1.0
  wave_period_s        10
  wind_speed_norm      0.5   (5 m/s / 10)
  wind_orientation_enc 0.5   (same as "cross")
  time_of_day_enc      0.5
"""

from __future__ import annotations

from swellmind.models.forecast import ForecastObservation
from swellmind.taxonomy.conditions import TimeOfDay, WindOrientation
from swellmind.utils.time_utils import time_of_day_bucket

FEATURE_NAMES: list[str] = [
    "wave_height_m",
    "wave_period_s",
    "wind_speed_norm",
    "wind_orientation_enc",
    "time_of_day_enc",
]

WIND_ORIENTATION_ENCODING: dict[WindOrientation, float] = {
    WindOrientation.OFFSHORE:       1.0,
    WindOrientation.CROSS_OFFSHORE: 0.75,
    WindOrientation.CROSS:          0.5,
    WindOrientation.CROSS_ONSHORE:  0.25,
    WindOrientation.ONSHORE:        0.0,
}

TIME_OF_DAY_ENCODING: dict[TimeOfDay, float] = {
    TimeOfDay.DAWN:      0.9,
    TimeOfDay.MORNING:   1.0,
    TimeOfDay.MIDDAY:    0.6,
    TimeOfDay.AFTERNOON: 0.5,
    TimeOfDay.EVENING:   0.4,
}

DEFAULT_WAVE_HEIGHT = 1.0
DEFAULT_WAVE_PERIOD = 10.0
DEFAULT_WIND_SPEED = 5.0
WIND_SPEED_SCALE = 10.0
NEUTRAL_ENCODING = 0.5


def extract_features(forecast: ForecastObservation) -> list[float]:
    """Encode a forecast as ``[height, period, wind/10, orientation, time]``.

    Args:
        forecast: The observation to encode.

    Returns:
        List of 5 floats in ``FEATURE_NAMES`` order.
    """
    wave_height = forecast.wave_height if forecast.wave_height is not None else DEFAULT_WAVE_HEIGHT
    wave_period = forecast.wave_period if forecast.wave_period is not None else DEFAULT_WAVE_PERIOD
    wind_speed  = forecast.wind_speed  if forecast.wind_speed  is not None else DEFAULT_WIND_SPEED

    if forecast.wind_orientation is not None:
        orientation = WIND_ORIENTATION_ENCODING[forecast.wind_orientation]
    else:
        orientation = NEUTRAL_ENCODING

    bucket = time_of_day_bucket(forecast.timestamp)
    time_enc = TIME_OF_DAY_ENCODING.get(bucket, NEUTRAL_ENCODING)

    return [
        float(wave_height),
        float(wave_period),
        float(wind_speed) / WIND_SPEED_SCALE,
        orientation,
        time_enc,
    ]


def build_feature_matrix(forecasts: list[ForecastObservation]) -> list[list[float]]:
    """Apply ``extract_features`` to every forecast, preserving order."""
    return [extract_features(f) for f in forecasts]
