"""
Rating prediction from a fitted ``UserModel``.

predict_rating() returns the raw linear prediction (unbounded).
learned_score() clamps it to the 1–10 rating scale and maps it to 10–100.
"""

from __future__ import annotations

from swellmind.features.extractor import extract_features
from swellmind.models.forecast import ForecastObservation
from swellmind.models.scoring import UserModel
from swellmind.utils.time_utils import round_half_up

MIN_RATING = 1.0
MAX_RATING = 10.0


def predict_from_features(features: list[float], model: UserModel) -> float:
    """``intercept + Σ coefficient[i] * feature[i]`` over the aligned prefix."""
    prediction = model.intercept
    for coef, value in zip(model.coefficients, features):
        prediction += coef * value
    return prediction


def predict_rating(forecast: ForecastObservation, model: UserModel) -> float:
    """Raw (unclamped) rating prediction for one forecast."""
    return predict_from_features(extract_features(forecast), model)


def learned_score(forecast: ForecastObservation, model: UserModel) -> int:
    """Clamp the predicted rating to [1, 10] and scale to an integer in [10, 100]."""
    rating = max(MIN_RATING, min(MAX_RATING, predict_rating(forecast, model)))
    return round_half_up(rating * 10.0)
