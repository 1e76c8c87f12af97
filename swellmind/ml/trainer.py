"""
Per-user model training.

train_user_model() turns a user's linked sessions into a ``UserModel``:

  1. Fewer than ``min_sessions`` pairs (default 3) -> ``None``.  That is the
     "not yet available" outcome, not an error.
  2. Design matrix = ``extract_features`` over every forecast; targets are
     the raw 1–10 ratings.
  3. Fit with the configured ``Regressor`` (OLS by default).
  4. If the regressor raises for any reason, refit with
     ``FixedApproximation``.  Once the pair-count precondition holds, this
     function always returns a model.

The model is always refit from the full session set; nothing is updated
incrementally.  The input is copied into a local list before the matrix is
built, so a caller mutating its list mid-fit cannot tear the snapshot.

model_type_for_count() labels the scoring phase by session count only.
"""

from __future__ import annotations

import logging
import math
from typing import Iterable, Optional

from swellmind.config import PhaseConfig
from swellmind.features.extractor import build_feature_matrix
from swellmind.ml.predictor import MAX_RATING, MIN_RATING, predict_from_features
from swellmind.ml.regressor import FixedApproximation, Regressor, select_regressor
from swellmind.models.scoring import UserModel
from swellmind.models.session import TrainingPair
from swellmind.taxonomy.conditions import ModelType

logger = logging.getLogger(__name__)


def train_user_model(
    pairs: Iterable[TrainingPair],
    regressor: Optional[Regressor] = None,
    phases: PhaseConfig = PhaseConfig(),
) -> Optional[UserModel]:
    """Fit a linear rating model for one user.

    Args:
        pairs:     All (forecast, rating) pairs for the user.
        regressor: Fitting strategy.  Defaults to ``select_regressor("auto")``.
        phases:    Session-count thresholds.

    Returns:
        A ``UserModel``, or ``None`` when there are too few pairs.
    """
    snapshot = list(pairs)
    if len(snapshot) < phases.min_sessions_for_model:
        logger.debug(
            "Not enough sessions to train (%d < %d).",
            len(snapshot), phases.min_sessions_for_model,
        )
        return None

    X = build_feature_matrix([p.forecast for p in snapshot])
    y = [float(p.rating) for p in snapshot]

    primary = regressor or select_regressor("auto")
    try:
        coefficients, intercept = primary.fit(X, y)
        return UserModel(
            coefficients=coefficients,
            intercept=intercept,
            fit_method=primary.fit_method,
        )
    except Exception as exc:
        logger.warning(
            "%s fit failed on %d sessions (%s); using fixed approximation.",
            type(primary).__name__, len(snapshot), exc,
        )

    fallback = FixedApproximation()
    coefficients, intercept = fallback.fit(X, y)
    return UserModel(
        coefficients=coefficients,
        intercept=intercept,
        fit_method=fallback.fit_method,
    )


def training_error(pairs: Iterable[TrainingPair], model: UserModel) -> Optional[float]:
    """In-sample mean absolute error of the clamped rating prediction.

    Returns:
        MAE in rating points, or ``None`` for an empty input.
    """
    snapshot = list(pairs)
    if not snapshot:
        return None
    X = build_feature_matrix([p.forecast for p in snapshot])
    errors = []
    for features, pair in zip(X, snapshot):
        predicted = max(MIN_RATING, min(MAX_RATING, predict_from_features(features, model)))
        errors.append(abs(predicted - pair.rating))
    return math.fsum(errors) / len(errors)


def model_type_for_count(num_sessions: int, phases: PhaseConfig = PhaseConfig()) -> ModelType:
    """Scoring phase for a session count.

    < 3 -> generic, 3-9 -> blended, >= 10 -> learned (with default thresholds).
    """
    if num_sessions < phases.min_sessions_for_model:
        return ModelType.GENERIC
    if num_sessions < phases.learned_threshold:
        return ModelType.BLENDED
    return ModelType.LEARNED
