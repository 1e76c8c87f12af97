"""
Regression strategies for the per-user rating model.

Two implementations of the ``Regressor`` capability:

  FullOLS            : Ordinary least squares with an intercept, solved with
                       ``numpy.linalg.lstsq``.  Rank-deficient design matrices
                       (e.g. 3 sessions for 6 unknowns) get the minimum-norm
                       solution rather than an error.
  FixedApproximation : Ignores the features.  Returns the fixed weight vector
                       ``[0.5, 0.1, -0.3, 2.0, 0.5]`` with the mean observed
                       rating as intercept.  Never raises on non-empty input.

The trainer depends only on the ``Regressor`` interface.  ``select_regressor``
picks an implementation from the ``[training] regressor`` setting; ``"auto"``
probes whether numpy is importable and falls back to the fixed approximation
when it is not.
"""

from __future__ import annotations

import importlib.util
import logging
import math
from abc import ABC, abstractmethod

from swellmind.taxonomy.conditions import FitMethod

logger = logging.getLogger(__name__)

FIXED_COEFFICIENTS: tuple[float, ...] = (0.5, 0.1, -0.3, 2.0, 0.5)


class Regressor(ABC):
    """Fits ``rating ≈ intercept + Σ coefficient[i] * feature[i]``.

    Subclasses must:
      1. Set ``fit_method``.
      2. Implement ``fit(X, y) -> (coefficients, intercept)``.
    """

    fit_method: FitMethod

    @abstractmethod
    def fit(
        self,
        X: list[list[float]],
        y: list[float],
    ) -> tuple[list[float], float]:
        """Fit the model.

        Args:
            X: Feature rows, all of the same length.
            y: Targets, same length as ``X``.

        Returns:
            Tuple ``(coefficients, intercept)``; ``len(coefficients) == len(X[0])``.

        Raises:
            ValueError: On empty or misaligned input, or a non-finite solution.
        """
        ...


class FullOLS(Regressor):
    """Least-squares fit via numpy."""

    fit_method = FitMethod.OLS

    def fit(
        self,
        X: list[list[float]],
        y: list[float],
    ) -> tuple[list[float], float]:
        import numpy as np

        if not X or len(X) != len(y):
            raise ValueError(
                f"FullOLS.fit() needs matching non-empty X and y; got {len(X)} and {len(y)}."
            )

        X_arr = np.asarray(X, dtype=np.float64)
        y_arr = np.asarray(y, dtype=np.float64)

        # Intercept column last, so weights[-1] is the bias term
        design = np.hstack([X_arr, np.ones((X_arr.shape[0], 1), dtype=np.float64)])
        weights, _residuals, rank, _sv = np.linalg.lstsq(design, y_arr, rcond=None)

        if not np.all(np.isfinite(weights)):
            raise ValueError("Least-squares solution contains non-finite weights.")

        logger.debug(
            "FullOLS fit: rows=%d rank=%d weights=%s", design.shape[0], rank, weights
        )
        return [float(w) for w in weights[:-1]], float(weights[-1])


class FixedApproximation(Regressor):
    """Constant weights, intercept = mean rating."""

    fit_method = FitMethod.FIXED

    def fit(
        self,
        X: list[list[float]],
        y: list[float],
    ) -> tuple[list[float], float]:
        if not y:
            raise ValueError("FixedApproximation.fit() needs at least one target.")
        mean_rating = math.fsum(y) / len(y)
        return list(FIXED_COEFFICIENTS), mean_rating


def numpy_available() -> bool:
    """Runtime capability probe for the full solver."""
    return importlib.util.find_spec("numpy") is not None


def select_regressor(name: str = "auto") -> Regressor:
    """Return the regressor for a ``[training] regressor`` setting.

    Args:
        name: ``"ols"``, ``"fixed"`` or ``"auto"``.

    Returns:
        A ``Regressor`` instance.

    Raises:
        ValueError: If ``name`` is not recognised.
    """
    name = name.lower()
    if name == "ols":
        return FullOLS()
    if name == "fixed":
        return FixedApproximation()
    if name == "auto":
        if numpy_available():
            return FullOLS()
        logger.warning("numpy not importable; using fixed-coefficient approximation.")
        return FixedApproximation()
    raise ValueError(f"Unknown regressor '{name}'. Expected 'auto', 'ols' or 'fixed'.")
