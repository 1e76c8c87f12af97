"""
Tests for swellmind/ml/trainer.py and swellmind/ml/regressor.py.

What we test
------------
train_user_model():
  - Returns None for 0, 1 or 2 pairs.
  - Returns a model for 3+ pairs with the default (OLS) regressor.
  - A regressor that raises falls back to the fixed approximation, which
    uses [0.5, 0.1, -0.3, 2.0, 0.5] and the mean rating as intercept.
  - The input iterable is consumed exactly once (generators work).

FullOLS:
  - Recovers an exact linear relationship.
  - Rank-deficient input still yields a finite solution.
  - Empty or misaligned input raises ValueError.

select_regressor():
  - Maps "ols" / "fixed" / "auto" and rejects unknown names.

training_error() and model_type_for_count().
"""

from __future__ import annotations

import logging

import pytest

from swellmind.ml.regressor import (
    FIXED_COEFFICIENTS,
    FixedApproximation,
    FullOLS,
    Regressor,
    select_regressor,
)
from swellmind.ml.trainer import model_type_for_count, train_user_model, training_error
from swellmind.models.scoring import UserModel
from swellmind.taxonomy.conditions import FitMethod, ModelType


class _ExplodingRegressor(Regressor):
    fit_method = FitMethod.OLS

    def fit(self, X, y):
        raise RuntimeError("solver unavailable")


def _pairs(make_pair, ratings):
    return [make_pair(r, wave_height=0.5 + i * 0.4) for i, r in enumerate(ratings)]


# ── train_user_model ──────────────────────────────────────────────────────────

class TestTrainUserModel:
    @pytest.mark.parametrize("count", [0, 1, 2])
    def test_too_few_sessions_returns_none(self, make_pair, count):
        assert train_user_model(_pairs(make_pair, [7] * count)) is None

    def test_three_sessions_trains(self, make_pair):
        model = train_user_model(_pairs(make_pair, [4, 6, 8]), regressor=FullOLS())
        assert model is not None
        assert model.fit_method == FitMethod.OLS
        assert len(model.coefficients) == 5

    def test_failing_regressor_falls_back(self, make_pair, caplog):
        with caplog.at_level(logging.WARNING, logger="swellmind.ml.trainer"):
            model = train_user_model(_pairs(make_pair, [4, 6, 8]), regressor=_ExplodingRegressor())
        assert model is not None
        assert model.fit_method == FitMethod.FIXED
        assert model.coefficients == list(FIXED_COEFFICIENTS)
        assert model.intercept == pytest.approx(6.0)
        assert "fixed approximation" in caplog.text

    def test_fixed_regressor_selected_explicitly(self, make_pair):
        model = train_user_model(_pairs(make_pair, [5, 6, 10]), regressor=FixedApproximation())
        assert model.fit_method == FitMethod.FIXED
        assert model.intercept == pytest.approx(7.0)

    def test_accepts_generator(self, make_pair):
        pairs = _pairs(make_pair, [4, 6, 8, 9])
        model = train_user_model(p for p in pairs)
        assert model is not None


# ── Regressors ────────────────────────────────────────────────────────────────

class TestFullOLS:
    def test_recovers_exact_linear_relationship(self):
        # rating = 2 + 1*x0 + 0.5*x1, other features vary independently
        X = [
            [1.0, 2.0, 0.1, 0.0, 0.4],
            [2.0, 1.0, 0.3, 1.0, 0.9],
            [3.0, 4.0, 0.2, 0.5, 1.0],
            [0.5, 3.0, 0.8, 0.25, 0.6],
            [1.5, 0.0, 0.5, 0.75, 0.5],
            [2.5, 5.0, 0.9, 0.0, 0.9],
            [4.0, 2.5, 0.4, 1.0, 0.4],
        ]
        y = [2.0 + row[0] + 0.5 * row[1] for row in X]
        coefs, intercept = FullOLS().fit(X, y)
        assert coefs == pytest.approx([1.0, 0.5, 0.0, 0.0, 0.0], abs=1e-8)
        assert intercept == pytest.approx(2.0, abs=1e-8)

    def test_rank_deficient_input_is_finite(self):
        X = [[1.0, 10.0, 0.5, 1.0, 0.9]] * 3
        coefs, intercept = FullOLS().fit(X, [6.0, 7.0, 8.0])
        assert all(c == c for c in coefs)   # not NaN
        assert len(coefs) == 5

    def test_empty_input_raises(self):
        with pytest.raises(ValueError):
            FullOLS().fit([], [])

    def test_misaligned_input_raises(self):
        with pytest.raises(ValueError, match="matching"):
            FullOLS().fit([[1.0] * 5], [1.0, 2.0])


class TestFixedApproximation:
    def test_uses_fixed_weights_and_mean(self):
        coefs, intercept = FixedApproximation().fit([[0.0] * 5] * 2, [3.0, 9.0])
        assert coefs == [0.5, 0.1, -0.3, 2.0, 0.5]
        assert intercept == pytest.approx(6.0)


class TestSelectRegressor:
    def test_ols(self):
        assert isinstance(select_regressor("ols"), FullOLS)

    def test_fixed(self):
        assert isinstance(select_regressor("FIXED"), FixedApproximation)

    def test_auto_prefers_ols_when_numpy_present(self):
        assert isinstance(select_regressor("auto"), FullOLS)

    def test_auto_without_numpy(self, monkeypatch):
        monkeypatch.setattr("swellmind.ml.regressor.numpy_available", lambda: False)
        assert isinstance(select_regressor("auto"), FixedApproximation)

    def test_unknown_name(self):
        with pytest.raises(ValueError, match="Unknown regressor"):
            select_regressor("lightgbm")


# ── Helpers ───────────────────────────────────────────────────────────────────

class TestTrainingError:
    def test_zero_for_perfect_constant_model(self, make_pair):
        pairs = _pairs(make_pair, [7, 7, 7])
        model = UserModel(coefficients=[0.0] * 5, intercept=7.0)
        assert training_error(pairs, model) == pytest.approx(0.0)

    def test_prediction_is_clamped(self, make_pair):
        pairs = _pairs(make_pair, [10, 10])
        model = UserModel(coefficients=[0.0] * 5, intercept=25.0)
        assert training_error(pairs, model) == pytest.approx(0.0)

    def test_empty(self):
        assert training_error([], UserModel(coefficients=[0.0] * 5, intercept=5.0)) is None


class TestModelTypeForCount:
    @pytest.mark.parametrize(
        "count,expected",
        [(0, ModelType.GENERIC), (2, ModelType.GENERIC), (3, ModelType.BLENDED),
         (9, ModelType.BLENDED), (10, ModelType.LEARNED), (100, ModelType.LEARNED)],
    )
    def test_phases(self, count, expected):
        assert model_type_for_count(count) == expected
