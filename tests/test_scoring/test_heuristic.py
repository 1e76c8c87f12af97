"""
Tests for swellmind/scoring/heuristic.py.

What we test
------------
Sub-scores:
  - Wave: 100 inside the ideal range; 40/m shortfall and 30/m excess
    penalties; floor 0; unknown 50.
  - Orientation: offshore 100 ... onshore 15; unknown 50.
  - Wind speed: step table; unknown 60.
  - Time: bucket base scores plus the capped preferred-time boost.

calculate_generic_score():
  - Canonical scenario scores 99 (98.5 rounds half-up).
  - Score is an integer in [0, 100]; is_recommended iff score >= 75.
  - Calling twice with identical inputs gives identical results.
  - A forecast with every field missing still scores.
  - Explanation clauses and fallback text.
"""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from swellmind.config import ScoringConfig
from swellmind.models.forecast import ForecastObservation
from swellmind.models.session import UserPreferences
from swellmind.scoring.heuristic import (
    HeuristicComponents,
    calculate_generic_score,
    compute_components,
    score_time_of_day,
    score_wave_height,
    score_wind_orientation,
    score_wind_speed,
)
from swellmind.taxonomy.conditions import TimeOfDay, WindOrientation


def _at(hour: int) -> datetime:
    return datetime(2026, 3, 1, hour, 0, tzinfo=timezone.utc)


# ── Sub-scores ────────────────────────────────────────────────────────────────

class TestWaveScore:
    @pytest.mark.parametrize("height", [1.0, 1.5, 2.0])
    def test_inside_range_is_100(self, height):
        assert score_wave_height(height, 1.0, 2.0) == 100.0

    def test_shortfall_penalty(self):
        assert score_wave_height(0.5, 1.0, 2.0) == pytest.approx(80.0)

    def test_excess_penalty(self):
        assert score_wave_height(3.0, 1.0, 2.0) == pytest.approx(70.0)

    def test_floor_at_zero(self):
        assert score_wave_height(10.0, 1.0, 2.0) == 0.0

    def test_unknown_height(self):
        assert score_wave_height(None, 1.0, 2.0) == 50.0


class TestWindOrientationScore:
    @pytest.mark.parametrize(
        "orientation,expected",
        [
            (WindOrientation.OFFSHORE, 100.0),
            (WindOrientation.CROSS_OFFSHORE, 85.0),
            (WindOrientation.CROSS, 60.0),
            (WindOrientation.CROSS_ONSHORE, 35.0),
            (WindOrientation.ONSHORE, 15.0),
            (None, 50.0),
        ],
    )
    def test_table(self, orientation, expected):
        assert score_wind_orientation(orientation) == expected


class TestWindSpeedScore:
    @pytest.mark.parametrize(
        "speed,expected",
        [(0.0, 100.0), (3.0, 100.0), (3.1, 85.0), (6.0, 85.0), (10.0, 60.0),
         (15.0, 35.0), (15.1, 15.0), (None, 60.0)],
    )
    def test_steps(self, speed, expected):
        assert score_wind_speed(speed) == expected


class TestTimeScore:
    def test_base_scores(self):
        assert score_time_of_day(_at(6), []) == 90.0
        assert score_time_of_day(_at(9), []) == 95.0
        assert score_time_of_day(_at(13), []) == 70.0
        assert score_time_of_day(_at(16), []) == 60.0
        assert score_time_of_day(_at(20), []) == 50.0

    def test_preferred_bucket_is_boosted(self):
        assert score_time_of_day(_at(13), [TimeOfDay.MIDDAY]) == 80.0

    def test_boost_is_capped_at_100(self):
        assert score_time_of_day(_at(9), [TimeOfDay.MORNING]) == 100.0

    def test_other_preferred_bucket_does_not_boost(self):
        assert score_time_of_day(_at(7), [TimeOfDay.MORNING]) == 90.0


# ── Composite score ───────────────────────────────────────────────────────────

class TestCalculateGenericScore:
    def test_canonical_scenario_scores_99(self, canonical_forecast, sample_prefs):
        components = compute_components(canonical_forecast, sample_prefs)
        assert components == HeuristicComponents(100.0, 100.0, 100.0, 90.0)
        assert components.weighted_total() == pytest.approx(98.5)

        result = calculate_generic_score(canonical_forecast, sample_prefs)
        assert result.score == 99
        assert result.is_recommended is True

    def test_idempotent(self, canonical_forecast, sample_prefs):
        first = calculate_generic_score(canonical_forecast, sample_prefs)
        second = calculate_generic_score(canonical_forecast, sample_prefs)
        assert first == second

    def test_all_fields_missing_still_scores(self):
        f = ForecastObservation(timestamp=_at(20))
        result = calculate_generic_score(f, UserPreferences())
        # 50*.4 + 50*.25 + 60*.2 + 50*.15 = 52
        assert result.score == 52
        assert result.is_recommended is False
        assert result.explanation == "Based on general conditions"

    def test_poor_conditions(self, sample_prefs):
        f = ForecastObservation(
            timestamp=_at(20),
            wave_height=6.0,
            wind_orientation=WindOrientation.ONSHORE,
            wind_speed=20.0,
        )
        result = calculate_generic_score(f, sample_prefs)
        # 0*.4 + 15*.25 + 15*.2 + 50*.15 = 14.25
        assert result.score == 14
        assert not result.is_recommended

    @pytest.mark.parametrize("hour", [0, 6, 9, 13, 16, 20])
    @pytest.mark.parametrize("height", [None, 0.0, 1.5, 4.0, 9.0])
    def test_score_range_and_recommend_flag(self, hour, height, sample_prefs):
        f = ForecastObservation(timestamp=_at(hour), wave_height=height, wind_speed=8.0)
        result = calculate_generic_score(f, sample_prefs)
        assert isinstance(result.score, int)
        assert 0 <= result.score <= 100
        assert result.is_recommended == (result.score >= 75)

    def test_recommend_threshold_from_config(self, canonical_forecast, sample_prefs):
        strict = ScoringConfig(recommend_threshold=100)
        assert calculate_generic_score(canonical_forecast, sample_prefs, strict).is_recommended is False


class TestExplanation:
    def test_ideal_waves_and_offshore(self, canonical_forecast, sample_prefs):
        result = calculate_generic_score(canonical_forecast, sample_prefs)
        assert result.explanation == "Waves in your ideal range, offshore winds"

    def test_small_waves_and_onshore(self, sample_prefs):
        f = ForecastObservation(
            timestamp=_at(9), wave_height=0.2, wind_orientation=WindOrientation.ONSHORE
        )
        result = calculate_generic_score(f, sample_prefs)
        assert result.explanation == "Waves a bit small for you, onshore winds may affect conditions"

    def test_big_waves_and_neutral_wind(self, sample_prefs):
        f = ForecastObservation(
            timestamp=_at(9), wave_height=3.0, wind_orientation=WindOrientation.CROSS
        )
        result = calculate_generic_score(f, sample_prefs)
        # cross (60) is neither good nor bad enough for a wind clause
        assert result.explanation == "Waves bigger than your preference"
