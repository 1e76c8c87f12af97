"""
Heuristic scoring: rule-based suitability for users without a trained model.

Score formula (weighted sum, rounded half-up, range 0–100)
----------------------------------------------------------
    total = (
        wave_score               * 0.40   # height vs. the user's ideal range
        + wind_orientation_score * 0.25   # offshore best, onshore worst
        + wind_speed_score       * 0.20   # light winds best
        + time_score             * 0.15   # early sessions best, preference boost
    )

Component explanations
----------------------
wave_score (0–100):
    100 inside [ideal_min, ideal_max].  Below the range, lose 40 points per
    meter of shortfall; above it, lose 30 points per meter of excess.
    Floor 0.  Unknown height: 50.

wind_orientation_score (0–100):
    offshore 100, cross-offshore 85, cross 60, cross-onshore 35,
    onshore 15.  Unknown: 50.

wind_speed_score (0–100), m/s:
    ≤3 -> 100, ≤6 -> 85, ≤10 -> 60, ≤15 -> 35, else 15.  Unknown: 60.

time_score (0–100):
    dawn 90, morning 95, midday 70, afternoon 60, evening 50; +10 (capped
    at 100) when the bucket is one of the user's preferred times.

Weights and the recommend threshold come from ``ScoringConfig``.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Optional

from swellmind.config import ScoringConfig
from swellmind.models.forecast import ForecastObservation
from swellmind.models.scoring import ScoringResult
from swellmind.models.session import UserPreferences
from swellmind.taxonomy.conditions import TimeOfDay, WindOrientation
from swellmind.utils.time_utils import round_half_up, time_of_day_bucket

_WIND_ORIENTATION_SCORES: dict[WindOrientation, float] = {
    WindOrientation.OFFSHORE:       100.0,
    WindOrientation.CROSS_OFFSHORE:  85.0,
    WindOrientation.CROSS:           60.0,
    WindOrientation.CROSS_ONSHORE:   35.0,
    WindOrientation.ONSHORE:         15.0,
}

# (upper bound in m/s, score), checked in order
_WIND_SPEED_STEPS: tuple[tuple[float, float], ...] = (
    (3.0,  100.0),
    (6.0,   85.0),
    (10.0,  60.0),
    (15.0,  35.0),
)
_WIND_SPEED_CEILING_SCORE = 15.0

_TIME_BASE_SCORES: dict[TimeOfDay, float] = {
    TimeOfDay.DAWN:      90.0,
    TimeOfDay.MORNING:   95.0,
    TimeOfDay.MIDDAY:    70.0,
    TimeOfDay.AFTERNOON: 60.0,
    TimeOfDay.EVENING:   50.0,
}

_UNKNOWN_WAVE_SCORE = 50.0
_UNKNOWN_ORIENTATION_SCORE = 50.0
_UNKNOWN_WIND_SPEED_SCORE = 60.0

_SHORTFALL_PENALTY_PER_M = 40.0
_EXCESS_PENALTY_PER_M = 30.0

# Explanation thresholds
_WAVE_IDEAL_CLAUSE_MIN = 80.0
_WIND_GOOD_CLAUSE_MIN = 80.0
_WIND_BAD_CLAUSE_MAX = 50.0


@dataclass(frozen=True)
class HeuristicComponents:
    """Sub-scores of a heuristic score, each in [0, 100]."""

    wave_score:             float
    wind_orientation_score: float
    wind_speed_score:       float
    time_score:             float

    def weighted_total(self, config: ScoringConfig = ScoringConfig()) -> float:
        """Unrounded weighted sum."""
        return (
            self.wave_score               * config.wave_weight
            + self.wind_orientation_score * config.wind_orientation_weight
            + self.wind_speed_score       * config.wind_speed_weight
            + self.time_score             * config.time_weight
        )


# ── Sub-scores ────────────────────────────────────────────────────────────────

def score_wave_height(
    wave_height: Optional[float],
    ideal_min: float,
    ideal_max: float,
) -> float:
    if wave_height is None:
        return _UNKNOWN_WAVE_SCORE
    if ideal_min <= wave_height <= ideal_max:
        return 100.0
    if wave_height < ideal_min:
        return max(0.0, 100.0 - (ideal_min - wave_height) * _SHORTFALL_PENALTY_PER_M)
    return max(0.0, 100.0 - (wave_height - ideal_max) * _EXCESS_PENALTY_PER_M)


def score_wind_orientation(orientation: Optional[WindOrientation]) -> float:
    if orientation is None:
        return _UNKNOWN_ORIENTATION_SCORE
    return _WIND_ORIENTATION_SCORES[orientation]


def score_wind_speed(wind_speed: Optional[float]) -> float:
    if wind_speed is None:
        return _UNKNOWN_WIND_SPEED_SCORE
    for upper, score in _WIND_SPEED_STEPS:
        if wind_speed <= upper:
            return score
    return _WIND_SPEED_CEILING_SCORE


def score_time_of_day(
    timestamp: datetime,
    preferred_times: Iterable[TimeOfDay],
    boost: float = 10.0,
) -> float:
    bucket = time_of_day_bucket(timestamp)
    score = _TIME_BASE_SCORES.get(bucket, 50.0)
    if bucket in set(preferred_times):
        score = min(100.0, score + boost)
    return score


def compute_components(
    forecast: ForecastObservation,
    prefs: UserPreferences,
    config: ScoringConfig = ScoringConfig(),
) -> HeuristicComponents:
    """Compute all four heuristic sub-scores for one forecast."""
    return HeuristicComponents(
        wave_score=score_wave_height(
            forecast.wave_height, prefs.ideal_wave_size_min, prefs.ideal_wave_size_max
        ),
        wind_orientation_score=score_wind_orientation(forecast.wind_orientation),
        wind_speed_score=score_wind_speed(forecast.wind_speed),
        time_score=score_time_of_day(
            forecast.timestamp,
            prefs.preferred_times_of_day,
            boost=float(config.preferred_time_boost),
        ),
    )


# ── Explanation ───────────────────────────────────────────────────────────────

def build_explanation(
    components: HeuristicComponents,
    forecast: ForecastObservation,
    prefs: UserPreferences,
) -> str:
    """Assemble the heuristic explanation string.

    Clauses (comma-separated, first letter capitalised):
      - wave clause: ideal / a bit small / bigger than preference
      - wind clause: "<orientation> winds" when favourable, or
        "<orientation> winds may affect conditions" when poor
    Falls back to "Based on general conditions" when no clause applies.
    """
    clauses: list[str] = []

    if components.wave_score >= _WAVE_IDEAL_CLAUSE_MIN:
        clauses.append("waves in your ideal range")
    elif forecast.wave_height is not None:
        if forecast.wave_height < prefs.ideal_wave_size_min:
            clauses.append("waves a bit small for you")
        else:
            clauses.append("waves bigger than your preference")

    orientation = forecast.wind_orientation
    if orientation is not None:
        if components.wind_orientation_score >= _WIND_GOOD_CLAUSE_MIN:
            clauses.append(f"{orientation.value} winds")
        elif components.wind_orientation_score < _WIND_BAD_CLAUSE_MAX:
            clauses.append(f"{orientation.value} winds may affect conditions")

    explanation = ", ".join(clauses) if clauses else "Based on general conditions"
    return explanation[0].upper() + explanation[1:]


# ── Entry point ───────────────────────────────────────────────────────────────

def calculate_generic_score(
    forecast: ForecastObservation,
    prefs: UserPreferences,
    config: ScoringConfig = ScoringConfig(),
) -> ScoringResult:
    """Score a forecast window with fixed domain rules only.

    Args:
        forecast: The window to score.
        prefs:    The user's stated preferences.
        config:   Weights and thresholds.

    Returns:
        ``ScoringResult`` with an integer score in [0, 100].
    """
    components = compute_components(forecast, prefs, config)
    score = round_half_up(components.weighted_total(config))
    score = max(0, min(100, score))
    return ScoringResult(
        score=score,
        explanation=build_explanation(components, forecast, prefs),
        is_recommended=score >= config.recommend_threshold,
    )
