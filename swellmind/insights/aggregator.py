"""
Insight derivation from a user's rated session history.

calculate_user_insights() is independent of the regression model: it
never trains, predicts or scores.  It only summarises what the user's good
sessions (rating >= 7) had in common.

Preconditions (otherwise ``None``):
  - at least 3 sessions
  - at least one good session

Derived values
--------------
ideal wave height : [max(0.5, mean - 0.5), mean + 0.5] over good sessions
                    with a known height (mean defaults to 1.5)
ideal wave period : [max(6, mean - 2), mean + 2] over good sessions with a
                    known period (mean defaults to 10)
preferred wind    : most frequent orientation among good sessions
                    (default "offshore")
preferred time    : most frequent time-of-day bucket among good sessions
                    (default "morning")
avg_rating        : over ALL sessions, rounded half-up to one decimal
model_confidence  : >= 15 sessions high, >= 8 medium, else low

Ties in the two "most frequent" fields go to the value seen first in the
input order.
"""

from __future__ import annotations

import math
from collections import Counter
from typing import Iterable, Optional, TypeVar

from swellmind.config import InsightsConfig
from swellmind.models.scoring import UserInsights
from swellmind.models.session import TrainingPair
from swellmind.taxonomy.conditions import ModelConfidence, TimeOfDay, WindOrientation
from swellmind.utils.time_utils import round_half_up, time_of_day_bucket

_T = TypeVar("_T")

DEFAULT_WAVE_HEIGHT = 1.5
DEFAULT_WAVE_PERIOD = 10.0
HEIGHT_HALF_RANGE = 0.5
HEIGHT_FLOOR = 0.5
PERIOD_HALF_RANGE = 2.0
PERIOD_FLOOR = 6.0


def most_frequent(values: Iterable[_T], default: _T) -> _T:
    """Mode of ``values``; ties go to the first-encountered value.

    ``Counter`` keeps insertion order and ``most_common`` sorts stably, so
    among equal counts the earliest-inserted key wins.
    """
    counts = Counter(values)
    if not counts:
        return default
    return counts.most_common(1)[0][0]


def model_confidence_for_count(
    num_sessions: int,
    config: InsightsConfig = InsightsConfig(),
) -> ModelConfidence:
    if num_sessions >= config.high_confidence_sessions:
        return ModelConfidence.HIGH
    if num_sessions >= config.medium_confidence_sessions:
        return ModelConfidence.MEDIUM
    return ModelConfidence.LOW


def _mean(values: list[float], default: float) -> float:
    return math.fsum(values) / len(values) if values else default


def calculate_user_insights(
    sessions: Iterable[TrainingPair],
    config: InsightsConfig = InsightsConfig(),
) -> Optional[UserInsights]:
    """Summarise a user's session history.

    Args:
        sessions: All (forecast, rating) pairs for the user, in history order.
        config:   Thresholds.

    Returns:
        ``UserInsights``, or ``None`` when the preconditions are not met.
    """
    history = list(sessions)
    if len(history) < config.min_sessions:
        return None

    good = [s for s in history if s.rating >= config.good_rating_threshold]
    if not good:
        return None

    heights = [s.forecast.wave_height for s in good if s.forecast.wave_height is not None]
    periods = [s.forecast.wave_period for s in good if s.forecast.wave_period is not None]

    avg_height = _mean(heights, DEFAULT_WAVE_HEIGHT)
    avg_period = _mean(periods, DEFAULT_WAVE_PERIOD)

    preferred_wind = most_frequent(
        (s.forecast.wind_orientation for s in good if s.forecast.wind_orientation is not None),
        WindOrientation.OFFSHORE,
    )
    preferred_time = most_frequent(
        (time_of_day_bucket(s.forecast.timestamp) for s in good),
        TimeOfDay.MORNING,
    )

    avg_rating = math.fsum(s.rating for s in history) / len(history)

    return UserInsights(
        ideal_wave_height_min=max(HEIGHT_FLOOR, avg_height - HEIGHT_HALF_RANGE),
        ideal_wave_height_max=avg_height + HEIGHT_HALF_RANGE,
        ideal_wave_period_min=max(PERIOD_FLOOR, avg_period - PERIOD_HALF_RANGE),
        ideal_wave_period_max=avg_period + PERIOD_HALF_RANGE,
        preferred_wind=preferred_wind,
        preferred_time_of_day=preferred_time,
        total_sessions=len(history),
        avg_rating=round_half_up(avg_rating * 10) / 10,
        model_confidence=model_confidence_for_count(len(history), config),
    )
