"""
Time utilities shared by feature extraction, scoring and insights.

Key concepts:
  - Time-of-day buckets: a pure function of the UTC hour.  This is the only
    place the bucket boundaries are defined; the feature extractor, the
    heuristic scorer and the insights aggregator all call it.
  - Half-up rounding: scores are rounded the way a person would round them
    (``98.5 -> 99``), not with Python's banker's rounding.
"""

from __future__ import annotations

import math
from datetime import datetime, timedelta, timezone

from swellmind.taxonomy.conditions import TimeOfDay


def time_of_day_bucket(timestamp: datetime) -> TimeOfDay:
    """Map a timestamp to its time-of-day bucket using the UTC hour.

    Buckets: [5,8) dawn, [8,12) morning, [12,15) midday, [15,18) afternoon,
    everything else evening.  Naive datetimes are treated as UTC.

    Args:
        timestamp: Observation or session time.

    Returns:
        The ``TimeOfDay`` bucket.
    """
    hour = to_utc(timestamp).hour
    return bucket_for_hour(hour)


def bucket_for_hour(hour: int) -> TimeOfDay:
    """Return the time-of-day bucket for a UTC hour in 0–23."""
    if 5 <= hour < 8:
        return TimeOfDay.DAWN
    if 8 <= hour < 12:
        return TimeOfDay.MORNING
    if 12 <= hour < 15:
        return TimeOfDay.MIDDAY
    if 15 <= hour < 18:
        return TimeOfDay.AFTERNOON
    return TimeOfDay.EVENING


def round_half_up(value: float) -> int:
    """Round to the nearest integer, with .5 rounding away from zero for positives."""
    return int(math.floor(value + 0.5))


def to_utc(timestamp: datetime) -> datetime:
    """Return ``timestamp`` as an aware UTC datetime (naive input is assumed UTC)."""
    if timestamp.tzinfo is None:
        return timestamp.replace(tzinfo=timezone.utc)
    return timestamp.astimezone(timezone.utc)


def within_window(a: datetime, b: datetime, minutes: int) -> bool:
    """True when ``a`` and ``b`` are at most ``minutes`` apart."""
    return abs(to_utc(a) - to_utc(b)) <= timedelta(minutes=minutes)


def utcnow() -> datetime:
    """Return the current UTC datetime with timezone info.

    Prefer this over ``datetime.utcnow()`` (which returns naive datetimes).
    """
    return datetime.now(tz=timezone.utc)
