"""
Condition taxonomy for surf sessions and forecasts.

Dimensions:
  - ``WindOrientation`` - wind direction relative to the beach.
  - ``TimeOfDay``       - UTC-hour bucket of a window or session.
  - ``PerceivedWind``   - the surfer's own read of the wind, logged per session.

Model lifecycle labels:
  - ``ModelType``       - scoring phase, chosen purely by session count.
  - ``FitMethod``       - which regressor produced a ``UserModel``.
  - ``ModelConfidence`` - how much history backs the insights.

This module has NO imports from any other ``swellmind`` package.
"""

from enum import StrEnum


class WindOrientation(StrEnum):
    """Wind direction relative to the direction the beach faces."""

    OFFSHORE = "offshore"
    """Blowing from land to sea; grooms the wave face."""

    CROSS_OFFSHORE = "cross-offshore"
    CROSS = "cross"
    CROSS_ONSHORE = "cross-onshore"

    ONSHORE = "onshore"
    """Blowing from sea to land; chops up the surface."""


class TimeOfDay(StrEnum):
    """UTC-hour bucket.  Boundaries live in ``utils.time_utils.bucket_for_hour``."""

    DAWN = "dawn"
    MORNING = "morning"
    MIDDAY = "midday"
    AFTERNOON = "afternoon"
    EVENING = "evening"


class PerceivedWind(StrEnum):
    """Session-level wind feedback from the surfer."""

    TOO_ONSHORE = "too_onshore"
    JUST_RIGHT = "just_right"
    TOO_WEAK = "too_weak"


class ModelType(StrEnum):
    """Scoring phase for a user."""

    GENERIC = "generic"
    """Fewer than 3 sessions: heuristic scoring only."""

    BLENDED = "blended"
    """3–9 sessions: half heuristic, half learned."""

    LEARNED = "learned"
    """10 or more sessions: learned model only."""


class FitMethod(StrEnum):
    """Regressor that produced a user model."""

    OLS = "ols"
    FIXED = "fixed"


class ModelConfidence(StrEnum):
    """Confidence tier of derived insights."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
