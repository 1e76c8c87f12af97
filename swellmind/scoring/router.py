"""
Scoring entry points: route a window to the right phase, rank many windows.

score_window()  : heuristic when the user has fewer than 3 sessions or no
                  model; blended/learned scorer otherwise.
rank_windows()  : score every window for a user.  Upcoming windows come
                  first, best score first; past windows follow, newest
                  first.  Each half is capped at ``limit``.
"""

from __future__ import annotations

from datetime import datetime
from typing import Iterable, Optional

from swellmind.config import PhaseConfig, ScoringConfig
from swellmind.models.forecast import ForecastObservation
from swellmind.models.scoring import ScoredWindow, ScoringResult, UserModel
from swellmind.models.session import UserPreferences
from swellmind.scoring.blended import calculate_learned_score
from swellmind.scoring.heuristic import calculate_generic_score
from swellmind.utils.time_utils import to_utc, utcnow

DEFAULT_WINDOW_LIMIT = 168


def score_window(
    forecast: ForecastObservation,
    prefs: UserPreferences,
    model: Optional[UserModel],
    num_sessions: int,
    scoring: ScoringConfig = ScoringConfig(),
    phases: PhaseConfig = PhaseConfig(),
) -> ScoringResult:
    """Score one window for one user, picking the phase by session count."""
    if num_sessions < phases.min_sessions_for_model or model is None:
        return calculate_generic_score(forecast, prefs, scoring)
    return calculate_learned_score(forecast, prefs, model, num_sessions, scoring, phases)


def rank_windows(
    forecasts: Iterable[ForecastObservation],
    prefs: UserPreferences,
    model: Optional[UserModel],
    num_sessions: int,
    now: Optional[datetime] = None,
    limit: int = DEFAULT_WINDOW_LIMIT,
    scoring: ScoringConfig = ScoringConfig(),
    phases: PhaseConfig = PhaseConfig(),
) -> list[ScoredWindow]:
    """Score and order a spot's forecast windows for display.

    Args:
        forecasts:    Windows to score.
        prefs:        User preferences.
        model:        User model, or ``None``.
        num_sessions: User's linked session count.
        now:          Reference time splitting future from past (default: now).
        limit:        Maximum windows kept on each side of ``now``.

    Returns:
        Upcoming windows by score descending (ties keep input order), then
        past windows newest first.
    """
    now_utc = to_utc(now) if now is not None else utcnow()

    scored = [
        ScoredWindow(
            forecast=f,
            result=score_window(f, prefs, model, num_sessions, scoring, phases),
        )
        for f in forecasts
    ]

    upcoming = [w for w in scored if w.forecast.timestamp >= now_utc]
    past     = [w for w in scored if w.forecast.timestamp <  now_utc]

    upcoming.sort(key=lambda w: w.result.score, reverse=True)
    past.sort(key=lambda w: w.forecast.timestamp, reverse=True)

    return upcoming[:limit] + past[:limit]
