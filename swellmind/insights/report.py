"""
Insights report: ``UserInsights`` plus the statistics shown next to it.

build_insights_report() takes every session a user logged and produces:

  - insights           : calculate_user_insights() over linked sessions
  - message            : "log N more session(s)" text while below the
                         insights threshold, else ``None``
  - rating_distribution: counts of ratings 1..10 (linked sessions)
  - sessions_by_spot   : session count per spot (all sessions)
  - best_spot          : highest average rating among spots with >= 2
                         sessions; otherwise the most frequented spot
  - trend              : last 30 days vs the 30 days before; "improving"
                         or "declining" past a 0.5 rating-point gap,
                         else "stable"
  - recommendations    : short advice strings derived from the insights

Pure function; no DB or I/O.
"""

from __future__ import annotations

import math
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Optional

from swellmind.config import InsightsConfig, PhaseConfig
from swellmind.insights.aggregator import calculate_user_insights
from swellmind.models.scoring import UserInsights
from swellmind.models.session import SessionRecord, training_pairs
from swellmind.taxonomy.conditions import ModelConfidence
from swellmind.utils.time_utils import to_utc, utcnow

TREND_WINDOW_DAYS = 30
TREND_THRESHOLD = 0.5
BEST_SPOT_MIN_SESSIONS = 2
VARIETY_SESSION_TARGET = 20


@dataclass(frozen=True)
class SpotSummary:
    """Average rating for one spot."""

    spot_id: str
    session_count: int
    avg_rating: float


@dataclass
class InsightsReport:
    """Everything the insights view needs for one user."""

    insights:            Optional[UserInsights]
    total_sessions:      int
    sessions_needed:     int
    message:             Optional[str] = None
    sessions_last_30_days: int = 0
    rating_distribution: list[int] = field(default_factory=lambda: [0] * 10)
    sessions_by_spot:    dict[str, int] = field(default_factory=dict)
    best_spot:           Optional[SpotSummary] = None
    trend:               str = "stable"
    recommendations:     list[str] = field(default_factory=list)


def insufficient_sessions_message(logged: int, needed: int) -> Optional[str]:
    """User-facing text for a history below the insights threshold."""
    if logged >= needed:
        return None
    if logged == 0:
        return "Log some sessions to see your insights!"
    return f"Log {needed - logged} more session(s) to unlock insights"


def best_spot(sessions: list[SessionRecord]) -> Optional[SpotSummary]:
    """Best-rated spot with enough sessions, else the most frequented one."""
    ratings: dict[str, list[int]] = {}
    for s in sessions:
        ratings.setdefault(s.spot_id, []).append(s.rating)
    if not ratings:
        return None

    summaries = [
        SpotSummary(spot_id=spot, session_count=len(r), avg_rating=math.fsum(r) / len(r))
        for spot, r in ratings.items()
    ]

    eligible = [s for s in summaries if s.session_count >= BEST_SPOT_MIN_SESSIONS]
    if eligible:
        # max() keeps the first of equal averages
        return max(eligible, key=lambda s: s.avg_rating)
    return max(summaries, key=lambda s: s.session_count)


def rating_trend(
    sessions: list[SessionRecord],
    now: datetime,
) -> tuple[str, int]:
    """Compare the last 30 days with the previous 30.

    Returns:
        Tuple ``(trend, sessions_in_last_30_days)``.
    """
    recent_start = now - timedelta(days=TREND_WINDOW_DAYS)
    older_start  = now - timedelta(days=2 * TREND_WINDOW_DAYS)

    recent = [s.rating for s in sessions if s.surf_timestamp >= recent_start]
    older  = [
        s.rating for s in sessions
        if older_start <= s.surf_timestamp < recent_start
    ]

    trend = "stable"
    if recent and older:
        recent_avg = math.fsum(recent) / len(recent)
        older_avg  = math.fsum(older) / len(older)
        if recent_avg > older_avg + TREND_THRESHOLD:
            trend = "improving"
        elif recent_avg < older_avg - TREND_THRESHOLD:
            trend = "declining"
    return trend, len(recent)


def build_recommendations(
    insights: Optional[UserInsights],
    session_count: int,
    phases: PhaseConfig = PhaseConfig(),
) -> list[str]:
    """Short advice strings for the insights view."""
    if insights is None:
        return ["Log more sessions to get personalized recommendations"]

    recs: list[str] = []
    if insights.model_confidence == ModelConfidence.LOW:
        remaining = phases.learned_threshold - session_count
        if remaining > 0:
            recs.append(f"Log {remaining} more sessions for fully personalized predictions")

    recs.append(
        f"Look for {insights.ideal_wave_height_min:.1f}-{insights.ideal_wave_height_max:.1f}m "
        f"waves with {insights.preferred_wind.value} winds"
    )
    recs.append(
        f"Your best sessions are usually in the {insights.preferred_time_of_day.value}"
    )
    if insights.total_sessions < VARIETY_SESSION_TARGET:
        recs.append(
            "Try different spots and conditions to help the model learn your preferences"
        )
    return recs


def build_insights_report(
    sessions: list[SessionRecord],
    now: Optional[datetime] = None,
    config: InsightsConfig = InsightsConfig(),
    phases: PhaseConfig = PhaseConfig(),
) -> InsightsReport:
    """Assemble the insights report for one user's full session list.

    Args:
        sessions: Every session the user logged, linked or not.
        now:      Reference time for the trend window (default: now).
        config:   Insights thresholds.
        phases:   Session-count thresholds (for the "log N more" advice).

    Returns:
        ``InsightsReport``; ``insights`` is ``None`` below the thresholds.
    """
    now_utc = to_utc(now) if now is not None else utcnow()
    linked = [s for s in sessions if s.is_linked]

    report = InsightsReport(
        insights=None,
        total_sessions=len(linked),
        sessions_needed=config.min_sessions,
        message=insufficient_sessions_message(len(linked), config.min_sessions),
    )
    if report.message is not None:
        return report

    report.insights = calculate_user_insights(training_pairs(linked), config)

    for s in linked:
        report.rating_distribution[s.rating - 1] += 1

    report.sessions_by_spot = dict(Counter(s.spot_id for s in sessions))
    report.best_spot = best_spot(sessions)
    report.trend, report.sessions_last_30_days = rating_trend(linked, now_utc)
    report.recommendations = build_recommendations(report.insights, len(linked), phases)
    return report
