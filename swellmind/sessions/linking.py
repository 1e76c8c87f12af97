"""
Session-to-forecast linking and duplicate detection.

A logged session is linked to the spot's forecast window closest in time to
the session, as long as that window lies within ``window_minutes`` of it
(default ±90 minutes).  A session with no forecast inside that window is
stored unlinked and is ignored by training and insights.
"""

from __future__ import annotations

from datetime import datetime
from typing import Iterable, Optional

from swellmind.models.forecast import ForecastObservation
from swellmind.models.session import SessionRecord
from swellmind.utils.time_utils import to_utc, within_window

DEFAULT_LINK_WINDOW_MINUTES = 90
DEFAULT_DUPLICATE_WINDOW_MINUTES = 30


def find_nearest_forecast(
    forecasts: Iterable[ForecastObservation],
    timestamp: datetime,
    window_minutes: int = DEFAULT_LINK_WINDOW_MINUTES,
) -> Optional[ForecastObservation]:
    """Return the forecast closest to ``timestamp`` within the window.

    Ties go to the earlier forecast in ``forecasts``.

    Args:
        forecasts:      Candidate windows for the session's spot.
        timestamp:      Session time.
        window_minutes: Maximum allowed distance in minutes.

    Returns:
        The nearest ``ForecastObservation``, or ``None``.
    """
    target = to_utc(timestamp)
    candidates = [f for f in forecasts if within_window(f.timestamp, target, window_minutes)]
    if not candidates:
        return None
    return min(candidates, key=lambda f: abs(f.timestamp - target))


def find_duplicate(
    existing: Iterable[SessionRecord],
    spot_id: str,
    timestamp: datetime,
    window_minutes: int = DEFAULT_DUPLICATE_WINDOW_MINUTES,
    exclude_session_id: Optional[int] = None,
) -> Optional[SessionRecord]:
    """First session at the same spot within ``window_minutes`` of ``timestamp``.

    ``exclude_session_id`` skips the session being updated.
    """
    for s in existing:
        if exclude_session_id is not None and s.session_id == exclude_session_id:
            continue
        if s.spot_id == spot_id and within_window(s.surf_timestamp, timestamp, window_minutes):
            return s
    return None
