"""
Repository for ``sessions``.

Reads join the linked forecast so callers always receive complete
``SessionRecord`` objects; ``forecast`` is ``None`` for unlinked sessions.
"""

from __future__ import annotations

import logging
import sqlite3
from typing import Optional

from swellmind.db.repositories.base import BaseRepository, format_ts, parse_ts
from swellmind.db.repositories.forecast_repo import FORECAST_COLUMNS, row_to_forecast
from swellmind.models.session import SessionRecord
from swellmind.taxonomy.conditions import PerceivedWind

logger = logging.getLogger(__name__)

_FORECAST_SELECT = ", ".join(f"f.{c} AS f_{c}" for c in FORECAST_COLUMNS)

_SELECT_SESSIONS = f"""
    SELECT s.*, {_FORECAST_SELECT}
    FROM sessions s
    LEFT JOIN forecast_observations f ON f.forecast_id = s.forecast_id
"""


class SessionRepository(BaseRepository):
    """Read/write access to ``sessions``."""

    def insert(self, session: SessionRecord) -> int:
        """Insert a session and return its ``session_id``."""
        self.execute(
            """
            INSERT INTO sessions (
                user_id, spot_id, surf_timestamp, rating, perceived_wind,
                perceived_size, perceived_crowd, notes, forecast_id
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?);
            """,
            _session_params(session),
        )
        return self.last_insert_rowid()

    def update(self, session: SessionRecord) -> bool:
        """Overwrite a stored session by ``session_id``.

        Returns:
            ``True`` if a row was updated.
        """
        cur = self.execute(
            """
            UPDATE sessions SET
                user_id = ?, spot_id = ?, surf_timestamp = ?, rating = ?,
                perceived_wind = ?, perceived_size = ?, perceived_crowd = ?,
                notes = ?, forecast_id = ?
            WHERE session_id = ?;
            """,
            (*_session_params(session), session.session_id),
        )
        return cur.rowcount > 0

    def delete(self, session_id: int) -> bool:
        """Delete a session; returns ``True`` if a row was removed."""
        cur = self.execute("DELETE FROM sessions WHERE session_id = ?;", (session_id,))
        return cur.rowcount > 0

    def get_by_id(self, session_id: int) -> Optional[SessionRecord]:
        row = self.fetchone(f"{_SELECT_SESSIONS} WHERE s.session_id = ?;", (session_id,))
        return _row_to_session(row) if row else None

    def get_for_user(self, user_id: str, linked_only: bool = False) -> list[SessionRecord]:
        """All sessions for a user, oldest first.

        Args:
            user_id:     Owner.
            linked_only: Only sessions with a linked forecast.
        """
        sql = f"{_SELECT_SESSIONS} WHERE s.user_id = ?"
        if linked_only:
            sql += " AND s.forecast_id IS NOT NULL"
        sql += " ORDER BY s.surf_timestamp, s.session_id;"
        return [_row_to_session(r) for r in self.fetchall(sql, (user_id,))]

    def count_linked(self, user_id: str) -> int:
        row = self.fetchone(
            """
            SELECT COUNT(*) AS n FROM sessions
            WHERE user_id = ? AND forecast_id IS NOT NULL;
            """,
            (user_id,),
        )
        return int(row["n"]) if row else 0


def _session_params(session: SessionRecord) -> tuple[object, ...]:
    return (
        session.user_id,
        session.spot_id,
        format_ts(session.surf_timestamp),
        session.rating,
        session.perceived_wind.value if session.perceived_wind else None,
        session.perceived_size,
        session.perceived_crowd,
        session.notes,
        session.forecast.forecast_id if session.forecast else None,
    )


def _row_to_session(row: sqlite3.Row) -> SessionRecord:
    wind = row["perceived_wind"]
    return SessionRecord(
        session_id=row["session_id"],
        user_id=row["user_id"],
        spot_id=row["spot_id"],
        surf_timestamp=parse_ts(row["surf_timestamp"]),
        rating=row["rating"],
        perceived_wind=PerceivedWind(wind) if wind else None,
        perceived_size=row["perceived_size"],
        perceived_crowd=row["perceived_crowd"],
        notes=row["notes"],
        forecast=row_to_forecast(row, prefix="f_") if row["f_forecast_id"] is not None else None,
        created_at=parse_ts(row["created_at"]),
    )
