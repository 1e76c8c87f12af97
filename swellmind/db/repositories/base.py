"""
Base repository with shared SQLite helpers.

Repositories receive an open ``sqlite3.Connection`` (usually from
``get_connection()``), keep all SQL explicit, and speak pydantic models
rather than raw rows.
"""

from __future__ import annotations

import logging
import sqlite3
from datetime import datetime
from typing import Any, Optional

from swellmind.utils.time_utils import to_utc

logger = logging.getLogger(__name__)

# Fixed width, microsecond precision; text order is time order
_TS_FORMAT = "%Y-%m-%dT%H:%M:%S.%fZ"


def format_ts(ts: Optional[datetime]) -> Optional[str]:
    """Store a datetime as sortable UTC text."""
    if ts is None:
        return None
    return to_utc(ts).strftime(_TS_FORMAT)


def parse_ts(value: Optional[str]) -> Optional[datetime]:
    """Inverse of ``format_ts``."""
    if value is None:
        return None
    return to_utc(datetime.fromisoformat(value))


class BaseRepository:
    """Shared SQL execution helpers.

    Attributes:
        conn: The active ``sqlite3.Connection``.
    """

    def __init__(self, conn: sqlite3.Connection) -> None:
        self.conn = conn

    def execute(
        self,
        sql: str,
        params: tuple[Any, ...] | dict[str, Any] = (),
    ) -> sqlite3.Cursor:
        logger.debug("SQL: %s | params: %s", sql.strip(), params)
        return self.conn.execute(sql, params)

    def fetchone(
        self,
        sql: str,
        params: tuple[Any, ...] | dict[str, Any] = (),
    ) -> Optional[sqlite3.Row]:
        """Execute a query and return the first row, or ``None``."""
        return self.execute(sql, params).fetchone()

    def fetchall(
        self,
        sql: str,
        params: tuple[Any, ...] | dict[str, Any] = (),
    ) -> list[sqlite3.Row]:
        """Execute a query and return all rows."""
        return self.execute(sql, params).fetchall()

    def last_insert_rowid(self) -> int:
        row = self.fetchone("SELECT last_insert_rowid() AS rowid;")
        assert row is not None
        return int(row["rowid"])
