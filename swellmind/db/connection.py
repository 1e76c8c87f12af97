"""
SQLite connection management.

``get_connection()`` yields a connection with foreign keys enforced, WAL
journaling (for file databases), a busy timeout and ``sqlite3.Row`` rows.
It commits on clean exit and rolls back on exception.

Usage::

    from swellmind.db.connection import get_connection

    with get_connection("data/db/swellmind.db") as conn:
        SessionRepository(conn).get_for_user("u-1")
"""

from __future__ import annotations

import logging
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Generator

logger = logging.getLogger(__name__)


@contextmanager
def get_connection(
    db_path: str,
    wal_mode: bool = True,
    busy_timeout_ms: int = 5000,
) -> Generator[sqlite3.Connection, None, None]:
    """Context manager yielding a configured SQLite connection.

    Args:
        db_path: Path to the database file, or ``":memory:"``.  Parent
            directories are created as needed.
        wal_mode: Enable WAL journal mode (ignored for in-memory databases).
        busy_timeout_ms: How long to wait on a locked database.

    Yields:
        An open ``sqlite3.Connection``.

    Raises:
        sqlite3.OperationalError: If the database cannot be opened or is locked.
    """
    in_memory = db_path == ":memory:"
    if not in_memory:
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)

    # The retrain worker opens its own connections on another thread.
    conn = sqlite3.connect(db_path, timeout=busy_timeout_ms / 1000)
    conn.row_factory = sqlite3.Row

    try:
        conn.execute("PRAGMA foreign_keys = ON;")
        conn.execute(f"PRAGMA busy_timeout = {busy_timeout_ms};")
        if wal_mode and not in_memory:
            conn.execute("PRAGMA journal_mode = WAL;")

        yield conn
        conn.commit()

    except Exception:
        conn.rollback()
        raise

    finally:
        conn.close()
