"""
SQLite schema DDL.

Every statement uses ``IF NOT EXISTS``, so ``apply_schema()`` is idempotent.

Tables, in foreign-key order:
  1. users                  (no FKs)
  2. forecast_observations  (no FKs)
  3. sessions               (-> users, forecast_observations)
  4. user_model_stats       (-> users)

Timestamps are stored as ``YYYY-MM-DDTHH:MM:SSZ`` UTC text so that string
comparison matches time order.
"""

from __future__ import annotations

import logging
import sqlite3

logger = logging.getLogger(__name__)

# ── DDL statements ─────────────────────────────────────────────────────────────

_DDL_USERS = """
CREATE TABLE IF NOT EXISTS users (
    user_id                 TEXT    PRIMARY KEY,
    ideal_wave_size_min     REAL    NOT NULL DEFAULT 0.5,
    ideal_wave_size_max     REAL    NOT NULL DEFAULT 1.5,
    crowd_tolerance         INTEGER NOT NULL DEFAULT 5
                                    CHECK (crowd_tolerance BETWEEN 1 AND 10),
    preferred_times_of_day  TEXT    NOT NULL DEFAULT '[]',
    created_at              TEXT    NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ', 'now')),
    updated_at              TEXT    NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ', 'now'))
);
"""

_DDL_FORECASTS = """
CREATE TABLE IF NOT EXISTS forecast_observations (
    forecast_id       INTEGER PRIMARY KEY AUTOINCREMENT,
    spot_id           TEXT    NOT NULL,
    timestamp         TEXT    NOT NULL,
    wave_height       REAL,
    wave_period       REAL,
    wave_direction    REAL,
    wind_speed        REAL,
    wind_direction    REAL,
    wind_orientation  TEXT,
    data_source       TEXT    NOT NULL DEFAULT 'open-meteo',
    created_at        TEXT    NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ', 'now')),
    UNIQUE (spot_id, timestamp, data_source)
);
CREATE INDEX IF NOT EXISTS idx_forecast_spot_time
    ON forecast_observations (spot_id, timestamp);
"""

_DDL_SESSIONS = """
CREATE TABLE IF NOT EXISTS sessions (
    session_id       INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id          TEXT    NOT NULL REFERENCES users(user_id) ON DELETE CASCADE,
    spot_id          TEXT    NOT NULL,
    surf_timestamp   TEXT    NOT NULL,
    rating           INTEGER NOT NULL CHECK (rating BETWEEN 1 AND 10),
    perceived_wind   TEXT,
    perceived_size   INTEGER CHECK (perceived_size BETWEEN 1 AND 10),
    perceived_crowd  INTEGER CHECK (perceived_crowd BETWEEN 1 AND 10),
    notes            TEXT,
    forecast_id      INTEGER REFERENCES forecast_observations(forecast_id) ON DELETE SET NULL,
    created_at       TEXT    NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ', 'now'))
);
CREATE INDEX IF NOT EXISTS idx_sessions_user_time
    ON sessions (user_id, surf_timestamp);
"""

_DDL_MODEL_STATS = """
CREATE TABLE IF NOT EXISTS user_model_stats (
    user_id          TEXT    PRIMARY KEY REFERENCES users(user_id) ON DELETE CASCADE,
    num_sessions     INTEGER NOT NULL DEFAULT 0,
    model_type       TEXT    NOT NULL,
    model_params     TEXT,
    last_trained_at  TEXT,
    training_error   REAL,
    updated_at       TEXT    NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ', 'now'))
);
"""

_ALL_DDL: list[str] = [
    _DDL_USERS,
    _DDL_FORECASTS,
    _DDL_SESSIONS,
    _DDL_MODEL_STATS,
]

ALL_TABLE_NAMES = [
    "users",
    "forecast_observations",
    "sessions",
    "user_model_stats",
]


def apply_schema(conn: sqlite3.Connection) -> None:
    """Apply all DDL statements to ``conn``.  Safe to call repeatedly."""
    logger.debug("Applying schema to database...")

    for ddl in _ALL_DDL:
        for statement in _split_ddl(ddl):
            conn.execute(statement)

    conn.commit()
    logger.info("Schema applied: %d tables, indexes created/verified.", len(ALL_TABLE_NAMES))


def _split_ddl(ddl: str) -> list[str]:
    """Split a multi-statement DDL block on semicolons."""
    return [s.strip() for s in ddl.split(";") if s.strip()]


def get_existing_tables(conn: sqlite3.Connection) -> list[str]:
    """Return table names present in the database, sorted alphabetically."""
    rows = conn.execute(
        "SELECT name FROM sqlite_master WHERE type='table' ORDER BY name;"
    ).fetchall()
    return [row["name"] for row in rows]
