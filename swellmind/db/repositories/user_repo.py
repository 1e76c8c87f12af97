"""
Repository for ``users`` (profile preferences).
"""

from __future__ import annotations

import json
import logging
import sqlite3
from typing import Optional

from swellmind.db.repositories.base import BaseRepository
from swellmind.models.session import UserPreferences
from swellmind.taxonomy.conditions import TimeOfDay

logger = logging.getLogger(__name__)


class UserRepository(BaseRepository):
    """Read/write access to ``users``."""

    def upsert(self, user_id: str, prefs: UserPreferences) -> None:
        """Create a user or replace their stored preferences."""
        self.execute(
            """
            INSERT INTO users (
                user_id, ideal_wave_size_min, ideal_wave_size_max,
                crowd_tolerance, preferred_times_of_day, updated_at
            ) VALUES (?, ?, ?, ?, ?, strftime('%Y-%m-%dT%H:%M:%SZ', 'now'))
            ON CONFLICT(user_id) DO UPDATE SET
                ideal_wave_size_min    = excluded.ideal_wave_size_min,
                ideal_wave_size_max    = excluded.ideal_wave_size_max,
                crowd_tolerance        = excluded.crowd_tolerance,
                preferred_times_of_day = excluded.preferred_times_of_day,
                updated_at             = excluded.updated_at;
            """,
            (
                user_id,
                prefs.ideal_wave_size_min,
                prefs.ideal_wave_size_max,
                prefs.crowd_tolerance,
                json.dumps([t.value for t in prefs.preferred_times_of_day]),
            ),
        )

    def exists(self, user_id: str) -> bool:
        return self.fetchone("SELECT 1 FROM users WHERE user_id = ?;", (user_id,)) is not None

    def get_preferences(self, user_id: str) -> Optional[UserPreferences]:
        """Stored preferences, or ``None`` for an unknown user."""
        row = self.fetchone("SELECT * FROM users WHERE user_id = ?;", (user_id,))
        return _row_to_preferences(row) if row else None


def _row_to_preferences(row: sqlite3.Row) -> UserPreferences:
    return UserPreferences(
        ideal_wave_size_min=row["ideal_wave_size_min"],
        ideal_wave_size_max=row["ideal_wave_size_max"],
        crowd_tolerance=row["crowd_tolerance"],
        preferred_times_of_day=[TimeOfDay(t) for t in json.loads(row["preferred_times_of_day"])],
    )
