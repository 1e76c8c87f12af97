"""
Repository for ``user_model_stats``.

The fitted model is stored as JSON in ``model_params``::

    {"coefficients": [...5 floats...], "intercept": 6.1, "fit_method": "ols"}

One row per user; every retrain overwrites it (last write wins).
"""

from __future__ import annotations

import logging
import sqlite3
from typing import Optional

from swellmind.db.repositories.base import BaseRepository, format_ts, parse_ts
from swellmind.models.scoring import UserModel, UserModelStats
from swellmind.taxonomy.conditions import ModelType

logger = logging.getLogger(__name__)


class ModelStatsRepository(BaseRepository):
    """Read/write access to ``user_model_stats``."""

    def upsert(self, stats: UserModelStats) -> None:
        self.execute(
            """
            INSERT INTO user_model_stats (
                user_id, num_sessions, model_type, model_params,
                last_trained_at, training_error, updated_at
            ) VALUES (?, ?, ?, ?, ?, ?, strftime('%Y-%m-%dT%H:%M:%SZ', 'now'))
            ON CONFLICT(user_id) DO UPDATE SET
                num_sessions    = excluded.num_sessions,
                model_type      = excluded.model_type,
                model_params    = excluded.model_params,
                last_trained_at = excluded.last_trained_at,
                training_error  = excluded.training_error,
                updated_at      = excluded.updated_at;
            """,
            (
                stats.user_id,
                stats.num_sessions,
                stats.model_type.value,
                stats.model.model_dump_json() if stats.model else None,
                format_ts(stats.last_trained_at),
                stats.training_error,
            ),
        )

    def get(self, user_id: str) -> Optional[UserModelStats]:
        row = self.fetchone("SELECT * FROM user_model_stats WHERE user_id = ?;", (user_id,))
        return _row_to_stats(row) if row else None


def _row_to_stats(row: sqlite3.Row) -> UserModelStats:
    params = row["model_params"]
    return UserModelStats(
        user_id=row["user_id"],
        num_sessions=row["num_sessions"],
        model_type=ModelType(row["model_type"]),
        model=UserModel.model_validate_json(params) if params else None,
        last_trained_at=parse_ts(row["last_trained_at"]),
        training_error=row["training_error"],
    )
