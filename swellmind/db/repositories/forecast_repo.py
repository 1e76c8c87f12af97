"""
Repository for ``forecast_observations``.
"""

from __future__ import annotations

import logging
import sqlite3
from datetime import datetime
from typing import Optional

from swellmind.db.repositories.base import BaseRepository, format_ts, parse_ts
from swellmind.models.forecast import ForecastObservation
from swellmind.taxonomy.conditions import WindOrientation

logger = logging.getLogger(__name__)

FORECAST_COLUMNS = (
    "forecast_id", "spot_id", "timestamp", "wave_height", "wave_period",
    "wave_direction", "wind_speed", "wind_direction", "wind_orientation",
    "data_source",
)


class ForecastRepository(BaseRepository):
    """Read/write access to ``forecast_observations``."""

    def upsert(self, obs: ForecastObservation) -> int:
        """Insert a forecast window, or refresh it if the window already exists.

        A window is identified by ``(spot_id, timestamp, data_source)``.  A
        window that a logged session is linked to is never refreshed: its
        stored readings are what the user's model was trained on.

        Args:
            obs: The observation to persist.  ``spot_id`` is required.

        Returns:
            The ``forecast_id`` (existing or new).

        Raises:
            ValueError: If ``obs.spot_id`` is not set.
        """
        if obs.spot_id is None:
            raise ValueError("Cannot store a forecast observation without a spot_id.")

        ts = format_ts(obs.timestamp)
        cursor = self.execute(
            """
            INSERT INTO forecast_observations (
                spot_id, timestamp, wave_height, wave_period, wave_direction,
                wind_speed, wind_direction, wind_orientation, data_source
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
            ON CONFLICT(spot_id, timestamp, data_source) DO UPDATE SET
                wave_height      = excluded.wave_height,
                wave_period      = excluded.wave_period,
                wave_direction   = excluded.wave_direction,
                wind_speed       = excluded.wind_speed,
                wind_direction   = excluded.wind_direction,
                wind_orientation = excluded.wind_orientation
            WHERE NOT EXISTS (
                SELECT 1 FROM sessions
                WHERE sessions.forecast_id = forecast_observations.forecast_id
            );
            """,
            (
                obs.spot_id,
                ts,
                obs.wave_height,
                obs.wave_period,
                obs.wave_direction,
                obs.wind_speed,
                obs.wind_direction,
                obs.wind_orientation.value if obs.wind_orientation else None,
                obs.data_source,
            ),
        )
        if cursor.rowcount == 0:
            logger.debug(
                "Kept linked forecast window spot=%s ts=%s; new readings ignored.",
                obs.spot_id, ts,
            )
        row = self.fetchone(
            """
            SELECT forecast_id FROM forecast_observations
            WHERE spot_id = ? AND timestamp = ? AND data_source = ?;
            """,
            (obs.spot_id, ts, obs.data_source),
        )
        assert row is not None
        return int(row["forecast_id"])

    def upsert_batch(self, observations: list[ForecastObservation]) -> int:
        """Upsert many observations; returns how many were written."""
        for obs in observations:
            self.upsert(obs)
        logger.debug("Upserted %d forecast observations.", len(observations))
        return len(observations)

    def get_by_id(self, forecast_id: int) -> Optional[ForecastObservation]:
        row = self.fetchone(
            "SELECT * FROM forecast_observations WHERE forecast_id = ?;",
            (forecast_id,),
        )
        return row_to_forecast(row) if row else None

    def get_for_spot(
        self,
        spot_id: str,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> list[ForecastObservation]:
        """Windows for a spot in ``[start, end]``, oldest first.

        Args:
            spot_id: Spot to query.
            start:   Inclusive lower bound, or ``None`` for no bound.
            end:     Inclusive upper bound, or ``None`` for no bound.
        """
        sql = "SELECT * FROM forecast_observations WHERE spot_id = ?"
        params: list[object] = [spot_id]
        if start is not None:
            sql += " AND timestamp >= ?"
            params.append(format_ts(start))
        if end is not None:
            sql += " AND timestamp <= ?"
            params.append(format_ts(end))
        sql += " ORDER BY timestamp, forecast_id;"
        return [row_to_forecast(r) for r in self.fetchall(sql, tuple(params))]

    def count(self) -> int:
        row = self.fetchone("SELECT COUNT(*) AS n FROM forecast_observations;")
        return int(row["n"]) if row else 0


def row_to_forecast(row: sqlite3.Row, prefix: str = "") -> ForecastObservation:
    """Build a ``ForecastObservation`` from a row.

    ``prefix`` selects aliased columns (``f_timestamp`` ...) in joined queries.
    """
    orientation = row[f"{prefix}wind_orientation"]
    return ForecastObservation(
        forecast_id=row[f"{prefix}forecast_id"],
        spot_id=row[f"{prefix}spot_id"],
        timestamp=parse_ts(row[f"{prefix}timestamp"]),
        wave_height=row[f"{prefix}wave_height"],
        wave_period=row[f"{prefix}wave_period"],
        wave_direction=row[f"{prefix}wave_direction"],
        wind_speed=row[f"{prefix}wind_speed"],
        wind_direction=row[f"{prefix}wind_direction"],
        wind_orientation=WindOrientation(orientation) if orientation else None,
        data_source=row[f"{prefix}data_source"],
    )
