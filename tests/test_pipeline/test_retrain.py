"""
Tests for swellmind/pipeline/retrain.py.

What we test
------------
retrain_user():
  - Below 3 linked sessions: GENERIC stats with no model.
  - 3-9 linked sessions: BLENDED with a fitted model and training error.
  - Unlinked sessions are not counted.
  - A second retrain overwrites the first (last write wins).

RetrainWorker:
  - drain() handles queued events on the calling thread.
  - A failing handler is logged and counted, never raised.
  - The background thread processes events published by SessionService
    against a file database, and stop() ends it.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone

import pytest

from swellmind.config import AppConfig, DatabaseConfig, TrainingConfig
from swellmind.db.connection import get_connection
from swellmind.db.repositories.forecast_repo import ForecastRepository
from swellmind.db.repositories.model_repo import ModelStatsRepository
from swellmind.db.repositories.session_repo import SessionRepository
from swellmind.db.repositories.user_repo import UserRepository
from swellmind.db.schema import apply_schema
from swellmind.models.session import UserPreferences
from swellmind.pipeline.retrain import RetrainWorker, SessionSetChanged, retrain_user
from swellmind.sessions.service import SessionService
from swellmind.taxonomy.conditions import FitMethod, ModelType

T0 = datetime(2026, 3, 1, 7, 0, tzinfo=timezone.utc)


def _seed(conn, make_forecast, make_session, ratings, linked=True) -> None:
    """Store one session per rating, one day apart, each with its own forecast."""
    UserRepository(conn).upsert("alice", UserPreferences())
    forecasts = ForecastRepository(conn)
    sessions = SessionRepository(conn)
    for day, rating in enumerate(ratings):
        ts = T0 + timedelta(days=day)
        forecast = None
        if linked:
            fid = forecasts.upsert(make_forecast(timestamp=ts, wave_height=0.8 + 0.3 * day))
            forecast = forecasts.get_by_id(fid)
        sessions.insert(make_session(surf_timestamp=ts, rating=rating, forecast=forecast))


# ── retrain_user ──────────────────────────────────────────────────────────────

class TestRetrainUser:
    def test_too_few_sessions(self, in_memory_db, make_forecast, make_session):
        _seed(in_memory_db, make_forecast, make_session, [7, 8])
        stats = retrain_user(in_memory_db, "alice", AppConfig())
        assert stats.num_sessions == 2
        assert stats.model_type == ModelType.GENERIC
        assert stats.model is None
        assert stats.last_trained_at is None
        assert ModelStatsRepository(in_memory_db).get("alice") == stats

    def test_blended_model(self, in_memory_db, make_forecast, make_session):
        _seed(in_memory_db, make_forecast, make_session, [4, 6, 8, 9])
        stats = retrain_user(in_memory_db, "alice", AppConfig())
        assert stats.num_sessions == 4
        assert stats.model_type == ModelType.BLENDED
        assert stats.model is not None
        assert stats.training_error is not None and stats.training_error >= 0.0

    def test_learned_phase(self, in_memory_db, make_forecast, make_session):
        _seed(in_memory_db, make_forecast, make_session, [5, 6, 7, 8, 9, 5, 6, 7, 8, 9])
        assert retrain_user(in_memory_db, "alice", AppConfig()).model_type == ModelType.LEARNED

    def test_unlinked_sessions_ignored(self, in_memory_db, make_forecast, make_session):
        _seed(in_memory_db, make_forecast, make_session, [7, 8, 9], linked=False)
        stats = retrain_user(in_memory_db, "alice", AppConfig())
        assert stats.num_sessions == 0
        assert stats.model is None

    def test_configured_regressor(self, in_memory_db, make_forecast, make_session):
        _seed(in_memory_db, make_forecast, make_session, [4, 6, 8])
        config = AppConfig(training=TrainingConfig(regressor="fixed"))
        stats = retrain_user(in_memory_db, "alice", config)
        assert stats.model.fit_method == FitMethod.FIXED
        assert stats.model.intercept == pytest.approx(6.0)

    def test_last_write_wins(self, in_memory_db, make_forecast, make_session):
        _seed(in_memory_db, make_forecast, make_session, [4, 6, 8])
        retrain_user(in_memory_db, "alice", AppConfig())
        in_memory_db.execute("DELETE FROM sessions WHERE rating = 8;")
        retrain_user(in_memory_db, "alice", AppConfig())
        stored = ModelStatsRepository(in_memory_db).get("alice")
        assert stored.num_sessions == 2
        assert stored.model is None


# ── RetrainWorker ─────────────────────────────────────────────────────────────

class TestRetrainWorker:
    def test_drain_handles_pending_events(self):
        seen: list[str] = []
        worker = RetrainWorker(AppConfig(), handler=seen.append)
        worker.publish(SessionSetChanged("alice"))
        worker.publish(SessionSetChanged("bob"))

        assert worker.drain() == 2
        assert seen == ["alice", "bob"]
        assert worker.processed == 2
        assert worker.drain() == 0

    def test_failures_are_logged_and_counted(self, caplog):
        def _boom(user_id: str) -> None:
            raise RuntimeError(f"cannot retrain {user_id}")

        worker = RetrainWorker(AppConfig(), handler=_boom)
        worker.publish(SessionSetChanged("alice"))

        with caplog.at_level(logging.ERROR, logger="swellmind.pipeline.retrain"):
            assert worker.drain() == 1

        assert worker.failures == 1
        assert worker.processed == 0
        assert "Retrain failed for user=alice" in caplog.text

    def test_background_thread_with_file_db(self, tmp_path, make_forecast, make_session):
        db_path = str(tmp_path / "swellmind.db")
        config = AppConfig(database=DatabaseConfig(db_path=db_path))

        with get_connection(db_path) as conn:
            apply_schema(conn)
            UserRepository(conn).upsert("alice", UserPreferences())
            forecasts = ForecastRepository(conn)
            for day in range(3):
                forecasts.upsert(make_forecast(timestamp=T0 + timedelta(days=day), wave_height=1.0 + day))

        worker = RetrainWorker(config)
        worker.start()
        try:
            with get_connection(db_path) as conn:
                service = SessionService(conn, publish=worker.publish)
                for day, rating in enumerate([5, 7, 9]):
                    service.log_session(make_session(
                        surf_timestamp=T0 + timedelta(days=day, minutes=15),
                        rating=rating,
                        forecast=None,
                    ))
            worker.join()
        finally:
            worker.stop()

        assert worker.failures == 0
        assert worker.processed == 3

        with get_connection(db_path) as conn:
            stats = ModelStatsRepository(conn).get("alice")
        assert stats.num_sessions == 3
        assert stats.model_type == ModelType.BLENDED
        assert stats.model is not None
