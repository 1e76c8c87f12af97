"""
Background retraining after session writes.

The session write path never trains inline.  It publishes a
``SessionSetChanged`` event and returns; ``RetrainWorker`` consumes events
from a ``queue.Queue`` on a daemon thread and calls ``retrain_user()`` for
each one.

retrain_user()
--------------
  1. Read every linked session for the user in one query (the snapshot).
  2. ``train_user_model`` on the snapshot (``None`` below 3 sessions).
  3. Tag the phase with ``model_type_for_count`` and compute the in-sample
     training error.
  4. Upsert ``user_model_stats``.  Concurrent retrains for the same user
     are not serialised; whichever finishes last wins.

Failure handling
----------------
A failing retrain is logged with its traceback and counted in
``RetrainWorker.failures``.  It is never re-raised: the session write that
triggered it has already been committed and returned.
"""

from __future__ import annotations

import logging
import queue
import sqlite3
import threading
from dataclasses import dataclass
from typing import Callable, Optional

from swellmind.config import AppConfig
from swellmind.db.connection import get_connection
from swellmind.db.repositories.model_repo import ModelStatsRepository
from swellmind.db.repositories.session_repo import SessionRepository
from swellmind.ml.regressor import select_regressor
from swellmind.ml.trainer import model_type_for_count, train_user_model, training_error
from swellmind.models.scoring import UserModelStats
from swellmind.models.session import training_pairs
from swellmind.utils.time_utils import utcnow

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionSetChanged:
    """A user's session set was created, updated or deleted."""

    user_id: str


Publisher = Callable[[SessionSetChanged], None]


def retrain_user(conn: sqlite3.Connection, user_id: str, config: AppConfig) -> UserModelStats:
    """Retrain one user's model from their stored sessions and persist it.

    Args:
        conn:    Open connection.  The stats row is written but not committed.
        user_id: User to retrain.
        config:  Application config (regressor choice, phase thresholds).

    Returns:
        The ``UserModelStats`` that was stored.
    """
    pairs = training_pairs(SessionRepository(conn).get_for_user(user_id, linked_only=True))

    model = train_user_model(
        pairs,
        regressor=select_regressor(config.training.regressor),
        phases=config.phases,
    )

    stats = UserModelStats(
        user_id=user_id,
        num_sessions=len(pairs),
        model_type=model_type_for_count(len(pairs), config.phases),
        model=model,
        last_trained_at=utcnow() if model is not None else None,
        training_error=training_error(pairs, model) if model is not None else None,
    )
    ModelStatsRepository(conn).upsert(stats)

    logger.info(
        "Retrained user=%s sessions=%d type=%s fit=%s",
        user_id,
        stats.num_sessions,
        stats.model_type.value,
        model.fit_method.value if model else "none",
        extra={"user_id": user_id},
    )
    return stats


class RetrainWorker:
    """Consumes ``SessionSetChanged`` events and retrains off the write path.

    Usage::

        worker = RetrainWorker(config)
        worker.start()
        service = SessionService(conn, publish=worker.publish)
        ...
        worker.stop()

    Without ``start()``, events stay queued until ``drain()`` processes them
    on the calling thread.

    Attributes:
        processed: Events handled successfully.
        failures:  Events whose retrain raised.
    """

    def __init__(
        self,
        config: AppConfig,
        db_path: Optional[str] = None,
        handler: Optional[Callable[[str], object]] = None,
    ) -> None:
        self.config = config
        self.db_path = db_path or config.database.db_path
        self._handler = handler or self._retrain_from_db
        self._queue: queue.Queue[Optional[SessionSetChanged]] = queue.Queue()
        self._thread: Optional[threading.Thread] = None
        self._lock = threading.Lock()
        self.processed = 0
        self.failures = 0

    # ── Public API ────────────────────────────────────────────────────────────

    def publish(self, event: SessionSetChanged) -> None:
        """Enqueue an event.  Never blocks and never raises."""
        self._queue.put(event)

    def start(self) -> None:
        if self._thread is not None and self._thread.is_alive():
            return
        self._thread = threading.Thread(
            target=self._run, name="swellmind-retrain", daemon=True
        )
        self._thread.start()
        logger.debug("Retrain worker started.")

    def stop(self, timeout: float = 5.0) -> None:
        """Finish queued events, then stop the background thread."""
        if self._thread is None:
            return
        self._queue.put(None)
        self._thread.join(timeout)
        self._thread = None
        logger.debug("Retrain worker stopped.")

    def join(self) -> None:
        """Block until every queued event has been handled."""
        self._queue.join()

    def drain(self) -> int:
        """Handle all pending events on the calling thread.

        Returns:
            Number of events handled (successful or failed).
        """
        handled = 0
        while True:
            try:
                event = self._queue.get_nowait()
            except queue.Empty:
                return handled
            try:
                if event is None:
                    # A stop() sentinel belongs to the background thread.
                    self._queue.put(None)
                    return handled
                self._handle(event)
                handled += 1
            finally:
                self._queue.task_done()

    # ── Internals ─────────────────────────────────────────────────────────────

    def _run(self) -> None:
        while True:
            event = self._queue.get()
            try:
                if event is None:
                    return
                self._handle(event)
            finally:
                self._queue.task_done()

    def _handle(self, event: SessionSetChanged) -> None:
        try:
            self._handler(event.user_id)
        except Exception:
            with self._lock:
                self.failures += 1
            logger.error("Retrain failed for user=%s", event.user_id, exc_info=True)
            return
        with self._lock:
            self.processed += 1

    def _retrain_from_db(self, user_id: str) -> UserModelStats:
        with get_connection(
            self.db_path,
            wal_mode=self.config.database.wal_mode,
            busy_timeout_ms=self.config.database.busy_timeout_ms,
        ) as conn:
            return retrain_user(conn, user_id, self.config)
