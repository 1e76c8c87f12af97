"""
Session write path: log, update and delete surf sessions.

Every successful mutation is committed first and then announced with a
``SessionSetChanged`` event, so a retrain triggered by the event always
sees the write.  Retraining itself happens elsewhere (see
``pipeline.retrain.RetrainWorker``); nothing here trains a model.

Rules
-----
- The user must exist.
- A session at the same spot within ±30 minutes of another session by the
  same user is rejected as a duplicate.
- The session is linked to the spot's nearest forecast window within ±90
  minutes; when none exists it is stored unlinked.
"""

from __future__ import annotations

import logging
import sqlite3
from datetime import datetime, timedelta
from typing import Optional

from swellmind.config import SessionConfig
from swellmind.db.repositories.forecast_repo import ForecastRepository
from swellmind.db.repositories.session_repo import SessionRepository
from swellmind.db.repositories.user_repo import UserRepository
from swellmind.models.forecast import ForecastObservation
from swellmind.models.session import SessionRecord
from swellmind.pipeline.retrain import Publisher, SessionSetChanged
from swellmind.sessions.linking import find_duplicate, find_nearest_forecast

logger = logging.getLogger(__name__)


# ── Custom exceptions ─────────────────────────────────────────────────────────


class DuplicateSessionError(ValueError):
    """Raised when a session collides with an existing one at the same spot.

    Attributes:
        spot_id:             Spot of the rejected session.
        surf_timestamp:      Time of the rejected session.
        existing_session_id: The session it collides with.
    """

    def __init__(self, spot_id: str, surf_timestamp: datetime, existing_session_id: Optional[int]) -> None:
        self.spot_id             = spot_id
        self.surf_timestamp      = surf_timestamp
        self.existing_session_id = existing_session_id
        super().__init__(
            f"A session at '{spot_id}' near {surf_timestamp.isoformat()} already exists "
            f"(session_id={existing_session_id})."
        )


class SessionNotFoundError(LookupError):
    """Raised when updating or deleting a session that does not exist."""

    def __init__(self, session_id: int) -> None:
        self.session_id = session_id
        super().__init__(f"Session {session_id} not found.")


class UserNotFoundError(LookupError):
    """Raised when logging a session for an unknown user."""

    def __init__(self, user_id: str) -> None:
        self.user_id = user_id
        super().__init__(f"User '{user_id}' not found. Create it with add-user first.")


# ── Service ───────────────────────────────────────────────────────────────────


class SessionService:
    """Validated session mutations over an open connection.

    Args:
        conn:    Open SQLite connection.  Each mutation commits on it.
        publish: Receives a ``SessionSetChanged`` after every committed
                 mutation.  ``None`` disables publishing.
        config:  Link and duplicate windows.
    """

    def __init__(
        self,
        conn: sqlite3.Connection,
        publish: Optional[Publisher] = None,
        config: SessionConfig = SessionConfig(),
    ) -> None:
        self.conn = conn
        self.config = config
        self._publish = publish
        self._sessions = SessionRepository(conn)
        self._forecasts = ForecastRepository(conn)
        self._users = UserRepository(conn)

    def log_session(self, session: SessionRecord) -> SessionRecord:
        """Store a new session, linked to its nearest forecast.

        Returns:
            The stored record, with ``session_id`` and ``forecast`` set.

        Raises:
            UserNotFoundError: If the user does not exist.
            DuplicateSessionError: If a session at the same spot is too close in time.
        """
        if not self._users.exists(session.user_id):
            raise UserNotFoundError(session.user_id)
        self._reject_duplicate(session)

        linked = session.model_copy(update={
            "session_id": None,
            "forecast": self.link_forecast(session.spot_id, session.surf_timestamp),
        })
        session_id = self._sessions.insert(linked)
        self.conn.commit()

        stored = self._sessions.get_by_id(session_id)
        assert stored is not None
        logger.info(
            "Logged session %d for user=%s spot=%s linked=%s",
            session_id, stored.user_id, stored.spot_id, stored.is_linked,
        )
        self._notify(stored.user_id)
        return stored

    def update_session(self, session: SessionRecord) -> SessionRecord:
        """Overwrite an existing session, re-linking its forecast.

        ``session.session_id`` selects the row; the owner cannot change.

        Raises:
            SessionNotFoundError: If ``session_id`` is unknown.
            DuplicateSessionError: If the new spot/time collides with another session.
        """
        if session.session_id is None:
            raise ValueError("update_session requires a session_id.")
        existing = self._sessions.get_by_id(session.session_id)
        if existing is None:
            raise SessionNotFoundError(session.session_id)

        candidate = session.model_copy(update={"user_id": existing.user_id})
        self._reject_duplicate(candidate, exclude_session_id=existing.session_id)

        updated = candidate.model_copy(update={
            "forecast": self.link_forecast(candidate.spot_id, candidate.surf_timestamp),
        })
        self._sessions.update(updated)
        self.conn.commit()

        stored = self._sessions.get_by_id(session.session_id)
        assert stored is not None
        logger.info("Updated session %d for user=%s", session.session_id, stored.user_id)
        self._notify(stored.user_id)
        return stored

    def delete_session(self, session_id: int) -> SessionRecord:
        """Delete a session.

        Returns:
            The record as it was before deletion.

        Raises:
            SessionNotFoundError: If ``session_id`` is unknown.
        """
        existing = self._sessions.get_by_id(session_id)
        if existing is None:
            raise SessionNotFoundError(session_id)

        self._sessions.delete(session_id)
        self.conn.commit()

        logger.info("Deleted session %d for user=%s", session_id, existing.user_id)
        self._notify(existing.user_id)
        return existing

    def link_forecast(self, spot_id: str, timestamp: datetime) -> Optional[ForecastObservation]:
        """Nearest stored forecast for the spot within the link window."""
        window = timedelta(minutes=self.config.forecast_link_window_minutes)
        candidates = self._forecasts.get_for_spot(
            spot_id, start=timestamp - window, end=timestamp + window
        )
        return find_nearest_forecast(
            candidates, timestamp, self.config.forecast_link_window_minutes
        )

    # ── Internals ─────────────────────────────────────────────────────────────

    def _reject_duplicate(
        self,
        session: SessionRecord,
        exclude_session_id: Optional[int] = None,
    ) -> None:
        duplicate = find_duplicate(
            self._sessions.get_for_user(session.user_id),
            session.spot_id,
            session.surf_timestamp,
            self.config.duplicate_window_minutes,
            exclude_session_id=exclude_session_id,
        )
        if duplicate is not None:
            logger.warning(
                "Rejected duplicate session for user=%s spot=%s at %s (existing=%s)",
                session.user_id, session.spot_id,
                session.surf_timestamp.isoformat(), duplicate.session_id,
            )
            raise DuplicateSessionError(
                session.spot_id, session.surf_timestamp, duplicate.session_id
            )

    def _notify(self, user_id: str) -> None:
        if self._publish is not None:
            self._publish(SessionSetChanged(user_id=user_id))
