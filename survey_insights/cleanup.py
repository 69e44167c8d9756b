"""Background expiry of idle survey sessions.

A :class:`SessionCleanupService` owns one daemon thread that sweeps the
session store on a fixed interval and marks sessions without recent activity
as ``expired``.  The first sweep runs as soon as the service starts.
"""
from __future__ import annotations

import datetime
import logging
import os
import threading
from typing import List, Optional

from survey_insights.models import parse_timestamp
from survey_insights.session_data import SessionStatus, SurveySession
from survey_insights.session_store import ThreadSafeSessionStore

logger = logging.getLogger(__name__)

SESSION_TIMEOUT_HOURS: float = float(os.getenv("SESSION_TIMEOUT_HOURS", "24"))
CLEANUP_INTERVAL_MINUTES: float = float(os.getenv("CLEANUP_INTERVAL_MINUTES", "60"))
MAX_SESSIONS_PER_CLEANUP: int = int(os.getenv("MAX_SESSIONS_PER_CLEANUP", "100"))


def _chunks(items: List[SurveySession], size: int) -> List[List[SurveySession]]:
    return [items[i : i + size] for i in range(0, len(items), size)]


class SessionCleanupService:
    """Periodically expire sessions idle for longer than *timeout*."""

    def __init__(
        self,
        store: ThreadSafeSessionStore,
        *,
        timeout: datetime.timedelta = datetime.timedelta(hours=SESSION_TIMEOUT_HOURS),
        interval_seconds: float = CLEANUP_INTERVAL_MINUTES * 60,
        batch_size: int = MAX_SESSIONS_PER_CLEANUP,
    ) -> None:
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        self._store = store
        self._timeout = timeout
        self._interval = interval_seconds
        self._batch_size = max(1, batch_size)
        self._cond = threading.Condition()
        self._running = False
        self._thread: Optional[threading.Thread] = None

    @property
    def is_running(self) -> bool:
        return self._running

    def start(self) -> None:
        with self._cond:
            if self._running:
                logger.info("Session cleanup service already running")
                return
            self._running = True
            self._thread = threading.Thread(
                target=self._run, daemon=True, name="session-cleanup"
            )
        self._thread.start()
        logger.info(
            "Session cleanup service started (every %.0f min)", self._interval / 60
        )

    def stop(self) -> None:
        """Stop the service and wait for the background thread to finish."""
        with self._cond:
            if not self._running:
                return
            self._running = False
            self._cond.notify_all()
        if self._thread is not None:
            self._thread.join()
        logger.info("Session cleanup service stopped")

    def perform_cleanup(self, now: Optional[datetime.datetime] = None) -> int:
        """Expire idle sessions once and return how many were expired.

        Never raises: a failing session is logged and skipped.
        """
        # naive datetimes are taken as UTC
        now = parse_timestamp(now) or datetime.datetime.now(datetime.timezone.utc)
        cutoff = now - self._timeout
        try:
            stale = self._store.get_stale_sessions(cutoff)
        except Exception:  # noqa: BLE001 – keep the loop alive
            logger.exception("Failed to list stale sessions")
            return 0

        if not stale:
            logger.debug("No expired sessions found")
            return 0

        def _expire_if_idle(session: SurveySession) -> None:
            # activity may have been recorded since the stale list was taken
            if session.is_active and session.last_activity_at < cutoff:
                session.expire()

        expired = 0
        for batch in _chunks(stale, self._batch_size):
            for session in batch:
                try:
                    updated = self._store.modify_session(
                        session.session_id, _expire_if_idle
                    )
                except Exception as exc:  # noqa: BLE001 – skip and continue
                    logger.warning(
                        "Failed to expire session %s: %s", session.session_id, exc
                    )
                    continue
                if updated.status is not SessionStatus.EXPIRED:
                    continue
                expired += 1
                logger.info("session_expired", extra={"session_id": session.session_id})

        logger.info("Session cleanup completed: %d sessions marked as expired", expired)
        return expired

    def _run(self) -> None:
        while True:
            self.perform_cleanup()
            with self._cond:
                if not self._running:
                    break
                self._cond.wait(timeout=self._interval)
                if not self._running:
                    break
