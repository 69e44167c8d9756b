import datetime
import logging
import os
import secrets
import threading
import time
from typing import Callable, Dict, List, Optional, Set

from survey_insights.exceptions import SessionLimitError
from survey_insights.session_data import SessionStatus, SurveySession

logger = logging.getLogger(__name__)


def max_sessions_from_env() -> Optional[int]:  # noqa: WPS430 – tiny helper
    """Read the optional ``MAX_CONCURRENT_SESSIONS`` limit."""
    raw_val = os.getenv("MAX_CONCURRENT_SESSIONS")
    if not raw_val:
        return None
    try:
        parsed = int(raw_val)
        if parsed <= 0:
            logger.warning(
                "Ignoring MAX_CONCURRENT_SESSIONS=%s (must be positive int)", raw_val
            )
            return None
        return parsed
    except ValueError:
        logger.warning(
            "Invalid MAX_CONCURRENT_SESSIONS value '%s'; must be integer.", raw_val
        )
        return None


class SessionCreationTracker:
    """Tracks in-flight and finished session creation per survey instance.

    Prevents two callers from creating duplicate sessions for the same
    instance.  Pass one tracker explicitly to everything that opens sessions.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._creating: Set[str] = set()
        self._created: Dict[str, str] = {}  # survey_instance_id -> session_id

    def is_creating(self, survey_instance_id: str) -> bool:
        with self._lock:
            return survey_instance_id in self._creating

    def start_creating(self, survey_instance_id: str) -> bool:
        """Claim creation for *survey_instance_id*; *False* if already claimed."""
        with self._lock:
            if survey_instance_id in self._creating:
                return False
            self._creating.add(survey_instance_id)
            return True

    def finish_creating(
        self, survey_instance_id: str, session_id: Optional[str] = None
    ) -> None:
        with self._lock:
            self._creating.discard(survey_instance_id)
            if session_id:
                self._created[survey_instance_id] = session_id

    def get_existing_session(self, survey_instance_id: str) -> Optional[str]:
        with self._lock:
            return self._created.get(survey_instance_id)

    def clear_session(self, survey_instance_id: str) -> None:
        with self._lock:
            self._created.pop(survey_instance_id, None)


class ThreadSafeSessionStore:
    """A thread-safe in-memory store of survey sessions."""

    def __init__(self, max_sessions: Optional[int] = None):
        """Create a new :class:`ThreadSafeSessionStore`.

        Args:
            max_sessions: Optional maximum number of *active* sessions
                allowed.  :pydata:`None` (default) means unlimited.
        """
        self._sessions: Dict[str, SurveySession] = {}
        self._lock = threading.Lock()
        # None == unlimited
        self._max_sessions = max_sessions if (max_sessions or 0) > 0 else None

    def add_session(self, session: SurveySession) -> None:
        """
        Adds a new session to the store.
        Raises ValueError if a session with the same ID already exists and
        SessionLimitError when the active-session limit is reached.
        """
        with self._lock:
            if self._max_sessions is not None:
                active = sum(1 for s in self._sessions.values() if s.is_active)
                if active >= self._max_sessions:
                    raise SessionLimitError(
                        "Maximum concurrent session limit reached. "
                        "Try again later or finish existing sessions."
                    )

            if session.session_id in self._sessions:
                raise ValueError(
                    f"Session with ID {session.session_id} already exists."
                )
            self._sessions[session.session_id] = session
        logger.info(
            "session_started",
            extra={
                "session_id": session.session_id,
                "survey_instance_id": session.survey_instance_id,
            },
        )

    def get_session(self, session_id: str) -> Optional[SurveySession]:
        """Retrieves a session by its ID. Returns None if not found."""
        with self._lock:
            return self._sessions.get(session_id)

    def find_by_token(self, session_token: str) -> Optional[SurveySession]:
        """Return the *active* session holding *session_token*, for resuming."""
        with self._lock:
            for session in self._sessions.values():
                if session.session_token == session_token and session.is_active:
                    return session
            return None

    def modify_session(
        self,
        session_id: str,
        modifier: Callable[[SurveySession], None],
    ) -> SurveySession:
        """Atomically apply *modifier* to the session inside the lock.

        Raises:
            ValueError: If *session_id* does not exist in the store.
        """
        with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                raise ValueError(f"Session with ID {session_id} not found.")
            modifier(session)
            return session

    def remove_session(self, session_id: str) -> Optional[SurveySession]:
        """Removes a session by its ID. Returns the removed session or None if not found."""
        with self._lock:
            return self._sessions.pop(session_id, None)

    def get_all_sessions(self) -> Dict[str, SurveySession]:
        """Returns a shallow copy of all sessions currently in the store."""
        with self._lock:
            return dict(self._sessions)

    def count(self) -> int:
        with self._lock:
            return len(self._sessions)

    # ------------------------------------------------------------------
    # Lifecycle helpers
    # ------------------------------------------------------------------

    def record_activity(self, session_id: str, section: Optional[int] = None) -> SurveySession:
        return self.modify_session(session_id, lambda s: s.record_activity(section))

    def complete_session(self, session_id: str) -> SurveySession:
        session = self.modify_session(session_id, SurveySession.complete)
        logger.info("session_completed", extra={"session_id": session_id})
        return session

    def get_stale_sessions(self, cutoff: datetime.datetime) -> List[SurveySession]:
        """Return active sessions whose last activity is older than *cutoff*."""
        with self._lock:
            return [
                s
                for s in self._sessions.values()
                if s.is_active and s.last_activity_at < cutoff
            ]


def _generate_session_token() -> str:
    return f"session_{int(time.time() * 1000)}_{secrets.token_hex(5)[:9]}"


def open_session(
    store: ThreadSafeSessionStore,
    tracker: SessionCreationTracker,
    survey_instance_id: str,
    total_sections: int = 1,
) -> Optional[str]:
    """Return the session id for *survey_instance_id*, creating it at most once.

    Returns the existing id when one was already created through *tracker*,
    and *None* while another caller is still creating it.
    """
    existing = tracker.get_existing_session(survey_instance_id)
    if existing is not None:
        session = store.get_session(existing)
        if session is not None and session.is_active:
            return existing
        tracker.clear_session(survey_instance_id)

    if not tracker.start_creating(survey_instance_id):
        logger.debug("Session creation already in progress for %s", survey_instance_id)
        return None

    session_id: Optional[str] = None
    try:
        token = _generate_session_token()
        session = SurveySession(
            session_id=secrets.token_hex(8),
            survey_instance_id=survey_instance_id,
            session_token=token,
            total_sections=total_sections,
            metadata={"createdBy": "survey-form"},
        )
        store.add_session(session)
        session_id = session.session_id
        return session_id
    finally:
        tracker.finish_creating(survey_instance_id, session_id)


__all__ = [
    "SessionCreationTracker",
    "SessionStatus",
    "ThreadSafeSessionStore",
    "max_sessions_from_env",
    "open_session",
]
