import datetime
from enum import Enum
from typing import Any, Dict, Optional

from survey_insights.exceptions import SessionClosedError


class SessionStatus(str, Enum):
    """Lifecycle states of a respondent's survey session."""

    STARTED = "started"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    ABANDONED = "abandoned"
    EXPIRED = "expired"


TERMINAL_STATUSES = frozenset(
    {SessionStatus.COMPLETED, SessionStatus.ABANDONED, SessionStatus.EXPIRED}
)


def _now() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


class SurveySession:
    """Represents one respondent working through a survey instance.

    A session starts when the form is opened, moves to ``in_progress`` once
    the respondent reaches a later section, and ends as ``completed`` on
    submission or ``expired`` when the cleanup service finds it idle.
    """

    def __init__(
        self,
        session_id: str,
        survey_instance_id: str,
        session_token: str,
        total_sections: int = 1,
        metadata: Optional[Dict[str, Any]] = None,
    ):
        self.session_id: str = session_id
        self.survey_instance_id: str = survey_instance_id
        self.session_token: str = session_token
        self.total_sections: int = total_sections
        self.current_section: int = 0
        self.status: SessionStatus = SessionStatus.STARTED
        self.started_at: datetime.datetime = _now()
        self.last_activity_at: datetime.datetime = self.started_at
        self.metadata: Dict[str, Any] = dict(metadata or {})

    @property
    def is_active(self) -> bool:  # noqa: D401 – property
        """Return *True* while the session can still record activity."""
        return self.status not in TERMINAL_STATUSES

    def _ensure_active(self) -> None:
        if not self.is_active:
            raise SessionClosedError(
                f"Session {self.session_id} is {self.status.value}; no further activity allowed."
            )

    def record_activity(self, section: Optional[int] = None) -> None:
        """Touch the session; reaching a section past the first marks it in progress.

        Raises
        ------
        SessionClosedError
            If the session already completed, was abandoned or expired.
        """
        self._ensure_active()
        if section is not None:
            self.current_section = section
            if section > 0:
                self.status = SessionStatus.IN_PROGRESS
        self.last_activity_at = _now()

    def complete(self) -> None:
        self._ensure_active()
        self.status = SessionStatus.COMPLETED
        self.last_activity_at = _now()

    def expire(self, expired_by: str = "cleanup-service") -> None:
        """Mark an idle session as expired and note who expired it."""
        now = _now()
        self.status = SessionStatus.EXPIRED
        self.metadata.update({"expiredAt": now.isoformat(), "expiredBy": expired_by})
        self.last_activity_at = now

    def __repr__(self) -> str:
        parts = [
            f"session_id='{self.session_id}'",
            f"survey_instance_id='{self.survey_instance_id}'",
            f"status='{self.status.value}'",
            f"section={self.current_section}/{self.total_sections}",
            f"started_at='{self.started_at.isoformat()}'",
        ]
        return f"SurveySession({', '.join(parts)})"
