"""Project-wide custom exception types."""


class SurveyInsightsError(RuntimeError):
    """Base class for errors raised outside the aggregation engine."""


class ConfigLoadError(SurveyInsightsError):
    """Raised when a survey export cannot be read or has the wrong shape."""

    def __init__(self, message: str, path: str | None = None) -> None:  # noqa: D401 – simple constructor
        super().__init__(message)
        self.path = path


class SessionClosedError(SurveyInsightsError):
    """Raised when activity is recorded on a session that is no longer active."""


class SessionLimitError(SurveyInsightsError, ValueError):
    """Raised when the session store is at its concurrent-session limit."""
