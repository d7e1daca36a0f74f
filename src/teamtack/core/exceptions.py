"""
Exceptions - Centralized error taxonomy for teamtack.

Hierarchy:

    TeamTackError
    ├── ConfigurationError      missing/invalid config files, unknown keys
    ├── ValidationError         bad user input (ids, status values)
    └── TrackerError            anything that went wrong talking to a tracker
        ├── RemoteReadError     a read failed; aborts the current operation
        ├── RemoteWriteError    a write failed; callers log it and carry on
        ├── AuthenticationError credentials rejected
        └── NotFoundError       issue, card or status does not exist
"""


class TeamTackError(Exception):
    """
    Base exception for all teamtack errors.

    Args:
        message: Human readable description.
        cause: Optional underlying exception that triggered this one.
    """

    def __init__(self, message: str, cause: Exception | None = None):
        super().__init__(message)
        self.message = message
        self.cause = cause

    def __str__(self) -> str:
        if self.cause is not None:
            return f"{self.message} (caused by: {self.cause})"
        return self.message


class ConfigurationError(TeamTackError):
    """Configuration is missing, unreadable or refers to unknown keys."""


class ValidationError(TeamTackError):
    """User supplied input was rejected."""


class TrackerError(TeamTackError):
    """
    Error raised while communicating with a remote tracker.

    Args:
        message: Human readable description.
        issue_key: Issue or endpoint the error relates to, when known.
        cause: Optional underlying exception.
    """

    def __init__(
        self,
        message: str,
        issue_key: str | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message, cause=cause)
        self.issue_key = issue_key


class RemoteReadError(TrackerError):
    """A read from the tracker failed."""


class RemoteWriteError(TrackerError):
    """A status change or comment could not be written."""


class AuthenticationError(TrackerError):
    """The tracker rejected the configured credentials."""


class NotFoundError(TrackerError):
    """The requested issue, card or status does not exist."""


__all__ = [
    "AuthenticationError",
    "ConfigurationError",
    "NotFoundError",
    "RemoteReadError",
    "RemoteWriteError",
    "TeamTackError",
    "TrackerError",
    "ValidationError",
]
