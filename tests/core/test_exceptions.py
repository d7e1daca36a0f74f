"""Tests for the teamtack exception hierarchy.

Verifies that:
- All exceptions have the correct inheritance
- Exceptions properly chain causes
- Tracker errors carry the issue key
"""

import pytest

from teamtack.core.exceptions import (
    AuthenticationError,
    ConfigurationError,
    NotFoundError,
    RemoteReadError,
    RemoteWriteError,
    TeamTackError,
    TrackerError,
    ValidationError,
)


class TestHierarchy:
    """Inheritance of the exception classes."""

    @pytest.mark.parametrize(
        "exc_class", [ConfigurationError, ValidationError, TrackerError]
    )
    def test_top_level_errors_derive_from_base(self, exc_class):
        """Every top level error is a TeamTackError."""
        assert issubclass(exc_class, TeamTackError)

    @pytest.mark.parametrize(
        "exc_class", [RemoteReadError, RemoteWriteError, AuthenticationError, NotFoundError]
    )
    def test_tracker_errors(self, exc_class):
        """Remote failures are TrackerErrors."""
        assert issubclass(exc_class, TrackerError)
        assert not issubclass(exc_class, ConfigurationError)

    def test_catching_base_catches_subclasses(self):
        """A single except TeamTackError clause catches tracker errors."""
        with pytest.raises(TeamTackError):
            raise NotFoundError("missing", issue_key="MP-1")


class TestAttributes:
    """Messages, causes and issue keys."""

    def test_message_only(self):
        """str() is the message when there is no cause."""
        error = ConfigurationError("No config found")

        assert str(error) == "No config found"
        assert error.message == "No config found"
        assert error.cause is None

    def test_cause_is_appended(self):
        """The cause is shown after the message."""
        cause = ValueError("bad yaml")
        error = ConfigurationError("Cannot read config", cause=cause)

        assert error.cause is cause
        assert str(error) == "Cannot read config (caused by: bad yaml)"

    def test_tracker_error_issue_key(self):
        """Tracker errors remember the issue they relate to."""
        error = RemoteWriteError("rejected", issue_key="MP-42")

        assert error.issue_key == "MP-42"
        assert str(error) == "rejected"

    def test_tracker_error_without_issue_key(self):
        error = RemoteReadError("timeout")

        assert error.issue_key is None
