"""
Domain enums - Local statuses, semantic states, completion modes, priorities.
"""

from __future__ import annotations

from enum import Enum

from teamtack.core.exceptions import ValidationError


class LocalStatus(Enum):
    """The user's own view of where a task stands, independent of the remote."""

    PENDING = "pending"
    IN_PROGRESS = "in-progress"
    IN_REVIEW = "in-review"
    COMPLETED = "completed"
    BLOCKED = "blocked"

    @classmethod
    def from_string(cls, value: str) -> LocalStatus:
        """
        Parse a local status name.

        Accepts the canonical hyphenated names as well as underscore and
        space separated spellings.
        """
        normalized = value.strip().lower().replace("_", "-").replace(" ", "-")
        for status in cls:
            if status.value == normalized:
                return status
        raise ValidationError(
            f"Unknown local status '{value}'. "
            f"Valid values: {', '.join(s.value for s in cls)}"
        )


class SemanticState(Enum):
    """Team-independent names for the remote statuses the engine writes."""

    TODO = "todo"
    IN_PROGRESS = "in_progress"
    DONE = "done"
    TESTING = "testing"
    BLOCKED = "blocked"

    @classmethod
    def from_string(cls, value: str) -> SemanticState:
        normalized = value.strip().lower().replace("-", "_").replace(" ", "_")
        for state in cls:
            if state.value == normalized:
                return state
        raise ValidationError(f"Unknown semantic state '{value}'")


class CompletionMode(Enum):
    """How finishing a task propagates to its own and its parent's status."""

    SIMPLE = "simple"
    STRICT_REVIEW = "strict_review"
    UPSTREAM_STRICT = "upstream_strict"
    UPSTREAM_NOT_STRICT = "upstream_not_strict"

    @classmethod
    def from_string(cls, value: str) -> CompletionMode:
        normalized = value.strip().lower().replace("-", "_")
        for mode in cls:
            if mode.value == normalized:
                return mode
        raise ValidationError(
            f"Unknown completion mode '{value}'. "
            f"Valid values: {', '.join(m.value for m in cls)}"
        )

    @property
    def description(self) -> str:
        return {
            CompletionMode.SIMPLE: "Task and parent move straight to done",
            CompletionMode.STRICT_REVIEW: "Task goes to dev testing, parent to QA testing",
            CompletionMode.UPSTREAM_STRICT: (
                "Task done, parent to QA testing; task falls back to dev testing "
                "when the parent cannot be moved"
            ),
            CompletionMode.UPSTREAM_NOT_STRICT: "Task done, parent to QA testing, no fallback",
        }[self]


class SourceType(Enum):
    """Supported remote backends."""

    LINEAR = "linear"
    TRELLO = "trello"

    @classmethod
    def from_string(cls, value: str | None) -> SourceType:
        if not value:
            return cls.LINEAR
        normalized = value.strip().lower()
        for source in cls:
            if source.value == normalized:
                return source
        raise ValidationError(f"Unknown source type '{value}'")


class StatusSource(Enum):
    """Whether status changes are pushed to the tracker immediately."""

    REMOTE = "remote"
    LOCAL = "local"

    @classmethod
    def from_string(cls, value: str | None) -> StatusSource:
        if not value:
            return cls.REMOTE
        normalized = value.strip().lower()
        for source in cls:
            if source.value == normalized:
                return source
        raise ValidationError(f"Unknown status source '{value}'")


# Numeric priority codes as reported by the trackers.
PRIORITY_NAMES: dict[int, str] = {
    0: "none",
    1: "urgent",
    2: "high",
    3: "medium",
    4: "low",
}

DEFAULT_PRIORITY_ORDER: list[str] = ["urgent", "high", "medium", "low", "none"]


def get_priority_sort_index(priority: int, order: list[str] | None = None) -> int:
    """
    Position of a numeric priority within a named priority order.

    Codes that have no name, or names missing from the order, sort after
    every listed priority.
    """
    effective = order or DEFAULT_PRIORITY_ORDER
    name = PRIORITY_NAMES.get(priority)
    if name is None or name not in effective:
        return len(effective)
    return effective.index(name)
