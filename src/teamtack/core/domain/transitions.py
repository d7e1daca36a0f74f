"""
Status transitions - map semantic states onto a team's literal status names.

``todo`` is the only state that may name several remote statuses: all of them
count as "todo" when filtering, the first is the one written.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Any, Protocol

from teamtack.core.exceptions import ConfigurationError

from .enums import LocalStatus, SemanticState


class NamedStatus(Protocol):
    """Anything carrying a remote status name and its workflow type."""

    name: str
    type: str


def _find_by_keyword(statuses: Sequence[NamedStatus], keywords: list[str]) -> str | None:
    for status in statuses:
        lowered = status.name.lower()
        if any(keyword in lowered for keyword in keywords):
            return status.name
    return None


def _find_by_type(statuses: Sequence[NamedStatus], status_type: str) -> str | None:
    for status in statuses:
        if status.type == status_type:
            return status.name
    return None


@dataclass(frozen=True)
class StatusTransitions:
    """
    Semantic-to-literal status table for one team.

    Attributes:
        todo: Ordered, non-empty tuple of literal names counted as todo.
        in_progress: Literal name written when work starts.
        done: Literal name written when work is finished.
        testing: Optional literal name for "awaiting review".
        blocked: Optional literal name for blocked work.
    """

    todo: tuple[str, ...] = ("Todo",)
    in_progress: str = "In Progress"
    done: str = "Done"
    testing: str | None = "Testing"
    blocked: str | None = None

    def __post_init__(self) -> None:
        if not self.todo:
            raise ConfigurationError("status_transitions.todo must name at least one status")

    # -------------------------------------------------------------------------
    # Construction
    # -------------------------------------------------------------------------

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> StatusTransitions:
        """Build from a config mapping; ``todo`` may be a string or a list."""
        if not data:
            return cls()
        todo = normalize_todo(data.get("todo")) or ("Todo",)
        return cls(
            todo=todo,
            in_progress=data.get("in_progress") or "In Progress",
            done=data.get("done") or "Done",
            testing=data.get("testing") or None,
            blocked=data.get("blocked") or None,
        )

    @classmethod
    def infer(cls, statuses: Sequence[NamedStatus]) -> StatusTransitions:
        """
        Guess a sensible table from a team's workflow states.

        Workflow types win over keywords; testing and blocked are only set
        when a status name suggests them.
        """
        todo = (
            _find_by_type(statuses, "unstarted")
            or _find_by_keyword(statuses, ["todo", "pending"])
            or (statuses[0].name if statuses else None)
            or "Todo"
        )
        in_progress = (
            _find_by_type(statuses, "started")
            or _find_by_keyword(statuses, ["in progress", "progress"])
            or "In Progress"
        )
        done = (
            _find_by_type(statuses, "completed")
            or _find_by_keyword(statuses, ["done", "complete"])
            or "Done"
        )
        return cls(
            todo=(todo,),
            in_progress=in_progress,
            done=done,
            testing=_find_by_keyword(statuses, ["testing", "review"]),
            blocked=_find_by_keyword(statuses, ["blocked", "on hold", "waiting"]),
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "todo": self.todo[0] if len(self.todo) == 1 else list(self.todo),
            "in_progress": self.in_progress,
            "done": self.done,
        }
        if self.testing:
            data["testing"] = self.testing
        if self.blocked:
            data["blocked"] = self.blocked
        return data

    # -------------------------------------------------------------------------
    # Lookups
    # -------------------------------------------------------------------------

    @property
    def first_todo(self) -> str:
        return self.todo[0]

    def resolve(self, state: SemanticState) -> str | None:
        """Literal name written for a semantic state, or None if unconfigured."""
        return {
            SemanticState.TODO: self.first_todo,
            SemanticState.IN_PROGRESS: self.in_progress,
            SemanticState.DONE: self.done,
            SemanticState.TESTING: self.testing,
            SemanticState.BLOCKED: self.blocked,
        }[state]

    def sync_statuses(self) -> list[str]:
        """Statuses fetched by a normal sync: every todo variant plus in progress."""
        names = list(self.todo)
        if self.in_progress not in names:
            names.append(self.in_progress)
        return names

    def is_todo_status(self, name: str) -> bool:
        return name in self.todo

    def is_terminal(self, name: str, status_type: str | None = None) -> bool:
        """
        Whether a remote status counts as finished for nudging purposes.

        Done, the configured testing name and any cancelled-type state are
        terminal.
        """
        if name == self.done:
            return True
        if self.testing and name == self.testing:
            return True
        return status_type == "canceled" or status_type == "cancelled"

    def map_remote_to_local(self, name: str) -> LocalStatus:
        """Infer a local status for a task seen for the first time. Total."""
        if name == self.done:
            return LocalStatus.COMPLETED
        if name == self.in_progress:
            return LocalStatus.IN_PROGRESS
        if self.testing and name == self.testing:
            return LocalStatus.IN_REVIEW
        if self.blocked and name == self.blocked:
            return LocalStatus.BLOCKED
        return LocalStatus.PENDING

    def map_local_to_remote(self, status: LocalStatus) -> str | None:
        return {
            LocalStatus.PENDING: self.first_todo,
            LocalStatus.IN_PROGRESS: self.in_progress,
            LocalStatus.IN_REVIEW: self.testing,
            LocalStatus.COMPLETED: self.done,
            LocalStatus.BLOCKED: self.blocked,
        }[status]


def normalize_todo(value: str | Iterable[str] | None) -> tuple[str, ...]:
    """Collapse a string-or-list ``todo`` value into an ordered tuple."""
    if not value:
        return ()
    if isinstance(value, str):
        return (value,)
    seen: list[str] = []
    for name in value:
        if name and name not in seen:
            seen.append(name)
    return tuple(seen)
