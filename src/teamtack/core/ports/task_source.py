"""
Task Source Port - Abstract interface over a remote tracker.

Every backend-specific quirk (workflow-state types versus plain list names,
cycles versus none, native versus label-derived priority) is normalized
behind this interface. Reads raise on failure; status and comment writes
never raise past the adapter and report a WriteResult instead.

Implementations:
- LinearAdapter: Linear (teams, workflow states, cycles)
- TrelloAdapter: Trello (boards, lists, no cycles)
"""

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field

# Re-exported so adapters import their error types from the port
from teamtack.core.exceptions import (
    AuthenticationError,
    NotFoundError,
    RemoteReadError,
    RemoteWriteError,
    TrackerError,
)


__all__ = [
    "AuthenticationError",
    "GetIssuesOptions",
    "InitData",
    "NotFoundError",
    "RemoteReadError",
    "RemoteWriteError",
    "SourceAttachment",
    "SourceComment",
    "SourceCycle",
    "SourceIssue",
    "SourceLabel",
    "SourceStatus",
    "SourceTeam",
    "SourceUser",
    "TaskSourcePort",
    "TrackerError",
    "WriteResult",
    "detect_priority_from_labels",
]


# -------------------------------------------------------------------------
# Normalized shapes
# -------------------------------------------------------------------------


@dataclass
class SourceTeam:
    id: str
    name: str
    key: str | None = None
    icon: str | None = None


@dataclass
class SourceUser:
    id: str
    name: str
    email: str = ""
    display_name: str = ""


@dataclass
class SourceStatus:
    """A workflow state (Linear) or list (Trello)."""

    id: str
    name: str
    type: str = ""
    position: int = 0


@dataclass
class SourceLabel:
    id: str
    name: str
    color: str | None = None


@dataclass
class SourceCycle:
    id: str
    name: str
    start_date: str | None = None
    end_date: str | None = None


@dataclass
class SourceAttachment:
    id: str
    title: str
    url: str
    content_type: str | None = None


@dataclass
class SourceComment:
    id: str
    body: str
    created_at: str
    user: str | None = None


@dataclass
class SourceIssue:
    """
    An issue or card in tracker-neutral form.

    ``id`` is the source id used for writes; ``identifier`` is the display id.
    """

    id: str
    identifier: str
    title: str
    status: str
    description: str | None = None
    status_id: str | None = None
    status_type: str | None = None
    priority: int = 0
    labels: list[str] = field(default_factory=list)
    assignee_id: str | None = None
    assignee_email: str | None = None
    url: str | None = None
    parent_identifier: str | None = None
    branch_name: str | None = None
    team_id: str | None = None
    attachments: list[SourceAttachment] = field(default_factory=list)
    comments: list[SourceComment] = field(default_factory=list)

    def has_any_label(self, names: list[str]) -> bool:
        return any(label in names for label in self.labels)


@dataclass
class GetIssuesOptions:
    """
    Filters for a bulk issue fetch.

    Empty ``status_names`` means every status. Issues carrying any of
    ``exclude_labels`` are dropped after the fetch.
    """

    team_id: str
    cycle_id: str | None = None
    status_names: list[str] = field(default_factory=list)
    label_names: list[str] = field(default_factory=list)
    exclude_labels: list[str] = field(default_factory=list)
    assignee_email: str | None = None
    limit: int = 50


@dataclass
class InitData:
    """Everything ``init`` needs to build a config in one call."""

    teams: list[SourceTeam]
    users: list[SourceUser]
    statuses: list[SourceStatus]
    labels: list[SourceLabel]
    current_cycle: SourceCycle | None = None


@dataclass
class WriteResult:
    """Outcome of a status or comment write."""

    success: bool
    error: str | None = None

    @classmethod
    def ok(cls) -> "WriteResult":
        return cls(success=True)

    @classmethod
    def failed(cls, error: str) -> "WriteResult":
        return cls(success=False, error=error)


# Label patterns for boards without a native priority field, checked in order.
PRIORITY_LABEL_PATTERNS: list[tuple[re.Pattern[str], int]] = [
    (re.compile(r"^(urgent|critical|p0|p1)$", re.IGNORECASE), 1),
    (re.compile(r"^(high|important|p2)$", re.IGNORECASE), 2),
    (re.compile(r"^(medium|normal|p3)$", re.IGNORECASE), 3),
    (re.compile(r"^(low|minor|p4)$", re.IGNORECASE), 4),
]


def detect_priority_from_labels(labels: list[str]) -> int:
    """Map label names onto the 0-4 priority scale; 0 when nothing matches."""
    for label in labels:
        name = label.strip()
        for pattern, priority in PRIORITY_LABEL_PATTERNS:
            if pattern.match(name):
                return priority
    return 0


# -------------------------------------------------------------------------
# Port
# -------------------------------------------------------------------------


class TaskSourcePort(ABC):
    """
    Abstract interface for a remote task source.

    Adapters translate between the tracker's API and the normalized shapes
    above; nothing outside the adapter layer branches on backend type.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Human readable backend name."""
        ...

    @abstractmethod
    def validate_connection(self) -> bool:
        """Check that the configured credentials work."""
        ...

    # -------------------------------------------------------------------------
    # Vocabulary
    # -------------------------------------------------------------------------

    @abstractmethod
    def get_teams(self) -> list[SourceTeam]:
        ...

    @abstractmethod
    def get_users(self, team_id: str | None = None) -> list[SourceUser]:
        ...

    @abstractmethod
    def get_statuses(self, team_id: str) -> list[SourceStatus]:
        ...

    @abstractmethod
    def get_labels(self, team_id: str) -> list[SourceLabel]:
        ...

    @abstractmethod
    def get_current_cycle(self, team_id: str) -> SourceCycle | None:
        """Active cycle, or None for backends that have no cycles."""
        ...

    # -------------------------------------------------------------------------
    # Issues
    # -------------------------------------------------------------------------

    @abstractmethod
    def get_issues(self, options: GetIssuesOptions) -> list[SourceIssue]:
        ...

    @abstractmethod
    def get_issue(self, issue_id: str) -> SourceIssue | None:
        """Fetch by source id, with attachments and comments."""
        ...

    @abstractmethod
    def search_issue(self, identifier: str) -> SourceIssue | None:
        """Find an issue whose display id matches ``identifier`` exactly."""
        ...

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    @abstractmethod
    def update_issue_status(self, issue_id: str, status_id: str) -> WriteResult:
        ...

    @abstractmethod
    def add_comment(self, issue_id: str, body: str) -> WriteResult:
        ...

    # -------------------------------------------------------------------------
    # Init
    # -------------------------------------------------------------------------

    @abstractmethod
    def get_init_data(self, team_id: str | None = None) -> InitData:
        ...

    def download_headers(self) -> dict[str, str]:
        """HTTP headers needed to download this tracker's attachments."""
        return {}

    def close(self) -> None:
        """Release network resources."""
        return None
