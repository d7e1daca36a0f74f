"""
Shared pytest fixtures for the teamtack test suite.

Fixture Categories:
- Tracker: an in-memory TaskSourcePort with recorded writes
- Configuration: Config / LocalConfig for a dev team plus a QA team
- Storage: cycle and config stores rooted in tmp_path
"""

from __future__ import annotations

from pathlib import Path

import pytest

from teamtack.adapters.cache import CycleStore
from teamtack.adapters.config import StoragePaths, YamlConfigStore
from teamtack.core.domain.entities import CycleData, Task
from teamtack.core.domain.enums import LocalStatus
from teamtack.core.domain.transitions import StatusTransitions
from teamtack.core.ports.config_provider import (
    Config,
    LocalConfig,
    QaPmTeamConfig,
    StatusConfig,
    TeamConfig,
    UserConfig,
)
from teamtack.core.ports.task_source import (
    GetIssuesOptions,
    InitData,
    RemoteReadError,
    SourceCycle,
    SourceIssue,
    SourceLabel,
    SourceStatus,
    SourceTeam,
    SourceUser,
    TaskSourcePort,
    WriteResult,
)


DEV_TEAM_ID = "team-dev"
QA_TEAM_ID = "team-qa"
OPS_TEAM_ID = "team-ops"

DEV_STATUSES = [
    ("Backlog", "backlog"),
    ("Todo", "unstarted"),
    ("In Progress", "started"),
    ("In Review", "started"),
    ("Testing", "started"),
    ("Done", "completed"),
    ("Canceled", "canceled"),
]
QA_STATUSES = [
    ("Todo", "unstarted"),
    ("QA Testing", "started"),
    ("Done", "completed"),
]
# Ops has a "Testing" status of its own but is never a QA/PM team
OPS_STATUSES = [
    ("Todo", "unstarted"),
    ("Testing", "started"),
    ("Shipped", "completed"),
]


def make_statuses(team_id: str, names: list[tuple[str, str]]) -> list[SourceStatus]:
    return [
        SourceStatus(id=f"{team_id}:{name}", name=name, type=status_type, position=index)
        for index, (name, status_type) in enumerate(names)
    ]


def _make_issue(
    identifier: str,
    status: str = "Todo",
    team_id: str = DEV_TEAM_ID,
    **kwargs,
) -> SourceIssue:
    """SourceIssue with a derived source id and title."""
    kwargs.setdefault("title", f"Task {identifier}")
    return SourceIssue(
        id=f"src-{identifier}",
        identifier=identifier,
        status=status,
        team_id=team_id,
        **kwargs,
    )


class FakeTaskSource(TaskSourcePort):
    """
    In-memory tracker.

    Status writes update the stored issue and are recorded in
    ``status_writes`` as (source id, status name). Excluded labels are
    not filtered here; callers do that themselves.
    """

    def __init__(self, cycle: SourceCycle | None = None):
        self.teams = [
            SourceTeam(id=DEV_TEAM_ID, name="Dev", key="MP"),
            SourceTeam(id=QA_TEAM_ID, name="QA", key="QA"),
            SourceTeam(id=OPS_TEAM_ID, name="Ops", key="OPS"),
        ]
        self.users = [
            SourceUser(id="user-alice", name="Alice", email="alice@example.com"),
            SourceUser(id="user-bob", name="Bob", email="bob@example.com"),
        ]
        self.statuses = {
            DEV_TEAM_ID: make_statuses(DEV_TEAM_ID, DEV_STATUSES),
            QA_TEAM_ID: make_statuses(QA_TEAM_ID, QA_STATUSES),
            OPS_TEAM_ID: make_statuses(OPS_TEAM_ID, OPS_STATUSES),
        }
        self.labels = [SourceLabel(id="label-bug", name="Bug"), SourceLabel(id="l-x", name="x")]
        self.cycle = cycle
        self.issues: dict[str, SourceIssue] = {}

        self.status_writes: list[tuple[str, str]] = []
        self.comments: list[tuple[str, str]] = []
        self.failing_writes: set[str] = set()
        self.fail_reads = False
        self.last_options: GetIssuesOptions | None = None

    def add(self, *issues: SourceIssue) -> None:
        for issue in issues:
            status_type = {s.name: s.type for s in self.statuses.get(issue.team_id or "", [])}
            issue.status_type = issue.status_type or status_type.get(issue.status)
            self.issues[issue.identifier] = issue

    def _check_reads(self) -> None:
        if self.fail_reads:
            raise RemoteReadError("tracker unreachable")

    @property
    def name(self) -> str:
        return "Fake"

    def validate_connection(self) -> bool:
        return not self.fail_reads

    def get_teams(self) -> list[SourceTeam]:
        self._check_reads()
        return list(self.teams)

    def get_users(self, team_id: str | None = None) -> list[SourceUser]:
        return list(self.users)

    def get_statuses(self, team_id: str) -> list[SourceStatus]:
        self._check_reads()
        return list(self.statuses.get(team_id, []))

    def get_labels(self, team_id: str) -> list[SourceLabel]:
        return list(self.labels)

    def get_current_cycle(self, team_id: str) -> SourceCycle | None:
        self._check_reads()
        return self.cycle

    def get_issues(self, options: GetIssuesOptions) -> list[SourceIssue]:
        self._check_reads()
        self.last_options = options
        found = []
        for issue in self.issues.values():
            if issue.team_id != options.team_id:
                continue
            if options.status_names and issue.status not in options.status_names:
                continue
            if options.label_names and not issue.has_any_label(options.label_names):
                continue
            found.append(issue)
        return found[: options.limit]

    def get_issue(self, issue_id: str) -> SourceIssue | None:
        self._check_reads()
        for issue in self.issues.values():
            if issue.id == issue_id:
                return issue
        return None

    def search_issue(self, identifier: str) -> SourceIssue | None:
        self._check_reads()
        return self.issues.get(identifier)

    def update_issue_status(self, issue_id: str, status_id: str) -> WriteResult:
        if issue_id in self.failing_writes:
            return WriteResult.failed("rejected by tracker")
        name = status_id.split(":", 1)[1]
        self.status_writes.append((issue_id, name))
        for issue in self.issues.values():
            if issue.id == issue_id:
                issue.status = name
        return WriteResult.ok()

    def add_comment(self, issue_id: str, body: str) -> WriteResult:
        self.comments.append((issue_id, body))
        return WriteResult.ok()

    def get_init_data(self, team_id: str | None = None) -> InitData:
        self._check_reads()
        target = team_id or self.teams[0].id
        statuses = list(self.statuses.get(target, []))
        return InitData(
            teams=list(self.teams),
            users=list(self.users),
            statuses=statuses,
            labels=list(self.labels),
            current_cycle=self.cycle,
        )

    def writes_for(self, identifier: str) -> list[str]:
        """Status names written to one issue, in order."""
        source_id = f"src-{identifier}"
        return [name for issue_id, name in self.status_writes if issue_id == source_id]


# =============================================================================
# Tracker
# =============================================================================


@pytest.fixture
def fake_source() -> FakeTaskSource:
    return FakeTaskSource(cycle=SourceCycle(id="cycle-7", name="Cycle 7"))


# =============================================================================
# Configuration
# =============================================================================


@pytest.fixture
def config() -> Config:
    """Config for the Dev/QA/Ops teams with todo = Todo + Backlog."""
    statuses = {}
    for name, status_type in DEV_STATUSES:
        statuses[name.lower().replace(" ", "_")] = StatusConfig(name=name, type=status_type)
    return Config(
        teams={
            "dev": TeamConfig(id=DEV_TEAM_ID, name="Dev"),
            "qa": TeamConfig(id=QA_TEAM_ID, name="QA"),
            "ops": TeamConfig(id=OPS_TEAM_ID, name="Ops"),
        },
        users={
            "alice": UserConfig(id="user-alice", email="alice@example.com", display_name="Alice"),
            "bob": UserConfig(id="user-bob", email="bob@example.com", display_name="Bob"),
        },
        statuses=statuses,
        status_transitions=StatusTransitions(
            todo=("Todo", "Backlog"),
            in_progress="In Progress",
            done="Done",
            testing="Testing",
        ),
    )


@pytest.fixture
def local_config() -> LocalConfig:
    return LocalConfig(current_user="alice", team="dev")


@pytest.fixture
def qa_local_config() -> LocalConfig:
    """Local config with QA as a QA/PM team."""
    return LocalConfig(
        current_user="alice",
        team="dev",
        dev_testing_status="In Review",
        qa_pm_teams=[QaPmTeamConfig(team="qa", testing_status="QA Testing")],
    )


# =============================================================================
# Storage
# =============================================================================


@pytest.fixture
def storage_paths(tmp_path: Path) -> StoragePaths:
    return StoragePaths(base_dir=tmp_path / ".ttt")


@pytest.fixture
def cycle_store(storage_paths: StoragePaths) -> CycleStore:
    return CycleStore(storage_paths.cycle_file)


@pytest.fixture
def config_store(storage_paths: StoragePaths) -> YamlConfigStore:
    return YamlConfigStore(storage_paths)


def _cached_task(identifier: str, local_status: LocalStatus, status: str, **kwargs) -> Task:
    """Task as it would sit in the cache after an earlier sync."""
    return Task(
        id=identifier,
        title=kwargs.pop("title", f"Task {identifier}"),
        status=status,
        local_status=local_status,
        source_id=f"src-{identifier}",
        **kwargs,
    )


@pytest.fixture
def seed_cache(cycle_store: CycleStore):
    """Write tasks straight into the cache."""

    def seed(*tasks: Task) -> CycleData:
        data = CycleData(
            cycle_id="cycle-7", cycle_name="Cycle 7", updated_at="", tasks=list(tasks)
        )
        cycle_store.save(data)
        return data

    return seed


@pytest.fixture
def make_issue():
    """Factory for SourceIssue records: make_issue("MP-1", "Todo", labels=[...])."""
    return _make_issue


@pytest.fixture
def cached_task():
    """Factory for cached Task records: cached_task("MP-1", LocalStatus.COMPLETED, "Todo")."""
    return _cached_task
