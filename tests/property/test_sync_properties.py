"""
Property-based tests for status mapping and the task cache.

Tests invariants for:
- Remote-to-local status mapping (total over every name)
- Cache snapshots (unique display ids, stable priority order)
- Sync merges (locally owned statuses survive a refresh)
"""

from unittest.mock import MagicMock

from hypothesis import given
from hypothesis import strategies as st

from teamtack.application.sync import SyncOptions, SyncOrchestrator
from teamtack.core.domain.entities import CycleData, Task
from teamtack.core.domain.enums import LocalStatus, get_priority_sort_index
from teamtack.core.domain.transitions import StatusTransitions
from teamtack.core.ports.config_provider import Config, LocalConfig, TeamConfig
from teamtack.core.ports.task_source import SourceIssue


status_names = st.text(min_size=1, max_size=20)
task_ids = st.sampled_from(["MP-1", "MP-2", "MP-3", "MP-4", "MP-5"])
priorities = st.integers(min_value=0, max_value=6)

TRANSITIONS = StatusTransitions(
    todo=("Todo", "Backlog"),
    in_progress="In Progress",
    done="Done",
    testing="Testing",
    blocked="Blocked",
)


# =============================================================================
# Status mapping
# =============================================================================


class TestStatusMappingProperties:
    """Property tests for StatusTransitions mapping."""

    @given(status_names)
    def test_map_remote_to_local_is_total(self, name):
        """Every remote name maps to some local status."""
        assert isinstance(TRANSITIONS.map_remote_to_local(name), LocalStatus)

    @given(status_names)
    def test_unknown_names_are_pending(self, name):
        """Names outside the table fall back to pending."""
        known = {"In Progress", "Done", "Testing", "Blocked"}
        if name not in known:
            assert TRANSITIONS.map_remote_to_local(name) is LocalStatus.PENDING

    @given(st.sampled_from(list(LocalStatus)))
    def test_local_remote_local_roundtrip(self, status):
        """Writing a local status and reading it back gives the same status."""
        remote = TRANSITIONS.map_local_to_remote(status)

        assert TRANSITIONS.map_remote_to_local(remote) is status

    @given(st.lists(status_names, min_size=1, max_size=5))
    def test_sync_statuses_cover_todo_and_in_progress(self, todo):
        transitions = StatusTransitions(todo=tuple(todo), in_progress="In Progress")

        names = transitions.sync_statuses()

        assert set(todo) <= set(names)
        assert "In Progress" in names


# =============================================================================
# Cache snapshots
# =============================================================================


def _task(task_id: str, priority: int = 0, title: str = "") -> Task:
    return Task(id=task_id, title=title or task_id, status="Todo", priority=priority)


class TestCycleDataProperties:
    """Property tests for CycleData ordering and uniqueness."""

    @given(st.lists(st.tuples(task_ids, priorities), max_size=20))
    def test_upsert_never_duplicates(self, entries):
        """Upserting any sequence leaves one entry per display id."""
        data = CycleData(cycle_id="c", cycle_name="C", updated_at="")
        for index, (task_id, priority) in enumerate(entries):
            data.upsert(_task(task_id, priority, title=f"v{index}"))

        ids = [task.id for task in data.tasks]
        assert len(ids) == len(set(ids))
        assert set(ids) == {task_id for task_id, _ in entries}

    @given(st.lists(st.tuples(task_ids, priorities), min_size=1, max_size=20))
    def test_upsert_keeps_latest_version(self, entries):
        data = CycleData(cycle_id="c", cycle_name="C", updated_at="")
        latest = {}
        for index, (task_id, priority) in enumerate(entries):
            data.upsert(_task(task_id, priority, title=f"v{index}"))
            latest[task_id] = f"v{index}"

        assert {task.id: task.title for task in data.tasks} == latest

    @given(st.lists(priorities, max_size=30))
    def test_sort_is_ordered_and_stable(self, values):
        """Tasks end up in priority order; equal priorities keep fetch order."""
        tasks = [_task(f"T-{index}", priority) for index, priority in enumerate(values)]
        data = CycleData(cycle_id="c", cycle_name="C", updated_at="", tasks=list(tasks))

        data.sort_tasks()

        keys = [get_priority_sort_index(task.priority) for task in data.tasks]
        assert keys == sorted(keys)
        for key in set(keys):
            group = [t.id for t in data.tasks if get_priority_sort_index(t.priority) == key]
            original = [t.id for t in tasks if get_priority_sort_index(t.priority) == key]
            assert group == original


# =============================================================================
# Sync merge
# =============================================================================


def _orchestrator(cached: list[Task], issues: list[SourceIssue]) -> tuple:
    config = Config(
        teams={"dev": TeamConfig(id="team-dev", name="Dev")},
        status_transitions=TRANSITIONS,
    )
    source = MagicMock()
    source.get_current_cycle.return_value = None
    source.get_issues.return_value = issues
    cycle_store = MagicMock()
    cycle_store.load.return_value = CycleData(
        cycle_id="team-dev", cycle_name="Dev", updated_at="", tasks=cached
    )
    orchestrator = SyncOrchestrator(
        source, config, LocalConfig(current_user="alice", team="dev"), cycle_store
    )
    return orchestrator, source


remote_statuses = st.sampled_from(["Todo", "Backlog", "In Progress", "Testing", "Done", "Other"])
kept_statuses = st.sampled_from(
    [LocalStatus.PENDING, LocalStatus.IN_PROGRESS, LocalStatus.IN_REVIEW, LocalStatus.BLOCKED]
)


class TestSyncMergeProperties:
    """Property tests for SyncOrchestrator merges."""

    @given(kept_statuses, remote_statuses)
    def test_cached_local_status_survives(self, local_status, remote_status):
        """A refresh takes the remote status but never overwrites the local one."""
        cached = Task(
            id="MP-1", title="Old", status="Todo", local_status=local_status, source_id="src-1"
        )
        issue = SourceIssue(
            id="src-1", identifier="MP-1", title="New", status=remote_status, team_id="team-dev"
        )
        orchestrator, source = _orchestrator([cached], [issue])

        result = orchestrator.sync(SyncOptions(download_attachments=False))

        task = result.tasks[0]
        assert task.local_status is local_status
        assert task.status == remote_status
        assert task.title == "New"
        source.update_issue_status.assert_not_called()

    @given(remote_statuses)
    def test_new_tasks_are_mapped(self, remote_status):
        issue = SourceIssue(
            id="src-2", identifier="MP-2", title="New", status=remote_status, team_id="team-dev"
        )
        orchestrator, _ = _orchestrator([], [issue])

        result = orchestrator.sync(SyncOptions(download_attachments=False))

        assert result.tasks_new == 1
        assert result.tasks[0].local_status is TRANSITIONS.map_remote_to_local(remote_status)
