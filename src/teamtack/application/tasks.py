"""
Task workflows - start work, change status and look tasks up.

These operate on the cached snapshot; remote writes only happen when the
deployment's status source is ``remote``.
"""

import logging
import re
from dataclasses import dataclass, field

from teamtack.adapters.cache.cycle_store import CycleStore
from teamtack.application.status_writer import StatusWriter
from teamtack.application.sync.orchestrator import build_task
from teamtack.core.domain.entities import CycleData, Task
from teamtack.core.domain.enums import LocalStatus, SemanticState, StatusSource
from teamtack.core.exceptions import NotFoundError, ValidationError
from teamtack.core.ports.config_provider import Config, LocalConfig
from teamtack.core.ports.task_source import TaskSourcePort, WriteResult


logger = logging.getLogger("TaskWorkflow")

# Relative moves (+1/-1/...) walk this order, clamped at both ends
STATUS_ORDER = [
    LocalStatus.PENDING,
    LocalStatus.IN_PROGRESS,
    LocalStatus.IN_REVIEW,
    LocalStatus.COMPLETED,
]

SEMANTIC_TO_LOCAL = {
    SemanticState.TODO: LocalStatus.PENDING,
    SemanticState.IN_PROGRESS: LocalStatus.IN_PROGRESS,
    SemanticState.TESTING: LocalStatus.IN_REVIEW,
    SemanticState.DONE: LocalStatus.COMPLETED,
    SemanticState.BLOCKED: LocalStatus.BLOCKED,
}

DISPLAY_ID_PATTERN = re.compile(r"^([A-Za-z][A-Za-z0-9]*)-\d+$")
RELATIVE_PATTERN = re.compile(r"^[+-]\d+$")


def resolve_task_id(raw: str, data: CycleData | None) -> str:
    """
    Expand a user-typed id against the cache.

    Exact ids win. A bare number gets the team prefix used by cached tasks
    (``123`` -> ``MP-123``), and a lower-case id matches case-insensitively.
    """
    candidate = raw.strip()
    if data is None:
        return candidate
    if data.find_task(candidate):
        return candidate

    for task in data.tasks:
        if task.id.lower() == candidate.lower():
            return task.id

    if candidate.isdigit():
        for task in data.tasks:
            match = DISPLAY_ID_PATTERN.match(task.id)
            if match:
                expanded = f"{match.group(1)}-{candidate}"
                if data.find_task(expanded):
                    return expanded
    return candidate


def parse_status_change(
    value: str, current: LocalStatus
) -> tuple[LocalStatus, SemanticState | None]:
    """
    Interpret a ``status --set`` value.

    Returns the new local status and, for semantic names, the semantic state
    to write remotely.
    """
    text = value.strip()
    if RELATIVE_PATTERN.match(text):
        index = STATUS_ORDER.index(current) if current in STATUS_ORDER else 0
        new_index = min(max(index + int(text), 0), len(STATUS_ORDER) - 1)
        return STATUS_ORDER[new_index], None

    normalized = text.lower().replace("-", "_").replace(" ", "_")
    for state in SemanticState:
        if state.value == normalized:
            return SEMANTIC_TO_LOCAL[state], state

    return LocalStatus.from_string(text), None


@dataclass
class WorkOnResult:
    """What ``work-on`` did."""

    action: str  # started, already_in_progress, already_completed, not_pending, listed
    task: Task | None = None
    candidates: list[Task] = field(default_factory=list)
    remote: WriteResult | None = None


@dataclass
class StatusChange:
    task: Task
    previous: LocalStatus
    remote_status: str | None = None
    remote: WriteResult | None = None


class TaskWorkflow:
    """work-on, status and show over the cached snapshot."""

    def __init__(
        self,
        config: Config,
        local: LocalConfig,
        cycle_store: CycleStore,
        source: TaskSourcePort | None = None,
    ):
        self.config = config
        self.local = local
        self.cycle_store = cycle_store
        self.source = source
        self.transitions = config.transitions_for(local.team)

    # -------------------------------------------------------------------------
    # work-on
    # -------------------------------------------------------------------------

    def pending_candidates(self, data: CycleData) -> list[Task]:
        """Pending tasks for the current user, in priority order."""
        user = self.config.users.get(self.local.current_user)
        identity = user.identity if user else None
        return [
            task
            for task in data.tasks
            if task.local_status is LocalStatus.PENDING
            and (not identity or task.assignee == identity)
        ]

    def start(self, issue_id: str | None = None) -> WorkOnResult:
        """
        Start work on a task.

        ``next`` picks the highest priority pending task of the current
        user; no id lists the candidates instead.

        Raises:
            NotFoundError: If the task is not in the cache.
        """
        data = self.cycle_store.require()
        candidates = self.pending_candidates(data)

        if not issue_id:
            return WorkOnResult(action="listed", candidates=candidates)

        if issue_id.lower() == "next":
            if not candidates:
                return WorkOnResult(action="listed", candidates=[])
            task = candidates[0]
        else:
            task_id = resolve_task_id(issue_id, data)
            found = data.find_task(task_id)
            if found is None:
                raise NotFoundError(
                    f"Task {issue_id} not found in the local cache", issue_key=issue_id
                )
            task = found

        if task.local_status is LocalStatus.IN_PROGRESS:
            return WorkOnResult(action="already_in_progress", task=task)
        if task.local_status is LocalStatus.COMPLETED:
            return WorkOnResult(action="already_completed", task=task)
        if task.local_status is not LocalStatus.PENDING:
            return WorkOnResult(action="not_pending", task=task)

        task.local_status = LocalStatus.IN_PROGRESS
        remote = self._write_remote(task, self.transitions.in_progress)
        self._save(data, task)
        logger.info(f"Started work on {task.id}")
        return WorkOnResult(action="started", task=task, remote=remote)

    # -------------------------------------------------------------------------
    # status
    # -------------------------------------------------------------------------

    def find(self, issue_id: str | None = None) -> tuple[Task | None, CycleData]:
        """A task by id, or the first in-progress task when no id is given."""
        data = self.cycle_store.require()
        if issue_id:
            task = data.find_task(resolve_task_id(issue_id, data))
            if task is None:
                raise NotFoundError(
                    f"Task {issue_id} not found in the local cache", issue_key=issue_id
                )
            return task, data
        in_progress = data.tasks_with_status(LocalStatus.IN_PROGRESS)
        return (in_progress[0] if in_progress else None), data

    def set_status(self, issue_id: str | None, value: str) -> StatusChange:
        """
        Change a task's local status and mirror it remotely.

        Raises:
            ValidationError: If no task is selected or ``value`` is invalid.
        """
        task, data = self.find(issue_id)
        if task is None:
            raise ValidationError("No task selected and no task is in progress")

        new_local, semantic = parse_status_change(value, task.local_status)
        previous = task.local_status
        task.local_status = new_local

        remote_status = (
            self.transitions.resolve(semantic)
            if semantic is not None
            else self.transitions.map_local_to_remote(new_local)
        )
        remote = self._write_remote(task, remote_status) if remote_status else None
        self._save(data, task)
        logger.info(f"{task.id}: {previous.value} -> {new_local.value}")
        return StatusChange(
            task=task, previous=previous, remote_status=remote_status, remote=remote
        )

    # -------------------------------------------------------------------------
    # show
    # -------------------------------------------------------------------------

    def fetch_remote(self, issue_id: str) -> Task:
        """
        Fetch a task from the tracker, keeping the cached local status.

        Raises:
            NotFoundError: If the tracker has no such issue.
        """
        if self.source is None:
            raise ValidationError("A remote source is required to fetch from the tracker")
        data = self.cycle_store.load()
        task_id = resolve_task_id(issue_id, data)
        issue = self.source.search_issue(task_id)
        if issue is None:
            raise NotFoundError(f"Issue {issue_id} not found", issue_key=issue_id)
        cached = data.find_task(issue.identifier) if data else None
        local_status = (
            cached.local_status if cached else self.transitions.map_remote_to_local(issue.status)
        )
        return build_task(issue, local_status, source=self.config.source.type.value)

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _write_remote(self, task: Task, status_name: str) -> WriteResult | None:
        if self.local.status_source is StatusSource.LOCAL or self.source is None:
            return None
        if not task.source_id:
            return WriteResult.failed("task has no source id; sync it first")

        team = self.config.get_team(self.local.team)
        result = StatusWriter(self.source).write(task.source_id, task.id, team.id, status_name)
        if result.success:
            task.status = status_name
        return result

    def _save(self, data: CycleData, task: Task) -> None:
        data.upsert(task, self.config.priority_order)
        self.cycle_store.save(data)
