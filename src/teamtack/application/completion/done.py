"""
Done workflow - finish the task being worked on.

Picks the task (explicit id, the only in-progress task, or straight from the
tracker), runs the completion mode when statuses are remote-sourced, then
refreshes the task in the cache.
"""

import logging
from dataclasses import dataclass, field

from teamtack.adapters.cache.cycle_store import CycleStore
from teamtack.adapters.git.comment import build_completion_comment
from teamtack.application.sync.orchestrator import SyncOptions, SyncOrchestrator, build_task
from teamtack.application.tasks import resolve_task_id
from teamtack.core.domain.entities import Task
from teamtack.core.domain.enums import LocalStatus, StatusSource
from teamtack.core.exceptions import NotFoundError, TrackerError, ValidationError
from teamtack.core.ports.config_provider import Config, LocalConfig
from teamtack.core.ports.git_metadata import CommitInfo, GitMetadataPort
from teamtack.core.ports.task_source import TaskSourcePort

from .modes import CompletionOutcome, CompletionStateMachine


# Local statuses that already reflect a finished task after the refresh
FINISHED_LOCAL = (LocalStatus.COMPLETED, LocalStatus.IN_REVIEW)


@dataclass
class DoneOptions:
    issue_id: str | None = None
    message: str | None = None
    from_remote: bool = False


@dataclass
class DoneResult:
    """
    Outcome of ``done``.

    ``task`` is None when there was nothing in progress to finish.
    """

    task: Task | None = None
    outcome: CompletionOutcome | None = None
    commit: CommitInfo | None = None
    warnings: list[str] = field(default_factory=list)

    @property
    def remote_written(self) -> bool:
        return self.outcome is not None


class DoneWorkflow:
    """Completes a task locally and, for remote status sources, remotely."""

    def __init__(
        self,
        source: TaskSourcePort,
        config: Config,
        local: LocalConfig,
        cycle_store: CycleStore,
        orchestrator: SyncOrchestrator,
        git: GitMetadataPort | None = None,
        machine: CompletionStateMachine | None = None,
    ):
        self.source = source
        self.config = config
        self.local = local
        self.cycle_store = cycle_store
        self.orchestrator = orchestrator
        self.git = git
        self.machine = machine or CompletionStateMachine(source, config, local)
        self.logger = logging.getLogger("DoneWorkflow")

    def run(self, options: DoneOptions) -> DoneResult:
        """
        Finish a task.

        Raises:
            ValidationError: Several tasks in progress and no id given, or the
                chosen task is not in progress.
            NotFoundError: The task is neither cached nor on the tracker.
        """
        task = self._select_task(options)
        if task is None:
            return DoneResult()

        result = DoneResult(task=task)
        result.commit = self.git.get_latest_commit() if self.git else None
        comment = (
            build_completion_comment(options.message, result.commit) if options.message else None
        )

        if self.local.status_source is StatusSource.LOCAL:
            self.logger.info(f"Status source is local; {task.id} completed in the cache only")
            task.local_status = LocalStatus.COMPLETED
            self._store(task)
            return result

        result.outcome = self.machine.complete(task, comment)
        result.warnings.extend(result.outcome.warnings)
        result.task = self._refresh(task, result)
        return result

    # -------------------------------------------------------------------------
    # Task selection
    # -------------------------------------------------------------------------

    def _select_task(self, options: DoneOptions) -> Task | None:
        if options.from_remote:
            if not options.issue_id:
                raise ValidationError("--from-remote needs an issue id")
            issue = self.source.search_issue(options.issue_id)
            if issue is None:
                raise NotFoundError(
                    f"Issue {options.issue_id} not found", issue_key=options.issue_id
                )
            return build_task(
                issue, LocalStatus.IN_PROGRESS, source=self.config.source.type.value
            )

        data = self.cycle_store.require()
        in_progress = data.tasks_with_status(LocalStatus.IN_PROGRESS)

        if not options.issue_id:
            if not in_progress:
                return None
            if len(in_progress) > 1:
                ids = ", ".join(task.id for task in in_progress)
                raise ValidationError(
                    f"Several tasks are in progress ({ids}); pass the one to finish"
                )
            return in_progress[0]

        task_id = resolve_task_id(options.issue_id, data)
        task = data.find_task(task_id)
        if task is None:
            raise NotFoundError(
                f"Task {options.issue_id} not found in the local cache", issue_key=task_id
            )
        if task.local_status is not LocalStatus.IN_PROGRESS:
            raise ValidationError(
                f"Task {task.id} is {task.local_status.value}, not in-progress. "
                f"Run 'ttt work-on {task.id}' first."
            )
        return task

    # -------------------------------------------------------------------------
    # Cache refresh
    # -------------------------------------------------------------------------

    def _refresh(self, task: Task, result: DoneResult) -> Task:
        """
        Re-fetch the task so the cache shows the new remote status.

        The local status follows the remote when it reads as finished;
        otherwise it stays completed so the next sync can nudge it forward.
        """
        try:
            self.orchestrator.sync(SyncOptions(issue_id=task.id, preserve_local_status=False))
        except TrackerError as e:
            message = f"Could not refresh {task.id} from the tracker: {e}"
            self.logger.warning(message)
            result.warnings.append(message)
            task.local_status = LocalStatus.COMPLETED
            self._store(task)
            return task

        data = self.cycle_store.load()
        refreshed = (data.find_task(task.id) if data else None) or task
        if refreshed.local_status not in FINISHED_LOCAL:
            refreshed.local_status = LocalStatus.COMPLETED
            self._store(refreshed)
        return refreshed

    def _store(self, task: Task) -> None:
        self.cycle_store.upsert_task(task, self.config.priority_order)
