"""
Completion Mode State Machine.

| Mode                | Own task             | Parent                 | Fallback                  |
|---------------------|----------------------|------------------------|---------------------------|
| simple              | done                 | done (parent's team)   | none                      |
| strict_review       | dev testing (or done)| QA/PM testing          | none                      |
| upstream_strict     | done                 | QA/PM testing          | own task to dev testing   |
| upstream_not_strict | done                 | QA/PM testing          | none                      |

Each run is a pure function of its inputs and the remote state; nothing is
persisted between runs. The completion comment is posted regardless of how
the status writes went, and is never de-duplicated across runs.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field

from teamtack.application.status_writer import StatusWriter
from teamtack.core.domain.entities import Task
from teamtack.core.domain.enums import CompletionMode, SemanticState
from teamtack.core.ports.config_provider import Config, LocalConfig
from teamtack.core.ports.task_source import TaskSourcePort, WriteResult

from .parent_issue import ParentIssueUpdater


@dataclass
class WriteAttempt:
    """One remote write made during completion."""

    target: str  # "task", "parent" or "fallback"
    issue_key: str
    status: str
    success: bool
    error: str | None = None

    def __str__(self) -> str:
        mark = "✓" if self.success else "✗"
        suffix = f" ({self.error})" if self.error else ""
        return f"{mark} [{self.target}] {self.issue_key} -> {self.status}{suffix}"


@dataclass
class CompletionOutcome:
    """Every write attempted for one completion, in order."""

    mode: CompletionMode
    attempts: list[WriteAttempt] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    comment_posted: bool | None = None  # None when no comment was requested

    @property
    def final_task_status(self) -> str | None:
        """Last status successfully written to the task itself."""
        for attempt in reversed(self.attempts):
            if attempt.target in ("task", "fallback") and attempt.success:
                return attempt.status
        return None

    @property
    def parent_updated(self) -> bool:
        return any(a.target == "parent" and a.success for a in self.attempts)

    @property
    def failed_attempts(self) -> list[WriteAttempt]:
        return [a for a in self.attempts if not a.success]


class CompletionStateMachine:
    """
    Applies a completion mode's remote writes for a finished task.

    Writes run sequentially; a failed status write never prevents the
    following ones or the comment.
    """

    def __init__(
        self,
        source: TaskSourcePort,
        config: Config,
        local: LocalConfig,
        writer: StatusWriter | None = None,
        parents: ParentIssueUpdater | None = None,
    ):
        self.source = source
        self.config = config
        self.local = local
        self.writer = writer or StatusWriter(source)
        self.parents = parents or ParentIssueUpdater(source, config, local, self.writer)
        self.logger = logging.getLogger("CompletionStateMachine")

        self.team = config.get_team(local.team)
        self._handlers: dict[CompletionMode, Callable[[Task, CompletionOutcome], None]] = {
            CompletionMode.SIMPLE: self._simple,
            CompletionMode.STRICT_REVIEW: self._strict_review,
            CompletionMode.UPSTREAM_STRICT: self._upstream_strict,
            CompletionMode.UPSTREAM_NOT_STRICT: self._upstream_not_strict,
        }

    def complete(
        self,
        task: Task,
        comment: str | None = None,
        mode: CompletionMode | None = None,
    ) -> CompletionOutcome:
        """
        Run the completion mode for ``task``.

        Args:
            task: The cached task being finished; must carry a source id.
            comment: Body of the completion comment, or None to skip it.
            mode: Override of the configured mode.
        """
        mode = mode or self.local.effective_completion_mode
        outcome = CompletionOutcome(mode=mode)
        self.logger.info(f"Completing {task.id} using {mode.value} mode")

        self._handlers[mode](task, outcome)

        if comment:
            result = self._comment(task, comment)
            outcome.comment_posted = result.success
            if not result.success:
                outcome.warnings.append(f"Comment on {task.id} failed: {result.error}")

        return outcome

    # -------------------------------------------------------------------------
    # Modes
    # -------------------------------------------------------------------------

    def _simple(self, task: Task, outcome: CompletionOutcome) -> None:
        self._write_own(task, self._done_status(), "task", outcome)
        if task.parent_issue_id:
            result = self.parents.move_to_done(task.parent_issue_id)
            # None: parent or its team could not be resolved, skipped quietly
            if result is not None:
                self._record(outcome, "parent", task.parent_issue_id, "done", result)

    def _strict_review(self, task: Task, outcome: CompletionOutcome) -> None:
        dev_testing = self.local.dev_testing(self.config)
        if not dev_testing:
            message = "No dev testing status configured, falling back to done"
            self.logger.warning(message)
            outcome.warnings.append(message)
            self._write_own(task, self._done_status(), "task", outcome)
            return

        self._write_own(task, dev_testing, "task", outcome)
        if task.parent_issue_id and self.local.qa_pm_teams:
            self._move_parent_to_testing(task, outcome)

    def _upstream_strict(self, task: Task, outcome: CompletionOutcome) -> None:
        self._upstream(task, outcome, strict=True)

    def _upstream_not_strict(self, task: Task, outcome: CompletionOutcome) -> None:
        self._upstream(task, outcome, strict=False)

    def _upstream(self, task: Task, outcome: CompletionOutcome, strict: bool) -> None:
        self._write_own(task, self._done_status(), "task", outcome)

        parent_moved = False
        if task.parent_issue_id and self.local.qa_pm_teams:
            parent_moved = self._move_parent_to_testing(task, outcome)

        if strict and not parent_moved:
            dev_testing = self.local.dev_testing(self.config)
            if dev_testing:
                self.logger.info(f"Parent not moved; {task.id} falls back to {dev_testing}")
                self._write_own(task, dev_testing, "fallback", outcome)

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _done_status(self) -> str:
        done = self.config.resolve(SemanticState.DONE, self.local.team)
        return done or "Done"

    def _move_parent_to_testing(self, task: Task, outcome: CompletionOutcome) -> bool:
        parent_id = task.parent_issue_id or ""
        result = self.parents.move_to_qa_testing(parent_id)
        self._record(outcome, "parent", parent_id, "QA testing", result)
        return result.success

    def _write_own(self, task: Task, status: str, target: str, outcome: CompletionOutcome) -> None:
        if not task.source_id:
            result = WriteResult.failed("task has no source id; sync it first")
        else:
            result = self.writer.write(task.source_id, task.id, self.team.id, status)
        self._record(outcome, target, task.id, status, result)

    def _record(
        self,
        outcome: CompletionOutcome,
        target: str,
        issue_key: str,
        status: str,
        result: WriteResult,
    ) -> None:
        outcome.attempts.append(
            WriteAttempt(
                target=target,
                issue_key=issue_key,
                status=status,
                success=result.success,
                error=result.error,
            )
        )

    def _comment(self, task: Task, body: str) -> WriteResult:
        if not task.source_id:
            return WriteResult.failed("task has no source id")
        return self.source.add_comment(task.source_id, body)
