"""
Sync Orchestrator - Coordinates the synchronization process.

One pass runs, in order:

1. resolve the active cycle (or board) and archive the previous one
2. with ``update``, push local in-progress / completed markers to the remote
3. fetch issues (one by display id, or all matching the status/label filters)
4. merge with the cache, preserving local status and nudging completed
   tasks whose remote status never advanced
5. collect attachments and persist the snapshot
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from teamtack.adapters.cache.cycle_store import CycleStore, utc_timestamp
from teamtack.application.status_writer import StatusWriter
from teamtack.core.domain.entities import Attachment, Comment, CycleData, CycleInfo, Task
from teamtack.core.domain.enums import LocalStatus
from teamtack.core.exceptions import NotFoundError
from teamtack.core.ports.attachments import AttachmentDownloaderPort
from teamtack.core.ports.config_provider import Config, ConfigStorePort, LocalConfig
from teamtack.core.ports.task_source import GetIssuesOptions, SourceIssue, TaskSourcePort


def build_task(issue: SourceIssue, local_status: LocalStatus, source: str | None = None) -> Task:
    """Cache record for a fetched issue; attachments are copied without local paths."""
    return Task(
        id=issue.identifier,
        source_id=issue.id,
        source=source,
        title=issue.title,
        description=issue.description,
        status=issue.status,
        local_status=local_status,
        priority=issue.priority,
        labels=list(issue.labels),
        assignee=issue.assignee_email or issue.assignee_id,
        parent_issue_id=issue.parent_identifier,
        url=issue.url,
        branch_name=issue.branch_name,
        attachments=[
            Attachment(id=a.id, title=a.title, url=a.url, content_type=a.content_type)
            for a in issue.attachments
        ],
        comments=[
            Comment(id=c.id, body=c.body, created_at=c.created_at, user=c.user)
            for c in issue.comments
        ],
    )


@dataclass
class FailedOperation:
    """A remote write that did not go through; never fatal to the pass."""

    operation: str  # e.g. "push_in_progress", "nudge_testing"
    issue_key: str
    error: str

    def __str__(self) -> str:
        return f"[{self.operation}] {self.issue_key}: {self.error}"


@dataclass
class SyncOptions:
    """Inputs of one sync pass."""

    issue_id: str | None = None
    sync_all: bool = False
    update: bool = False
    preserve_local_status: bool = True
    download_attachments: bool = True


@dataclass
class SyncResult:
    """
    Result of a sync pass.

    ``success`` only turns False for fatal problems; failed writes are
    collected in ``failed_operations`` and the pass still completes.
    """

    success: bool = True
    dry_run: bool = False

    cycle_id: str = ""
    cycle_name: str = ""
    cycle_changed: bool = False

    tasks_fetched: int = 0
    tasks_new: int = 0
    tasks_skipped: int = 0
    statuses_pushed: int = 0
    statuses_nudged: int = 0
    attachments_downloaded: int = 0

    failed_operations: list[FailedOperation] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    tasks: list[Task] = field(default_factory=list)

    def add_error(self, error: str) -> None:
        self.errors.append(error)
        self.success = False

    def add_failed_operation(self, operation: str, issue_key: str, error: str) -> None:
        self.failed_operations.append(
            FailedOperation(operation=operation, issue_key=issue_key, error=error)
        )

    def add_warning(self, warning: str) -> None:
        self.warnings.append(warning)

    @property
    def partial_success(self) -> bool:
        return self.success and bool(self.failed_operations)

    def summary(self) -> str:
        lines = []
        if self.dry_run:
            lines.append("DRY RUN - No remote changes made")

        if not self.success:
            lines.append(f"✗ Sync failed ({len(self.errors)} errors)")
        elif self.partial_success:
            lines.append(f"⚠ Sync completed with {len(self.failed_operations)} failed write(s)")
        else:
            lines.append("✓ Sync completed successfully")

        lines.append(f"  Cycle: {self.cycle_name}")
        lines.append(f"  Tasks fetched: {self.tasks_fetched} ({self.tasks_new} new)")
        if self.statuses_pushed:
            lines.append(f"  Local statuses pushed: {self.statuses_pushed}")
        if self.statuses_nudged:
            lines.append(f"  Completed tasks moved to testing: {self.statuses_nudged}")
        if self.attachments_downloaded:
            lines.append(f"  Attachments downloaded: {self.attachments_downloaded}")

        if self.failed_operations:
            lines.append("")
            lines.append("Failed operations:")
            for failed in self.failed_operations[:10]:
                lines.append(f"  • {failed}")
            if len(self.failed_operations) > 10:
                lines.append(f"  ... and {len(self.failed_operations) - 10} more")

        if self.warnings:
            lines.append("")
            lines.append("Warnings:")
            for warning in self.warnings[:5]:
                lines.append(f"  • {warning}")
            if len(self.warnings) > 5:
                lines.append(f"  ... and {len(self.warnings) - 5} more")

        return "\n".join(lines)


class SyncOrchestrator:
    """
    Orchestrates one reconciliation pass between the tracker and the cache.

    Read failures propagate and abort the pass before anything is saved.
    Write failures are recorded on the result and the pass carries on.
    """

    def __init__(
        self,
        source: TaskSourcePort,
        config: Config,
        local: LocalConfig,
        cycle_store: CycleStore,
        config_store: ConfigStorePort | None = None,
        downloader: AttachmentDownloaderPort | None = None,
        output_dir: Path | None = None,
        dry_run: bool = False,
    ):
        self.source = source
        self.config = config
        self.local = local
        self.cycle_store = cycle_store
        self.config_store = config_store
        self.downloader = downloader
        self.output_dir = output_dir
        self.dry_run = dry_run
        self.writer = StatusWriter(source)
        self.logger = logging.getLogger("SyncOrchestrator")

        self.team = config.get_team(local.team)
        self.transitions = config.transitions_for(local.team)

    # -------------------------------------------------------------------------
    # Public API
    # -------------------------------------------------------------------------

    def sync(self, options: SyncOptions | None = None) -> SyncResult:
        """
        Run a sync pass.

        Raises:
            RemoteReadError: If the tracker cannot be read.
            NotFoundError: If a single requested issue does not exist.
        """
        options = options or SyncOptions()
        result = SyncResult(dry_run=self.dry_run)

        # Step 1: grouping
        remote_cycle_id, cycle_id, cycle_name = self._resolve_cycle(result)
        result.cycle_id, result.cycle_name = cycle_id, cycle_name

        existing = self.cycle_store.load()

        # Step 2: push local markers before fetching, so the fetch sees them
        if options.update and existing is not None:
            self._push_local_changes(existing, result)

        # Step 3: fetch
        issues = self._fetch_issues(options, remote_cycle_id)
        excluded = self.local.exclude_labels
        if excluded:
            kept = [issue for issue in issues if not issue.has_any_label(excluded)]
            result.tasks_skipped = len(issues) - len(kept)
            issues = kept
        result.tasks_fetched = len(issues)

        if options.issue_id and not issues:
            result.add_warning(f"{options.issue_id} carries an excluded label; cache unchanged")
            return result

        # Steps 4 and 5: merge, nudge and attachments
        cached = {task.id: task for task in existing.tasks} if existing else {}
        tasks = [
            self._merge_issue(issue, cached.get(issue.identifier), options, result)
            for issue in issues
        ]

        # Persist: a single issue is upserted, a full pass replaces the snapshot
        if options.issue_id and existing is not None:
            data = existing
            data.cycle_id, data.cycle_name = cycle_id, cycle_name
            for task in tasks:
                data.upsert(task, self.config.priority_order)
        elif options.issue_id:
            data = CycleData(cycle_id=cycle_id, cycle_name=cycle_name, updated_at="")
            for task in tasks:
                data.upsert(task, self.config.priority_order)
        else:
            data = CycleData(cycle_id=cycle_id, cycle_name=cycle_name, updated_at="", tasks=tasks)
            data.sort_tasks(self.config.priority_order)

        data.updated_at = utc_timestamp()
        try:
            self.cycle_store.save(data)
        except OSError as e:
            self.logger.error(f"Could not write task cache: {e}")
            result.add_error(f"Could not write task cache {self.cycle_store.path}: {e}")
            return result
        result.tasks = tasks

        self.logger.info(
            f"Synced {len(tasks)} task(s) for {cycle_name}; "
            f"{len(result.failed_operations)} failed write(s)"
        )
        return result

    # -------------------------------------------------------------------------
    # Step 1: cycle
    # -------------------------------------------------------------------------

    def _resolve_cycle(self, result: SyncResult) -> tuple[str | None, str, str]:
        """Return the remote cycle id (None without cycles) and the grouping id and name."""
        cycle = self.source.get_current_cycle(self.team.id)
        if cycle is None:
            # Boards have no cycles; the team itself is the grouping
            return None, self.team.id, self.team.name

        info = CycleInfo(
            id=cycle.id, name=cycle.name, start_date=cycle.start_date, end_date=cycle.end_date
        )
        if self.config.record_cycle(info):
            result.cycle_changed = True
            self.logger.info(f"Active cycle is now {cycle.name}")
            if self.config_store is not None:
                self.config_store.save_config(self.config)
        return cycle.id, cycle.id, cycle.name

    # -------------------------------------------------------------------------
    # Step 2: push local changes
    # -------------------------------------------------------------------------

    def _push_local_changes(self, existing: CycleData, result: SyncResult) -> None:
        for task in existing.tasks:
            target = self._push_target(task)
            if target is None:
                continue
            operation, status_name = target
            if not task.source_id:
                result.add_warning(f"{task.id} has no source id; run a full sync first")
                continue

            write = self.writer.write(task.source_id, task.id, self.team.id, status_name)
            if write.success:
                task.status = status_name
                result.statuses_pushed += 1
            else:
                result.add_failed_operation(operation, task.id, write.error or "unknown error")

    def _push_target(self, task: Task) -> tuple[str, str] | None:
        if task.local_status is LocalStatus.IN_PROGRESS:
            if task.status != self.transitions.in_progress:
                return "push_in_progress", self.transitions.in_progress
        elif task.local_status is LocalStatus.COMPLETED:
            testing = self.transitions.testing
            status_type = self.config.status_type(task.status)
            if testing and not self.transitions.is_terminal(task.status, status_type):
                return "push_completed", testing
        return None

    # -------------------------------------------------------------------------
    # Step 3: fetch
    # -------------------------------------------------------------------------

    def _fetch_issues(self, options: SyncOptions, cycle_id: str | None) -> list[SourceIssue]:
        if options.issue_id:
            issue = self.source.search_issue(options.issue_id)
            if issue is None or issue.identifier != options.issue_id:
                raise NotFoundError(
                    f"Issue {options.issue_id} not found", issue_key=options.issue_id
                )
            return [issue]

        return self.source.get_issues(
            GetIssuesOptions(
                team_id=self.team.id,
                cycle_id=cycle_id,
                status_names=[] if options.sync_all else self.transitions.sync_statuses(),
                label_names=list(self.local.labels),
                exclude_labels=list(self.local.exclude_labels),
            )
        )

    # -------------------------------------------------------------------------
    # Step 4: merge
    # -------------------------------------------------------------------------

    def _merge_issue(
        self,
        issue: SourceIssue,
        cached: Task | None,
        options: SyncOptions,
        result: SyncResult,
    ) -> Task:
        status = issue.status

        if cached is not None and options.preserve_local_status:
            local_status = cached.local_status
            if local_status is LocalStatus.COMPLETED:
                status = self._nudge_completed(issue, result)
        else:
            local_status = self.transitions.map_remote_to_local(issue.status)
            if cached is None:
                result.tasks_new += 1

        task = build_task(issue, local_status, source=self.config.source.type.value)
        task.status = status
        task.attachments = self._collect_attachments(issue, options, result)
        return task

    def _nudge_completed(self, issue: SourceIssue, result: SyncResult) -> str:
        """Move a locally completed task to testing if the remote never advanced."""
        testing = self.transitions.testing
        if not testing or self.transitions.is_terminal(issue.status, issue.status_type):
            return issue.status

        write = self.writer.write(issue.id, issue.identifier, self.team.id, testing)
        if write.success:
            result.statuses_nudged += 1
            return testing
        result.add_failed_operation(
            "nudge_testing", issue.identifier, write.error or "unknown error"
        )
        return issue.status

    # -------------------------------------------------------------------------
    # Step 5: attachments
    # -------------------------------------------------------------------------

    def _collect_attachments(
        self, issue: SourceIssue, options: SyncOptions, result: SyncResult
    ) -> list[Attachment]:
        attachments = [
            Attachment(id=a.id, title=a.title, url=a.url, content_type=a.content_type)
            for a in issue.attachments
        ]
        downloader, output_dir = self.downloader, self.output_dir
        if not options.download_attachments or downloader is None or output_dir is None:
            return attachments

        downloader.clear_task_files(issue.identifier, output_dir)

        for attachment in attachments:
            if downloader.is_known_image_host(attachment.url):
                attachment.local_path = self._download(
                    downloader, output_dir, attachment.url, issue.identifier, attachment.id, result
                )

        known_urls = {a.url for a in attachments}
        for url in downloader.extract_image_urls(issue.description or ""):
            if url in known_urls:
                continue
            image_id = url.split("?")[0].rstrip("/").rsplit("/", 1)[-1] or "image"
            attachments.append(
                Attachment(
                    id=image_id,
                    title="Description Image",
                    url=url,
                    local_path=self._download(
                        downloader, output_dir, url, issue.identifier, image_id, result
                    ),
                )
            )
            known_urls.add(url)

        return attachments

    def _download(
        self,
        downloader: AttachmentDownloaderPort,
        output_dir: Path,
        url: str,
        task_id: str,
        attachment_id: str,
        result: SyncResult,
    ) -> str | None:
        path = downloader.download(url, task_id, attachment_id, output_dir)
        if path:
            result.attachments_downloaded += 1
        else:
            result.add_warning(f"{task_id}: could not download {url}")
        return path
