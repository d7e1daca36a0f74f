"""
Tests for the done workflow.
"""

from unittest.mock import MagicMock

import pytest

from teamtack.application.completion.done import DoneOptions, DoneWorkflow
from teamtack.application.sync.orchestrator import SyncOrchestrator
from teamtack.core.domain.enums import CompletionMode, LocalStatus, StatusSource
from teamtack.core.exceptions import (
    ConfigurationError,
    NotFoundError,
    RemoteReadError,
    ValidationError,
)
from teamtack.core.ports.git_metadata import CommitInfo


@pytest.fixture
def workflow_factory(fake_source, config, local_config, cycle_store):
    def build(local=None, **kwargs) -> DoneWorkflow:
        local = local or local_config
        orchestrator = kwargs.pop(
            "orchestrator",
            SyncOrchestrator(fake_source, config, local, cycle_store),
        )
        return DoneWorkflow(
            source=fake_source,
            config=config,
            local=local,
            cycle_store=cycle_store,
            orchestrator=orchestrator,
            **kwargs,
        )

    return build


class TestTaskSelection:
    """Tests for which task ``done`` finishes."""

    def test_nothing_in_progress(self, workflow_factory, seed_cache, cached_task, fake_source):
        seed_cache(cached_task("MP-1", LocalStatus.PENDING, "Todo"))

        result = workflow_factory().run(DoneOptions())

        assert result.task is None
        assert result.remote_written is False
        assert fake_source.status_writes == []

    def test_no_cache(self, workflow_factory):
        with pytest.raises(ConfigurationError, match="ttt sync"):
            workflow_factory().run(DoneOptions())

    def test_several_in_progress_needs_id(self, workflow_factory, seed_cache, cached_task):
        seed_cache(
            cached_task("MP-1", LocalStatus.IN_PROGRESS, "In Progress"),
            cached_task("MP-2", LocalStatus.IN_PROGRESS, "In Progress"),
        )

        with pytest.raises(ValidationError, match="MP-1, MP-2"):
            workflow_factory().run(DoneOptions())

    def test_explicit_id_must_be_in_progress(self, workflow_factory, seed_cache, cached_task):
        seed_cache(cached_task("MP-1", LocalStatus.PENDING, "Todo"))

        with pytest.raises(ValidationError, match="ttt work-on MP-1"):
            workflow_factory().run(DoneOptions(issue_id="MP-1"))

    def test_unknown_id(self, workflow_factory, seed_cache, cached_task):
        seed_cache(cached_task("MP-1", LocalStatus.IN_PROGRESS, "In Progress"))

        with pytest.raises(NotFoundError):
            workflow_factory().run(DoneOptions(issue_id="MP-404"))

    def test_bare_number_expands(
        self, workflow_factory, seed_cache, cached_task, fake_source, make_issue
    ):
        seed_cache(cached_task("MP-7", LocalStatus.IN_PROGRESS, "In Progress"))
        fake_source.add(make_issue("MP-7", "In Progress"))

        result = workflow_factory().run(DoneOptions(issue_id="7"))

        assert result.task.id == "MP-7"

    def test_from_remote_requires_id(self, workflow_factory):
        with pytest.raises(ValidationError):
            workflow_factory().run(DoneOptions(from_remote=True))

    def test_from_remote_missing_issue(self, workflow_factory):
        with pytest.raises(NotFoundError):
            workflow_factory().run(DoneOptions(issue_id="MP-404", from_remote=True))


class TestRemoteCompletion:
    """Tests for the remote path of ``done``."""

    def test_simple_done_refreshes_cache(
        self, workflow_factory, seed_cache, cached_task, fake_source, make_issue, cycle_store
    ):
        seed_cache(cached_task("MP-1", LocalStatus.IN_PROGRESS, "In Progress"))
        fake_source.add(make_issue("MP-1", "In Progress"))

        result = workflow_factory().run(DoneOptions())

        assert fake_source.writes_for("MP-1") == ["Done"]
        assert result.outcome.mode is CompletionMode.SIMPLE
        cached = cycle_store.load().find_task("MP-1")
        assert cached.status == "Done"
        assert cached.local_status is LocalStatus.COMPLETED
        assert result.task.local_status is LocalStatus.COMPLETED

    def test_review_status_keeps_task_completed(
        self,
        workflow_factory,
        qa_local_config,
        seed_cache,
        cached_task,
        fake_source,
        make_issue,
        cycle_store,
    ):
        """A remote status that maps to pending still leaves the task completed locally."""
        seed_cache(cached_task("MP-1", LocalStatus.IN_PROGRESS, "In Progress"))
        fake_source.add(make_issue("MP-1", "In Progress"))

        workflow_factory(local=qa_local_config).run(DoneOptions())

        cached = cycle_store.load().find_task("MP-1")
        assert cached.status == "In Review"
        assert cached.local_status is LocalStatus.COMPLETED

    def test_from_remote_completes_uncached_issue(
        self, workflow_factory, fake_source, make_issue, cycle_store
    ):
        fake_source.add(make_issue("MP-3", "In Progress"))

        result = workflow_factory().run(DoneOptions(issue_id="MP-3", from_remote=True))

        assert fake_source.writes_for("MP-3") == ["Done"]
        assert result.task.id == "MP-3"
        assert cycle_store.load().find_task("MP-3").local_status is LocalStatus.COMPLETED

    def test_message_becomes_comment_with_commit(
        self, workflow_factory, seed_cache, cached_task, fake_source, make_issue
    ):
        seed_cache(cached_task("MP-1", LocalStatus.IN_PROGRESS, "In Progress"))
        fake_source.add(make_issue("MP-1", "In Progress"))
        git = MagicMock()
        git.get_latest_commit.return_value = CommitInfo(
            short_hash="abc1234", full_hash="abc1234ff", message="Fix login"
        )

        result = workflow_factory(git=git).run(DoneOptions(message="Fixed the redirect"))

        assert result.commit.short_hash == "abc1234"
        assert result.outcome.comment_posted is True
        body = fake_source.comments[0][1]
        assert "Fixed the redirect" in body
        assert "`abc1234`" in body

    def test_no_message_no_comment(
        self, workflow_factory, seed_cache, cached_task, fake_source, make_issue
    ):
        seed_cache(cached_task("MP-1", LocalStatus.IN_PROGRESS, "In Progress"))
        fake_source.add(make_issue("MP-1", "In Progress"))

        workflow_factory().run(DoneOptions())

        assert fake_source.comments == []

    def test_refresh_failure_is_a_warning(
        self, workflow_factory, seed_cache, cached_task, fake_source, make_issue, cycle_store
    ):
        seed_cache(cached_task("MP-1", LocalStatus.IN_PROGRESS, "In Progress"))
        fake_source.add(make_issue("MP-1", "In Progress"))
        orchestrator = MagicMock()
        orchestrator.sync.side_effect = RemoteReadError("tracker unreachable")

        result = workflow_factory(orchestrator=orchestrator).run(DoneOptions())

        assert any("Could not refresh" in w for w in result.warnings)
        assert cycle_store.load().find_task("MP-1").local_status is LocalStatus.COMPLETED


class TestLocalStatusSource:
    """Tests for ``status_source: local``."""

    def test_no_remote_writes(
        self, workflow_factory, local_config, seed_cache, cached_task, fake_source, cycle_store
    ):
        local_config.status_source = StatusSource.LOCAL
        seed_cache(cached_task("MP-1", LocalStatus.IN_PROGRESS, "In Progress"))

        result = workflow_factory().run(DoneOptions(message="done"))

        assert result.remote_written is False
        assert fake_source.status_writes == []
        assert fake_source.comments == []
        assert cycle_store.load().find_task("MP-1").local_status is LocalStatus.COMPLETED
