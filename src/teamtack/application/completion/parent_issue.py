"""
Parent issue updates for completion cascades.

The parent may live in another team with its own status vocabulary, so the
target status is resolved from the parent's team, never the dev team's.
Lookup misses never raise.
"""

import logging

from teamtack.application.status_writer import StatusWriter
from teamtack.core.domain.enums import SemanticState
from teamtack.core.ports.config_provider import Config, LocalConfig
from teamtack.core.ports.task_source import SourceIssue, TaskSourcePort, TrackerError, WriteResult


class ParentIssueUpdater:
    """Moves a task's parent to done or to its QA/PM team's testing status."""

    def __init__(
        self,
        source: TaskSourcePort,
        config: Config,
        local: LocalConfig,
        writer: StatusWriter | None = None,
    ):
        self.source = source
        self.config = config
        self.local = local
        self.writer = writer or StatusWriter(source)
        self.logger = logging.getLogger("ParentIssueUpdater")

    def _find_parent(self, parent_id: str) -> SourceIssue | None:
        try:
            return self.source.search_issue(parent_id)
        except TrackerError as e:
            self.logger.warning(f"Could not look up parent {parent_id}: {e}")
            return None

    def move_to_done(self, parent_id: str) -> WriteResult | None:
        """
        Move the parent to its own team's done status.

        Returns None when the parent cannot be found or its team is not in
        the config; that skip only shows up in debug logs.
        """
        parent = self._find_parent(parent_id)
        if parent is None:
            self.logger.debug(f"Parent {parent_id} not found; skipping")
            return None

        team_key = self.config.team_key_for_id(parent.team_id)
        if team_key is None or not parent.team_id:
            self.logger.debug(f"Parent {parent_id} belongs to an unconfigured team; skipping")
            return None

        done = self.config.resolve(SemanticState.DONE, team_key)
        if not done:
            return WriteResult.failed(f"No done status configured for team {team_key}")
        return self.writer.write(parent.id, parent.identifier, parent.team_id, done)

    def move_to_qa_testing(self, parent_id: str) -> WriteResult:
        """
        Move the parent to its QA/PM team's testing status.

        Only parents whose team appears in ``qa_pm_teams`` are touched, and
        the status comes from that entry.
        """
        parent = self._find_parent(parent_id)
        if parent is None:
            self.logger.info(f"Parent {parent_id} not found; not moved to testing")
            return WriteResult.failed(f"Parent {parent_id} not found")

        team_key = self.config.team_key_for_id(parent.team_id)
        entry = self.local.qa_pm_entry(team_key)
        if entry is None or not parent.team_id:
            self.logger.info(
                f"Parent {parent_id} is not owned by a QA/PM team; not moved to testing"
            )
            return WriteResult.failed(f"Team of parent {parent_id} is not a QA/PM team")

        return self.writer.write(parent.id, parent.identifier, parent.team_id, entry.testing_status)
