"""
Status writer - turn a literal status name into a remote status write.

Every remote status change in the application layer goes through here so
that "status name not defined for this team" is handled the same way
everywhere: no write, a logged warning, and a failed WriteResult.
"""

import logging

from teamtack.core.ports.task_source import SourceStatus, TaskSourcePort, TrackerError, WriteResult


class StatusWriter:
    """Resolves status names per team and writes them through the adapter."""

    def __init__(self, source: TaskSourcePort):
        self.source = source
        self.logger = logging.getLogger("StatusWriter")

    def find_status(self, team_id: str, name: str) -> SourceStatus | None:
        for status in self.source.get_statuses(team_id):
            if status.name == name:
                return status
        return None

    def write(self, issue_id: str, display_id: str, team_id: str, status_name: str) -> WriteResult:
        """
        Move an issue to ``status_name`` within ``team_id``'s workflow.

        Never raises for tracker errors; the caller decides what a failure
        means for its flow.
        """
        try:
            status = self.find_status(team_id, status_name)
        except TrackerError as e:
            self.logger.warning(f"Could not load statuses for team {team_id}: {e}")
            return WriteResult.failed(str(e))

        if status is None:
            message = f"Status '{status_name}' does not exist for team {team_id}"
            self.logger.warning(f"{display_id}: {message}")
            return WriteResult.failed(message)

        result = self.source.update_issue_status(issue_id, status.id)
        if result.success:
            self.logger.info(f"{display_id} -> {status_name}")
        else:
            self.logger.warning(f"{display_id}: failed to set '{status_name}': {result.error}")
        return result
