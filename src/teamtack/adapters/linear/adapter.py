"""
Linear Adapter - Implements TaskSourcePort for Linear.

Key mappings:
- Team -> SourceTeam
- Workflow state -> SourceStatus (with Linear's state type)
- Active cycle -> SourceCycle
- Issue identifier (MP-123) -> display id, issue UUID -> source id
- Priority -> Linear's native 0-4 scale, unchanged
"""

import logging
from typing import Any

from teamtack.core.ports.task_source import (
    GetIssuesOptions,
    InitData,
    NotFoundError,
    SourceAttachment,
    SourceComment,
    SourceCycle,
    SourceIssue,
    SourceLabel,
    SourceStatus,
    SourceTeam,
    SourceUser,
    TaskSourcePort,
    TrackerError,
    WriteResult,
)

from .client import LinearApiClient


class LinearAdapter(TaskSourcePort):
    """
    Linear implementation of the TaskSourcePort.

    Workflow states are cached per team for the lifetime of the adapter,
    which is one CLI invocation.
    """

    def __init__(self, api_key: str, dry_run: bool = False):
        """
        Initialize the Linear adapter.

        Args:
            api_key: Linear API key
            dry_run: If True, writes are logged instead of sent
        """
        self._api_key = api_key
        self._dry_run = dry_run
        self.logger = logging.getLogger("LinearAdapter")
        self._client = LinearApiClient(api_key=api_key, dry_run=dry_run)
        self._states_cache: dict[str, list[SourceStatus]] = {}

    # -------------------------------------------------------------------------
    # TaskSourcePort Implementation - Properties
    # -------------------------------------------------------------------------

    @property
    def name(self) -> str:
        return "Linear"

    def validate_connection(self) -> bool:
        return self._client.test_connection()

    # -------------------------------------------------------------------------
    # TaskSourcePort Implementation - Vocabulary
    # -------------------------------------------------------------------------

    def get_teams(self) -> list[SourceTeam]:
        return [
            SourceTeam(id=t["id"], name=t["name"], key=t.get("key"), icon=t.get("icon"))
            for t in self._client.get_teams()
        ]

    def get_users(self, team_id: str | None = None) -> list[SourceUser]:
        members = (
            self._client.get_team_members(team_id) if team_id else self._client.get_users()
        )
        return [self._parse_user(m) for m in members]

    def get_statuses(self, team_id: str) -> list[SourceStatus]:
        if team_id not in self._states_cache:
            states = self._client.get_workflow_states(team_id)
            states = sorted(states, key=lambda s: s.get("position") or 0)
            self._states_cache[team_id] = [
                SourceStatus(id=s["id"], name=s["name"], type=s.get("type") or "", position=i)
                for i, s in enumerate(states)
            ]
        return self._states_cache[team_id]

    def get_labels(self, team_id: str) -> list[SourceLabel]:
        return [
            SourceLabel(id=label["id"], name=label["name"], color=label.get("color"))
            for label in self._client.get_labels(team_id)
        ]

    def get_current_cycle(self, team_id: str) -> SourceCycle | None:
        cycle = self._client.get_active_cycle(team_id)
        if not cycle:
            return None
        return SourceCycle(
            id=cycle["id"],
            name=cycle.get("name") or f"Cycle #{cycle.get('number')}",
            start_date=(cycle.get("startsAt") or "")[:10] or None,
            end_date=(cycle.get("endsAt") or "")[:10] or None,
        )

    # -------------------------------------------------------------------------
    # TaskSourcePort Implementation - Issues
    # -------------------------------------------------------------------------

    def get_issues(self, options: GetIssuesOptions) -> list[SourceIssue]:
        issue_filter: dict[str, Any] = {"team": {"id": {"eq": options.team_id}}}
        if options.cycle_id:
            issue_filter["cycle"] = {"id": {"eq": options.cycle_id}}
        if options.status_names:
            issue_filter["state"] = {"name": {"in": list(options.status_names)}}
        if options.label_names:
            issue_filter["labels"] = {"some": {"name": {"in": list(options.label_names)}}}
        if options.assignee_email:
            issue_filter["assignee"] = {"email": {"eq": options.assignee_email}}

        self.logger.debug(f"Fetching issues with filter {issue_filter}")
        issues = [
            self._parse_issue(node)
            for node in self._client.get_issues(issue_filter, first=options.limit)
        ]
        if options.exclude_labels:
            issues = [i for i in issues if not i.has_any_label(options.exclude_labels)]
        return issues

    def get_issue(self, issue_id: str) -> SourceIssue | None:
        try:
            return self._parse_issue(self._client.get_issue(issue_id))
        except NotFoundError:
            return None

    def search_issue(self, identifier: str) -> SourceIssue | None:
        # Search is fuzzy, so only an exact identifier match counts
        for node in self._client.search_issues(identifier):
            if node.get("identifier") == identifier:
                return self._parse_issue(node)
        return None

    # -------------------------------------------------------------------------
    # TaskSourcePort Implementation - Writes
    # -------------------------------------------------------------------------

    def update_issue_status(self, issue_id: str, status_id: str) -> WriteResult:
        try:
            if self._client.update_issue_state(issue_id, status_id):
                return WriteResult.ok()
            return WriteResult.failed("Linear rejected the status update")
        except TrackerError as e:
            self.logger.error(f"Failed to update status of {issue_id}: {e}")
            return WriteResult.failed(str(e))

    def add_comment(self, issue_id: str, body: str) -> WriteResult:
        try:
            if self._client.create_comment(issue_id, body):
                return WriteResult.ok()
            return WriteResult.failed("Linear rejected the comment")
        except TrackerError as e:
            self.logger.error(f"Failed to comment on {issue_id}: {e}")
            return WriteResult.failed(str(e))

    # -------------------------------------------------------------------------
    # TaskSourcePort Implementation - Init
    # -------------------------------------------------------------------------

    def get_init_data(self, team_id: str | None = None) -> InitData:
        """
        Collect teams, users, statuses and labels.

        Users are gathered across every team and de-duplicated; statuses,
        labels and the cycle come from ``team_id`` (the first team if unset).
        """
        teams = self.get_teams()
        target = team_id or (teams[0].id if teams else None)
        if target is None:
            return InitData(teams=[], users=[], statuses=[], labels=[])

        users: dict[str, SourceUser] = {}
        for team in teams:
            for user in self.get_users(team.id):
                users.setdefault(user.id, user)

        return InitData(
            teams=teams,
            users=list(users.values()),
            statuses=self.get_statuses(target),
            labels=self.get_labels(target),
            current_cycle=self.get_current_cycle(target),
        )

    def download_headers(self) -> dict[str, str]:
        return {"Authorization": self._api_key}

    def close(self) -> None:
        self._client.close()

    # -------------------------------------------------------------------------
    # Parsing
    # -------------------------------------------------------------------------

    def _parse_user(self, data: dict[str, Any]) -> SourceUser:
        return SourceUser(
            id=data["id"],
            name=data.get("name") or "",
            email=data.get("email") or "",
            display_name=data.get("displayName") or data.get("name") or "",
        )

    def _parse_issue(self, data: dict[str, Any]) -> SourceIssue:
        state = data.get("state") or {}
        assignee = data.get("assignee") or {}
        parent = data.get("parent") or {}
        team = data.get("team") or {}

        attachments = [
            SourceAttachment(
                id=a["id"],
                title=a.get("title") or "",
                url=a.get("url") or "",
                content_type=(a.get("metadata") or {}).get("contentType"),
            )
            for a in (data.get("attachments") or {}).get("nodes", [])
        ]
        comments = []
        for c in (data.get("comments") or {}).get("nodes", []):
            user = c.get("user") or {}
            comments.append(
                SourceComment(
                    id=c["id"],
                    body=c.get("body") or "",
                    created_at=c.get("createdAt") or "",
                    user=user.get("displayName") or user.get("email"),
                )
            )

        return SourceIssue(
            id=data["id"],
            identifier=data["identifier"],
            title=data.get("title") or "",
            description=data.get("description"),
            status=state.get("name") or "",
            status_id=state.get("id"),
            status_type=state.get("type"),
            priority=int(data.get("priority") or 0),
            labels=[label["name"] for label in (data.get("labels") or {}).get("nodes", [])],
            assignee_id=assignee.get("id"),
            assignee_email=assignee.get("email"),
            url=data.get("url"),
            parent_identifier=parent.get("identifier"),
            branch_name=data.get("branchName"),
            team_id=team.get("id"),
            attachments=attachments,
            comments=comments,
        )
