"""
Trello Adapter - Implements TaskSourcePort for Trello boards.

Key mappings:
- Board -> SourceTeam
- List -> SourceStatus (type "list"; lists have no workflow type)
- Card short link -> display id, card id -> source id
- Priority -> derived from label names
- Cycles -> none; get_current_cycle always returns None
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
    detect_priority_from_labels,
)

from .client import TrelloApiClient


class TrelloAdapter(TaskSourcePort):
    """
    Trello implementation of the TaskSourcePort.

    Lists and members are cached per board so that card parsing does not
    refetch them for every card.
    """

    def __init__(self, api_key: str, token: str, dry_run: bool = False):
        self._dry_run = dry_run
        self.logger = logging.getLogger("TrelloAdapter")
        self._client = TrelloApiClient(api_key=api_key, token=token, dry_run=dry_run)
        self._lists_cache: dict[str, list[SourceStatus]] = {}
        self._members_cache: dict[str, dict[str, SourceUser]] = {}

    @property
    def name(self) -> str:
        return "Trello"

    def validate_connection(self) -> bool:
        return self._client.test_connection()

    # -------------------------------------------------------------------------
    # TaskSourcePort Implementation - Vocabulary
    # -------------------------------------------------------------------------

    def get_teams(self) -> list[SourceTeam]:
        return [SourceTeam(id=b["id"], name=b["name"]) for b in self._client.get_boards()]

    def get_users(self, team_id: str | None = None) -> list[SourceUser]:
        if not team_id:
            me = self._client.get_current_user()
            return [self._parse_member(me)] if me else []
        users = [self._parse_member(m) for m in self._client.get_board_members(team_id)]
        self._members_cache[team_id] = {user.id: user for user in users}
        return users

    def get_statuses(self, team_id: str) -> list[SourceStatus]:
        if team_id not in self._lists_cache:
            self._lists_cache[team_id] = [
                SourceStatus(id=lst["id"], name=lst["name"], type="list", position=i)
                for i, lst in enumerate(self._client.get_board_lists(team_id))
            ]
        return self._lists_cache[team_id]

    def get_labels(self, team_id: str) -> list[SourceLabel]:
        # Trello labels may be colour-only
        return [
            SourceLabel(
                id=label["id"],
                name=label.get("name") or label.get("color") or "",
                color=label.get("color"),
            )
            for label in self._client.get_board_labels(team_id)
        ]

    def get_current_cycle(self, team_id: str) -> SourceCycle | None:
        return None

    # -------------------------------------------------------------------------
    # TaskSourcePort Implementation - Issues
    # -------------------------------------------------------------------------

    def get_issues(self, options: GetIssuesOptions) -> list[SourceIssue]:
        cards = self._client.get_board_cards(options.team_id)
        issues: list[SourceIssue] = []

        for card in cards:
            issue = self._parse_card(card, options.team_id)
            if options.status_names and issue.status not in options.status_names:
                continue
            if options.label_names and not issue.has_any_label(options.label_names):
                continue
            if options.exclude_labels and issue.has_any_label(options.exclude_labels):
                continue
            if options.assignee_email and issue.assignee_email != options.assignee_email:
                continue
            issues.append(issue)

        return issues[: options.limit] if options.limit else issues

    def get_issue(self, issue_id: str) -> SourceIssue | None:
        try:
            card = self._client.get_card(issue_id)
        except NotFoundError:
            return None
        if not card:
            return None

        issue = self._parse_card(card, card.get("idBoard"))
        issue.attachments = [
            SourceAttachment(
                id=a["id"],
                title=a.get("name") or "",
                url=a.get("url") or "",
                content_type=a.get("mimeType"),
            )
            for a in self._client.get_card_attachments(card["id"])
        ]
        issue.comments = [
            self._parse_comment(action) for action in self._client.get_card_comments(card["id"])
        ]
        return issue

    def search_issue(self, identifier: str) -> SourceIssue | None:
        issue = self.get_issue(identifier)
        if issue is not None:
            return issue
        for card in self._client.search_cards(identifier):
            if card.get("shortLink") == identifier or card.get("id") == identifier:
                return self.get_issue(card["id"])
        return None

    # -------------------------------------------------------------------------
    # TaskSourcePort Implementation - Writes
    # -------------------------------------------------------------------------

    def update_issue_status(self, issue_id: str, status_id: str) -> WriteResult:
        try:
            self._client.move_card(issue_id, status_id)
            return WriteResult.ok()
        except TrackerError as e:
            self.logger.error(f"Failed to move card {issue_id}: {e}")
            return WriteResult.failed(str(e))

    def add_comment(self, issue_id: str, body: str) -> WriteResult:
        try:
            self._client.add_comment(issue_id, body)
            return WriteResult.ok()
        except TrackerError as e:
            self.logger.error(f"Failed to comment on card {issue_id}: {e}")
            return WriteResult.failed(str(e))

    # -------------------------------------------------------------------------
    # TaskSourcePort Implementation - Init
    # -------------------------------------------------------------------------

    def get_init_data(self, team_id: str | None = None) -> InitData:
        teams = self.get_teams()
        target = team_id or (teams[0].id if teams else None)
        if target is None:
            return InitData(teams=[], users=[], statuses=[], labels=[])
        return InitData(
            teams=teams,
            users=self.get_users(target),
            statuses=self.get_statuses(target),
            labels=self.get_labels(target),
        )

    def close(self) -> None:
        self._client.close()

    # -------------------------------------------------------------------------
    # Parsing
    # -------------------------------------------------------------------------

    def _parse_member(self, data: dict[str, Any]) -> SourceUser:
        display = data.get("fullName") or data.get("username") or ""
        return SourceUser(id=data["id"], name=display, display_name=display)

    def _parse_comment(self, action: dict[str, Any]) -> SourceComment:
        creator = action.get("memberCreator") or {}
        return SourceComment(
            id=action["id"],
            body=(action.get("data") or {}).get("text") or "",
            created_at=action.get("date") or "",
            user=creator.get("fullName") or creator.get("username"),
        )

    def _parse_card(self, card: dict[str, Any], board_id: str | None) -> SourceIssue:
        list_names: dict[str, str] = {}
        members: dict[str, SourceUser] = {}
        if board_id:
            list_names = {s.id: s.name for s in self.get_statuses(board_id)}
            if board_id not in self._members_cache:
                self.get_users(board_id)
            members = self._members_cache.get(board_id, {})

        labels = [label["name"] for label in card.get("labels") or [] if label.get("name")]
        member_ids = card.get("idMembers") or []
        assignee = members.get(member_ids[0]) if member_ids else None

        return SourceIssue(
            id=card["id"],
            identifier=card.get("shortLink") or card["id"],
            title=card.get("name") or "",
            description=card.get("desc") or None,
            status=list_names.get(card.get("idList", ""), "Unknown"),
            status_id=card.get("idList"),
            status_type="list",
            priority=detect_priority_from_labels(labels),
            labels=labels,
            assignee_id=assignee.id if assignee else (member_ids[0] if member_ids else None),
            assignee_email=(assignee.email or None) if assignee else None,
            url=card.get("url"),
            team_id=board_id,
        )
