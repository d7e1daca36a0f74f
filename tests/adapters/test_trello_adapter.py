"""
Tests for Trello Adapter.
"""

from unittest.mock import MagicMock, patch

import pytest
import requests

from teamtack.adapters.trello.adapter import TrelloAdapter
from teamtack.adapters.trello.client import TrelloApiClient
from teamtack.core.ports.task_source import (
    AuthenticationError,
    GetIssuesOptions,
    NotFoundError,
    RemoteReadError,
    RemoteWriteError,
    detect_priority_from_labels,
)


def _response(status_code: int = 200, payload=None) -> MagicMock:
    response = MagicMock()
    response.status_code = status_code
    response.text = "error body" if status_code >= 400 else ""
    response.json.return_value = payload
    return response


def _card(short_link: str, list_id: str = "list-todo", **overrides) -> dict:
    card = {
        "id": f"card-{short_link}",
        "shortLink": short_link,
        "name": f"Card {short_link}",
        "desc": "",
        "idList": list_id,
        "idMembers": ["m-alice"],
        "idBoard": "board-1",
        "url": f"https://trello.com/c/{short_link}",
        "labels": [{"name": "Bug"}, {"name": "High"}],
    }
    card.update(overrides)
    return card


# =============================================================================
# API Client Tests
# =============================================================================


class TestTrelloApiClient:
    """Tests for TrelloApiClient."""

    @pytest.fixture
    def mock_session(self):
        with patch("teamtack.adapters.trello.client.requests.Session") as mock:
            session = MagicMock()
            mock.return_value = session
            yield session

    @pytest.fixture
    def client(self, mock_session):
        return TrelloApiClient(api_key="key", token="tok", dry_run=False)

    def test_auth_params_on_every_request(self, client, mock_session):
        """Should send key and token as query parameters."""
        mock_session.request.return_value = _response(payload=[{"id": "b1", "name": "Board"}])

        assert client.get_boards() == [{"id": "b1", "name": "Board"}]

        method, url = mock_session.request.call_args[0]
        params = mock_session.request.call_args[1]["params"]
        assert method == "GET"
        assert url == "https://api.trello.com/1/members/me/boards"
        assert params["key"] == "key"
        assert params["token"] == "tok"
        assert params["filter"] == "open"

    def test_authentication_error(self, client, mock_session):
        mock_session.request.return_value = _response(401)

        with pytest.raises(AuthenticationError):
            client.get("members/me")

    def test_not_found(self, client, mock_session):
        mock_session.request.return_value = _response(404)

        with pytest.raises(NotFoundError):
            client.get_card("nope")

    def test_read_and_write_errors(self, client, mock_session):
        """Should pick the error class from the HTTP method."""
        mock_session.request.return_value = _response(500)

        with pytest.raises(RemoteReadError):
            client.get("boards/b1/lists")
        with pytest.raises(RemoteWriteError):
            client.move_card("c1", "l2")

    def test_transport_errors_are_wrapped(self, client, mock_session):
        mock_session.request.side_effect = requests.exceptions.TooManyRedirects("loop")

        with pytest.raises(RemoteReadError, match="Trello request failed"):
            client.get("boards/b1/lists")
        with pytest.raises(RemoteWriteError, match="Trello request failed"):
            client.add_comment("c1", "done")

    def test_dry_run_skips_writes(self, mock_session):
        client = TrelloApiClient(api_key="key", token="tok", dry_run=True)

        assert client.move_card("c1", "l2") == {}
        assert client.add_comment("c1", "done") == {}
        mock_session.request.assert_not_called()

    def test_move_card_payload(self, client, mock_session):
        mock_session.request.return_value = _response(payload={"id": "c1"})

        client.move_card("c1", "list-done")

        method, url = mock_session.request.call_args[0]
        assert method == "PUT"
        assert url.endswith("/cards/c1")
        assert mock_session.request.call_args[1]["json"] == {"idList": "list-done"}

    def test_search_cards(self, client, mock_session):
        mock_session.request.return_value = _response(payload={"cards": [{"id": "c1"}]})

        assert client.search_cards("abc") == [{"id": "c1"}]

    def test_test_connection(self, client, mock_session):
        mock_session.request.return_value = _response(401)

        assert client.test_connection() is False


# =============================================================================
# Adapter Tests
# =============================================================================


class TestTrelloAdapter:
    """Tests for TrelloAdapter."""

    @pytest.fixture
    def mock_client(self):
        with patch("teamtack.adapters.trello.adapter.TrelloApiClient") as mock:
            client = MagicMock()
            client.get_board_lists.return_value = [
                {"id": "list-todo", "name": "To Do"},
                {"id": "list-doing", "name": "Doing"},
                {"id": "list-done", "name": "Done"},
            ]
            client.get_board_members.return_value = [
                {"id": "m-alice", "fullName": "Alice", "username": "alice"},
            ]
            mock.return_value = client
            yield client

    @pytest.fixture
    def adapter(self, mock_client):
        return TrelloAdapter(api_key="key", token="tok")

    def test_lists_become_statuses(self, adapter):
        statuses = adapter.get_statuses("board-1")

        assert [s.name for s in statuses] == ["To Do", "Doing", "Done"]
        assert all(s.type == "list" for s in statuses)
        assert [s.position for s in statuses] == [0, 1, 2]

    def test_no_cycles(self, adapter):
        assert adapter.get_current_cycle("board-1") is None

    def test_colour_only_labels(self, adapter, mock_client):
        mock_client.get_board_labels.return_value = [{"id": "l1", "name": "", "color": "red"}]

        assert adapter.get_labels("board-1")[0].name == "red"

    def test_parse_card(self, adapter, mock_client):
        """Should map list, member and priority label onto SourceIssue."""
        mock_client.get_board_cards.return_value = [_card("abc123", "list-doing")]

        issue = adapter.get_issues(GetIssuesOptions(team_id="board-1"))[0]

        assert issue.id == "card-abc123"
        assert issue.identifier == "abc123"
        assert issue.status == "Doing"
        assert issue.status_id == "list-doing"
        assert issue.priority == 2
        assert issue.assignee_id == "m-alice"
        assert issue.team_id == "board-1"

    def test_get_issues_filters(self, adapter, mock_client):
        """Should filter cards client-side by list, label and exclusion."""
        mock_client.get_board_cards.return_value = [
            _card("a", "list-todo"),
            _card("b", "list-done"),
            _card("c", "list-todo", labels=[{"name": "Bug"}, {"name": "x"}]),
            _card("d", "list-todo", labels=[{"name": "Chore"}]),
        ]

        issues = adapter.get_issues(
            GetIssuesOptions(
                team_id="board-1",
                status_names=["To Do"],
                label_names=["Bug"],
                exclude_labels=["x"],
            )
        )

        assert [i.identifier for i in issues] == ["a"]

    def test_get_issues_limit(self, adapter, mock_client):
        mock_client.get_board_cards.return_value = [_card(str(n)) for n in range(5)]

        assert len(adapter.get_issues(GetIssuesOptions(team_id="board-1", limit=2))) == 2

    def test_get_issue_with_attachments_and_comments(self, adapter, mock_client):
        mock_client.get_card.return_value = _card("abc123")
        mock_client.get_card_attachments.return_value = [
            {
                "id": "att-1",
                "name": "shot.png",
                "url": "https://x/shot.png",
                "mimeType": "image/png",
            }
        ]
        mock_client.get_card_comments.return_value = [
            {
                "id": "act-1",
                "date": "2024-05-01T10:00:00.000Z",
                "data": {"text": "Looks good"},
                "memberCreator": {"fullName": "Bob"},
            }
        ]

        issue = adapter.get_issue("abc123")

        assert issue.attachments[0].content_type == "image/png"
        assert issue.comments[0].body == "Looks good"
        assert issue.comments[0].user == "Bob"

    def test_get_issue_not_found(self, adapter, mock_client):
        mock_client.get_card.side_effect = NotFoundError("Not found: cards/x")

        assert adapter.get_issue("x") is None

    def test_search_issue_falls_back_to_search(self, adapter, mock_client):
        mock_client.get_card.side_effect = [NotFoundError("missing"), _card("abc123")]
        mock_client.search_cards.return_value = [_card("zzz"), _card("abc123")]

        issue = adapter.search_issue("abc123")

        assert issue.identifier == "abc123"

    def test_update_issue_status_failure(self, adapter, mock_client):
        mock_client.move_card.side_effect = RemoteWriteError("Trello API error 500")

        result = adapter.update_issue_status("card-1", "list-done")

        assert result.success is False
        assert "500" in result.error

    def test_add_comment(self, adapter, mock_client):
        assert adapter.add_comment("card-1", "done").success is True
        mock_client.add_comment.assert_called_once_with("card-1", "done")

    def test_get_init_data(self, adapter, mock_client):
        mock_client.get_boards.return_value = [{"id": "board-1", "name": "Sprint"}]
        mock_client.get_board_labels.return_value = []

        data = adapter.get_init_data()

        assert data.teams[0].name == "Sprint"
        assert [u.name for u in data.users] == ["Alice"]
        assert data.current_cycle is None
        assert len(data.statuses) == 3


class TestTrelloAdapterTransportFailures:
    """Write failures from the HTTP layer come back as failed WriteResults."""

    @pytest.fixture
    def mock_session(self):
        with patch("teamtack.adapters.trello.client.requests.Session") as mock:
            session = MagicMock()
            mock.return_value = session
            yield session

    @pytest.fixture
    def adapter(self, mock_session):
        return TrelloAdapter(api_key="key", token="tok", dry_run=False)

    def test_add_comment(self, adapter, mock_session):
        mock_session.request.side_effect = requests.exceptions.TooManyRedirects("loop")

        result = adapter.add_comment("card-1", "done")

        assert result.success is False
        assert "Trello request failed" in result.error

    def test_update_issue_status(self, adapter, mock_session):
        mock_session.request.side_effect = requests.exceptions.InvalidHeader("bad")

        assert adapter.update_issue_status("card-1", "list-done").success is False


class TestDetectPriorityFromLabels:
    """Tests for label-derived priority."""

    @pytest.mark.parametrize(
        ("labels", "expected"),
        [
            (["Urgent"], 1),
            (["p1"], 1),
            (["bug", "High"], 2),
            (["normal"], 3),
            (["minor"], 4),
            (["bug"], 0),
            ([], 0),
        ],
    )
    def test_detect(self, labels, expected):
        assert detect_priority_from_labels(labels) == expected

    def test_first_match_wins(self):
        assert detect_priority_from_labels(["low", "urgent"]) == 4
