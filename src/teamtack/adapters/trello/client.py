"""
Trello API Client - Low-level HTTP client for the Trello REST API.

Trello REST API documentation:
https://developer.atlassian.com/cloud/trello/rest/
"""

import logging
from typing import Any

import requests
from requests.adapters import HTTPAdapter

from teamtack.core.ports.task_source import (
    AuthenticationError,
    NotFoundError,
    RemoteReadError,
    RemoteWriteError,
    TrackerError,
)


CARD_FIELDS = "id,shortLink,name,desc,idList,idMembers,idBoard,url,labels"


class TrelloApiClient:
    """
    Low-level Trello REST client.

    Authentication uses ``key``/``token`` query parameters on every request.
    """

    BASE_URL = "https://api.trello.com/1"

    DEFAULT_POOL_CONNECTIONS = 10
    DEFAULT_POOL_MAXSIZE = 10
    DEFAULT_TIMEOUT = 30.0

    def __init__(
        self,
        api_key: str,
        token: str,
        dry_run: bool = True,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        """
        Initialize the Trello client.

        Args:
            api_key: Trello API key
            token: Trello API token
            dry_run: If True, PUT/POST are logged and not sent
            timeout: Request timeout in seconds
        """
        self.api_key = api_key
        self.token = token
        self.dry_run = dry_run
        self.timeout = timeout
        self.logger = logging.getLogger("TrelloApiClient")

        self._session = requests.Session()
        self._session.headers.update({"Accept": "application/json"})
        adapter = HTTPAdapter(
            pool_connections=self.DEFAULT_POOL_CONNECTIONS,
            pool_maxsize=self.DEFAULT_POOL_MAXSIZE,
        )
        self._session.mount("https://", adapter)

        self._current_user: dict[str, Any] | None = None

    @property
    def auth_params(self) -> dict[str, str]:
        return {"key": self.api_key, "token": self.token}

    # -------------------------------------------------------------------------
    # Core Request Methods
    # -------------------------------------------------------------------------

    def request(
        self,
        method: str,
        endpoint: str,
        params: dict[str, Any] | None = None,
        json: dict[str, Any] | None = None,
    ) -> Any:
        """
        Make an authenticated request to the Trello API.

        Raises:
            RemoteReadError / RemoteWriteError: On API errors, by method
        """
        error_class: type[TrackerError] = RemoteReadError if method == "GET" else RemoteWriteError
        url = f"{self.BASE_URL}/{endpoint.lstrip('/')}"
        merged = {**self.auth_params, **(params or {})}

        try:
            response = self._session.request(
                method, url, params=merged, json=json, timeout=self.timeout
            )
        except requests.exceptions.ConnectionError as e:
            raise error_class(f"Connection to Trello failed: {e}", cause=e) from e
        except requests.exceptions.Timeout as e:
            raise error_class(f"Trello request timed out: {e}", cause=e) from e
        except requests.exceptions.RequestException as e:
            raise error_class(f"Trello request failed: {e}", cause=e) from e

        return self._handle_response(response, endpoint, error_class)

    def get(self, endpoint: str, params: dict[str, Any] | None = None) -> Any:
        return self.request("GET", endpoint, params=params)

    def put(self, endpoint: str, json: dict[str, Any] | None = None) -> Any:
        """Perform a PUT request. Respects dry_run mode."""
        if self.dry_run:
            self.logger.info(f"[DRY-RUN] Would PUT to {endpoint}")
            return {}
        return self.request("PUT", endpoint, json=json)

    def post(self, endpoint: str, json: dict[str, Any] | None = None) -> Any:
        """Perform a POST request. Respects dry_run mode."""
        if self.dry_run:
            self.logger.info(f"[DRY-RUN] Would POST to {endpoint}")
            return {}
        return self.request("POST", endpoint, json=json)

    # -------------------------------------------------------------------------
    # Response Handling
    # -------------------------------------------------------------------------

    def _handle_response(
        self, response: requests.Response, endpoint: str, error_class: type[TrackerError]
    ) -> Any:
        status = response.status_code

        if status == 401:
            raise AuthenticationError("Trello authentication failed. Check your API key and token.")

        if status == 404:
            raise NotFoundError(f"Not found: {endpoint}", issue_key=endpoint)

        if status >= 400:
            body = response.text[:500] if response.text else ""
            raise error_class(f"Trello API error {status}: {body}", issue_key=endpoint)

        try:
            return response.json()
        except ValueError:
            return {}

    # -------------------------------------------------------------------------
    # Members & Boards
    # -------------------------------------------------------------------------

    def get_current_user(self) -> dict[str, Any]:
        if self._current_user is None:
            self._current_user = self.get("members/me") or {}
        return self._current_user

    def test_connection(self) -> bool:
        try:
            self.get_current_user()
            return True
        except TrackerError:
            return False

    def get_boards(self) -> list[dict[str, Any]]:
        return self.get("members/me/boards", {"filter": "open", "fields": "id,name,url"}) or []

    def get_board_lists(self, board_id: str) -> list[dict[str, Any]]:
        return self.get(f"boards/{board_id}/lists", {"filter": "open"}) or []

    def get_board_cards(self, board_id: str) -> list[dict[str, Any]]:
        return (
            self.get(f"boards/{board_id}/cards", {"filter": "open", "fields": CARD_FIELDS}) or []
        )

    def get_board_labels(self, board_id: str) -> list[dict[str, Any]]:
        return self.get(f"boards/{board_id}/labels") or []

    def get_board_members(self, board_id: str) -> list[dict[str, Any]]:
        return self.get(f"boards/{board_id}/members") or []

    # -------------------------------------------------------------------------
    # Cards
    # -------------------------------------------------------------------------

    def get_card(self, card_id: str) -> dict[str, Any]:
        return self.get(f"cards/{card_id}", {"fields": CARD_FIELDS}) or {}

    def get_card_attachments(self, card_id: str) -> list[dict[str, Any]]:
        return self.get(f"cards/{card_id}/attachments") or []

    def get_card_comments(self, card_id: str) -> list[dict[str, Any]]:
        return self.get(f"cards/{card_id}/actions", {"filter": "commentCard"}) or []

    def search_cards(self, query: str, limit: int = 10) -> list[dict[str, Any]]:
        result = self.get(
            "search",
            {
                "query": query,
                "modelTypes": "cards",
                "cards_limit": limit,
                "card_fields": CARD_FIELDS,
                "partial": "true",
            },
        )
        return (result or {}).get("cards", [])

    def move_card(self, card_id: str, list_id: str) -> dict[str, Any]:
        return self.put(f"cards/{card_id}", json={"idList": list_id})

    def add_comment(self, card_id: str, text: str) -> dict[str, Any]:
        return self.post(f"cards/{card_id}/actions/comments", json={"text": text})

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def close(self) -> None:
        self._session.close()

    def __enter__(self) -> "TrelloApiClient":
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()
