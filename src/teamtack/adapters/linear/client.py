"""
Linear API Client - Low-level GraphQL client for Linear.

This handles the raw HTTP communication with Linear.
The LinearAdapter uses this to implement the TaskSourcePort.

Linear API documentation:
https://developers.linear.app/docs/graphql/working-with-the-graphql-api
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


ISSUE_FIELDS = """
    id
    identifier
    title
    description
    priority
    url
    branchName
    state { id name type }
    assignee { id email displayName }
    labels { nodes { name } }
    parent { identifier }
    team { id key }
"""

ISSUE_DETAIL_FIELDS = (
    ISSUE_FIELDS
    + """
    attachments(first: 50) { nodes { id title url metadata } }
    comments(first: 50) { nodes { id body createdAt user { displayName email } } }
"""
)


class LinearApiClient:
    """
    Low-level Linear GraphQL client.

    Handles authentication, request/response and error translation. Requests
    are not retried; the caller decides whether a failure is fatal.
    """

    API_URL = "https://api.linear.app/graphql"

    DEFAULT_POOL_CONNECTIONS = 10
    DEFAULT_POOL_MAXSIZE = 10
    DEFAULT_TIMEOUT = 30.0

    def __init__(
        self,
        api_key: str,
        api_url: str = API_URL,
        dry_run: bool = True,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        """
        Initialize the Linear client.

        Args:
            api_key: Linear personal API key (``lin_api_...``)
            api_url: GraphQL endpoint
            dry_run: If True, mutations are logged and not sent
            timeout: Request timeout in seconds
        """
        self.api_key = api_key
        self.api_url = api_url
        self.dry_run = dry_run
        self.timeout = timeout
        self.logger = logging.getLogger("LinearApiClient")

        self.headers = {
            "Authorization": api_key,
            "Content-Type": "application/json",
        }

        self._session = requests.Session()
        self._session.headers.update(self.headers)

        adapter = HTTPAdapter(
            pool_connections=self.DEFAULT_POOL_CONNECTIONS,
            pool_maxsize=self.DEFAULT_POOL_MAXSIZE,
        )
        self._session.mount("https://", adapter)

        self._viewer: dict[str, Any] | None = None

    # -------------------------------------------------------------------------
    # Core Request Methods
    # -------------------------------------------------------------------------

    def _execute(
        self,
        query: str,
        variables: dict[str, Any] | None,
        error_class: type[TrackerError],
    ) -> dict[str, Any]:
        payload: dict[str, Any] = {"query": query}
        if variables:
            payload["variables"] = variables

        try:
            response = self._session.post(self.api_url, json=payload, timeout=self.timeout)
        except requests.exceptions.ConnectionError as e:
            raise error_class(f"Connection to Linear failed: {e}", cause=e) from e
        except requests.exceptions.Timeout as e:
            raise error_class(f"Linear request timed out: {e}", cause=e) from e
        except requests.exceptions.RequestException as e:
            raise error_class(f"Linear request failed: {e}", cause=e) from e

        return self._handle_response(response, error_class)

    def query(self, query: str, variables: dict[str, Any] | None = None) -> dict[str, Any]:
        """Run a read-only GraphQL query and return its ``data``."""
        return self._execute(query, variables, RemoteReadError)

    def mutate(self, mutation: str, variables: dict[str, Any] | None = None) -> dict[str, Any]:
        """Run a GraphQL mutation. Respects dry_run mode."""
        if self.dry_run:
            self.logger.info("[DRY-RUN] Would execute mutation")
            return {}
        return self._execute(mutation, variables, RemoteWriteError)

    # -------------------------------------------------------------------------
    # Response Handling
    # -------------------------------------------------------------------------

    def _handle_response(
        self, response: requests.Response, error_class: type[TrackerError]
    ) -> dict[str, Any]:
        """Convert HTTP and GraphQL errors to typed exceptions."""
        if response.status_code == 401:
            raise AuthenticationError("Linear authentication failed. Check LINEAR_API_KEY.")

        if response.status_code == 404:
            raise NotFoundError(f"Linear resource not found: {response.text[:200]}")

        if not response.ok:
            body = response.text[:500] if response.text else ""
            raise error_class(f"Linear API error {response.status_code}: {body}")

        try:
            payload = response.json()
        except ValueError as e:
            raise error_class("Linear returned a non-JSON response", cause=e) from e

        errors = payload.get("errors") or []
        if errors:
            message = "; ".join(str(err.get("message", err)) for err in errors)
            if "not found" in message.lower() or "entity not found" in message.lower():
                raise NotFoundError(message)
            raise error_class(f"Linear GraphQL error: {message}")

        data = payload.get("data")
        return data if isinstance(data, dict) else {}

    # -------------------------------------------------------------------------
    # Viewer & Teams
    # -------------------------------------------------------------------------

    def get_viewer(self) -> dict[str, Any]:
        """Get the user the API key belongs to."""
        if self._viewer is None:
            data = self.query("query { viewer { id name email displayName } }")
            self._viewer = data.get("viewer") or {}
        return self._viewer

    def test_connection(self) -> bool:
        try:
            self.get_viewer()
            return True
        except TrackerError:
            return False

    def get_teams(self) -> list[dict[str, Any]]:
        data = self.query("query { teams { nodes { id key name icon } } }")
        return data.get("teams", {}).get("nodes", [])

    def get_team_members(self, team_id: str) -> list[dict[str, Any]]:
        data = self.query(
            """
            query($teamId: String!) {
                team(id: $teamId) { members { nodes { id name email displayName } } }
            }
            """,
            {"teamId": team_id},
        )
        return (data.get("team") or {}).get("members", {}).get("nodes", [])

    def get_users(self) -> list[dict[str, Any]]:
        data = self.query("query { users { nodes { id name email displayName } } }")
        return data.get("users", {}).get("nodes", [])

    def get_workflow_states(self, team_id: str) -> list[dict[str, Any]]:
        data = self.query(
            """
            query($teamId: ID!) {
                workflowStates(filter: { team: { id: { eq: $teamId } } }) {
                    nodes { id name type position }
                }
            }
            """,
            {"teamId": team_id},
        )
        return data.get("workflowStates", {}).get("nodes", [])

    def get_labels(self, team_id: str) -> list[dict[str, Any]]:
        data = self.query(
            """
            query($teamId: ID!) {
                issueLabels(filter: { team: { id: { eq: $teamId } } }) {
                    nodes { id name color }
                }
            }
            """,
            {"teamId": team_id},
        )
        return data.get("issueLabels", {}).get("nodes", [])

    def get_active_cycle(self, team_id: str) -> dict[str, Any] | None:
        data = self.query(
            """
            query($teamId: String!) {
                team(id: $teamId) { activeCycle { id name number startsAt endsAt } }
            }
            """,
            {"teamId": team_id},
        )
        return (data.get("team") or {}).get("activeCycle")

    # -------------------------------------------------------------------------
    # Issues API
    # -------------------------------------------------------------------------

    def get_issues(self, issue_filter: dict[str, Any], first: int = 50) -> list[dict[str, Any]]:
        data = self.query(
            f"""
            query($filter: IssueFilter, $first: Int) {{
                issues(filter: $filter, first: $first) {{
                    nodes {{ {ISSUE_DETAIL_FIELDS} }}
                }}
            }}
            """,
            {"filter": issue_filter, "first": first},
        )
        return data.get("issues", {}).get("nodes", [])

    def get_issue(self, issue_id: str) -> dict[str, Any]:
        """Get a single issue by id or identifier."""
        data = self.query(
            f"""
            query($id: String!) {{
                issue(id: $id) {{ {ISSUE_DETAIL_FIELDS} }}
            }}
            """,
            {"id": issue_id},
        )
        issue = data.get("issue")
        if not issue:
            raise NotFoundError(f"Issue not found: {issue_id}", issue_key=issue_id)
        return issue

    def search_issues(self, term: str, first: int = 10) -> list[dict[str, Any]]:
        data = self.query(
            f"""
            query($term: String!, $first: Int) {{
                searchIssues(term: $term, first: $first) {{
                    nodes {{ {ISSUE_DETAIL_FIELDS} }}
                }}
            }}
            """,
            {"term": term, "first": first},
        )
        return data.get("searchIssues", {}).get("nodes", [])

    def update_issue_state(self, issue_id: str, state_id: str) -> bool:
        data = self.mutate(
            """
            mutation($id: String!, $stateId: String!) {
                issueUpdate(id: $id, input: { stateId: $stateId }) { success }
            }
            """,
            {"id": issue_id, "stateId": state_id},
        )
        if self.dry_run:
            return True
        return bool((data.get("issueUpdate") or {}).get("success"))

    def create_comment(self, issue_id: str, body: str) -> bool:
        data = self.mutate(
            """
            mutation($issueId: String!, $body: String!) {
                commentCreate(input: { issueId: $issueId, body: $body }) { success }
            }
            """,
            {"issueId": issue_id, "body": body},
        )
        if self.dry_run:
            return True
        return bool((data.get("commentCreate") or {}).get("success"))

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def close(self) -> None:
        self._session.close()

    def __enter__(self) -> "LinearApiClient":
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()
