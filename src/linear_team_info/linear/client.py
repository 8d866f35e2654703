"""Linear GraphQL API client.

Wraps the handful of read-only queries the report needs so that HTTP details stay
out of the service and CLI code, and tests can swap in a mocked session.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import requests

from linear_team_info.config import DEFAULT_API_URL

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Team:
    id: str
    name: str


@dataclass(frozen=True, slots=True)
class WorkflowState:
    """A team workflow status such as "In Progress"."""

    id: str
    name: str


@dataclass(frozen=True, slots=True)
class Label:
    id: str
    name: str


@dataclass(frozen=True, slots=True)
class Member:
    id: str
    name: str
    email: str | None


@dataclass(frozen=True, slots=True)
class Issue:
    """An issue reference; only the id is needed to fetch its labels."""

    id: str


class LinearError(RuntimeError):
    """Base class for failures talking to Linear."""


class LinearApiError(LinearError):
    """Raised for HTTP failures and GraphQL `errors` payloads."""

    def __init__(
        self, message: str, *, messages: list[str] | None = None, status_code: int | None = None
    ) -> None:
        super().__init__(message)
        self.messages = messages or []
        self.status_code = status_code


class TeamNotFoundError(LinearApiError):
    """Raised when an explicit team id does not resolve to a team."""

    def __init__(self, team_id: str, *, messages: list[str] | None = None) -> None:
        super().__init__(f"Team not found: {team_id!r}", messages=messages)
        self.team_id = team_id


class NoTeamsError(LinearError):
    """Raised when the API key cannot see any team."""

    def __init__(self) -> None:
        super().__init__("No teams are visible to this API key")


TEAM_QUERY = """
query Team($id: String!) {
  team(id: $id) { id name }
}
"""

TEAMS_QUERY = """
query Teams {
  teams { nodes { id name } }
}
"""

TEAM_STATES_QUERY = """
query TeamStates($id: String!) {
  team(id: $id) { states { nodes { id name } } }
}
"""

TEAM_LABELS_QUERY = """
query TeamLabels($id: String!) {
  team(id: $id) { labels { nodes { id name } } }
}
"""

TEAM_MEMBERS_QUERY = """
query TeamMembers($id: String!) {
  team(id: $id) { members { nodes { id name email } } }
}
"""

ASSIGNED_ISSUES_QUERY = """
query AssignedIssues($assigneeId: ID!, $teamId: ID!) {
  issues(filter: { assignee: { id: { eq: $assigneeId } }, team: { id: { eq: $teamId } } }) {
    nodes { id }
  }
}
"""

ISSUE_LABELS_QUERY = """
query IssueLabels($id: String!) {
  issue(id: $id) { labels { nodes { id name } } }
}
"""


def _error_messages(errors: object) -> list[str]:
    messages: list[str] = []
    if isinstance(errors, list):
        for item in errors:
            if isinstance(item, dict):
                msg = item.get("message")
                if isinstance(msg, str):
                    messages.append(msg)
    return messages


def _nodes(data: object, *path: str) -> list[dict[str, Any]]:
    """Walk `path` into a GraphQL response and return its connection `nodes`."""

    current = data
    for key in path:
        if not isinstance(current, dict):
            return []
        current = current.get(key)
    if not isinstance(current, dict):
        return []
    nodes = current.get("nodes")
    if not isinstance(nodes, list):
        return []
    return [n for n in nodes if isinstance(n, dict)]


def _required_str(node: dict[str, Any], key: str) -> str:
    value = node.get(key)
    if not isinstance(value, str) or not value:
        raise LinearApiError(f"Invalid Linear response: missing {key!r}")
    return value


def _optional_str(node: dict[str, Any], key: str) -> str | None:
    value = node.get(key)
    return value if isinstance(value, str) else None


class LinearClient:
    """Small read-only wrapper around the Linear GraphQL API."""

    def __init__(
        self,
        *,
        api_key: str,
        api_url: str = DEFAULT_API_URL,
        timeout: float = 30.0,
        session: requests.Session | None = None,
    ) -> None:
        if not api_key:
            raise ValueError("Linear API key is required")

        self._api_url = api_url
        self._timeout = timeout
        self._session = session or requests.Session()
        # Personal API keys are sent as-is; OAuth tokens would need a "Bearer " prefix.
        self._session.headers.update(
            {
                "Authorization": api_key,
                "Content-Type": "application/json",
                "User-Agent": "linear-team-info",
            }
        )

    def _graphql(self, *, query: str, variables: dict[str, Any] | None = None) -> dict[str, Any]:
        try:
            resp = self._session.post(
                self._api_url,
                json={"query": query, "variables": variables or {}},
                timeout=self._timeout,
            )
        except requests.RequestException as e:
            raise LinearApiError(f"Linear request failed: {e}") from e

        try:
            payload = resp.json()
        except ValueError:
            payload = None

        # Linear reports most failures (including auth) as a GraphQL `errors` list, often
        # alongside a 4xx status. Prefer those messages over the bare HTTP status.
        if isinstance(payload, dict) and payload.get("errors"):
            messages = _error_messages(payload.get("errors"))
            message = "; ".join(messages) if messages else "Unknown GraphQL error"
            raise LinearApiError(
                f"Linear GraphQL error: {message}",
                messages=messages,
                status_code=resp.status_code,
            )

        try:
            resp.raise_for_status()
        except requests.HTTPError as e:
            raise LinearApiError(
                f"Linear request failed: HTTP {resp.status_code}", status_code=resp.status_code
            ) from e

        if not isinstance(payload, dict) or not isinstance(payload.get("data"), dict):
            raise LinearApiError("Invalid Linear response: missing data")
        data: dict[str, Any] = payload["data"]
        return data

    def get_team(self, team_id: str) -> Team:
        try:
            data = self._graphql(query=TEAM_QUERY, variables={"id": team_id})
        except LinearApiError as e:
            if any("not found" in m.lower() for m in e.messages):
                raise TeamNotFoundError(team_id, messages=e.messages) from e
            raise

        node = data.get("team")
        if not isinstance(node, dict):
            raise TeamNotFoundError(team_id)
        return Team(id=_required_str(node, "id"), name=_required_str(node, "name"))

    def list_teams(self) -> list[Team]:
        data = self._graphql(query=TEAMS_QUERY)
        return [
            Team(id=_required_str(n, "id"), name=_required_str(n, "name"))
            for n in _nodes(data, "teams")
        ]

    def get_first_team(self) -> Team:
        teams = self.list_teams()
        if not teams:
            raise NoTeamsError()
        return teams[0]

    def list_team_states(self, team_id: str) -> list[WorkflowState]:
        data = self._graphql(query=TEAM_STATES_QUERY, variables={"id": team_id})
        return [
            WorkflowState(id=_required_str(n, "id"), name=_required_str(n, "name"))
            for n in _nodes(data, "team", "states")
        ]

    def list_team_labels(self, team_id: str) -> list[Label]:
        data = self._graphql(query=TEAM_LABELS_QUERY, variables={"id": team_id})
        return [
            Label(id=_required_str(n, "id"), name=_required_str(n, "name"))
            for n in _nodes(data, "team", "labels")
        ]

    def list_team_members(self, team_id: str) -> list[Member]:
        data = self._graphql(query=TEAM_MEMBERS_QUERY, variables={"id": team_id})
        return [
            Member(
                id=_required_str(n, "id"),
                name=_required_str(n, "name"),
                email=_optional_str(n, "email"),
            )
            for n in _nodes(data, "team", "members")
        ]

    def list_assigned_issues(self, *, assignee_id: str, team_id: str) -> list[Issue]:
        """Issues in `team_id` assigned to `assignee_id`, filtered server-side."""

        data = self._graphql(
            query=ASSIGNED_ISSUES_QUERY,
            variables={"assigneeId": assignee_id, "teamId": team_id},
        )
        return [Issue(id=_required_str(n, "id")) for n in _nodes(data, "issues")]

    def list_issue_labels(self, issue_id: str) -> list[Label]:
        data = self._graphql(query=ISSUE_LABELS_QUERY, variables={"id": issue_id})
        return [
            Label(id=_required_str(n, "id"), name=_required_str(n, "name"))
            for n in _nodes(data, "issue", "labels")
        ]

    def close(self) -> None:
        self._session.close()
