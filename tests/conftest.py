"""Test configuration and fixtures."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from pathlib import Path
from unittest.mock import Mock

import pytest

from linear_team_info.linear.client import (
    Issue,
    Label,
    LinearClient,
    Member,
    Team,
    WorkflowState,
)
from linear_team_info.logging import JsonFormatter

LINEAR_ENV_VARS = (
    "LINEAR_API_KEY",
    "LINEAR_TEAM_ID",
    "LINEAR_API_URL",
    "LOG_LEVEL",
    "LINEAR_REPORT_PATH",
    "LINEAR_TOP_LABELS",
    "LINEAR_MAX_CONCURRENCY",
    "LINEAR_REQUEST_TIMEOUT",
)


@pytest.fixture(autouse=True)
def isolated_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Run every test in an empty working directory with no Linear env vars set."""
    for name in LINEAR_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture(autouse=True)
def reset_logging() -> Iterator[None]:
    """Drop handlers installed by `configure_logging` so they don't outlive captured streams."""
    yield
    root = logging.getLogger()
    for handler in list(root.handlers):
        if isinstance(handler.formatter, JsonFormatter):
            root.removeHandler(handler)


@pytest.fixture
def team() -> Team:
    return Team(id="team-1", name="Platform")


@pytest.fixture
def fake_client(team: Team) -> Mock:
    """A mocked client for a team with two members.

    Alice has three issues labeled [x], [x], [y]; Bob has none.
    """
    client = Mock(spec=LinearClient)
    client.get_team.return_value = team
    client.get_first_team.return_value = team
    client.list_team_states.return_value = [
        WorkflowState(id="state-todo", name="Todo"),
        WorkflowState(id="state-doing", name="In Progress"),
        WorkflowState(id="state-done", name="Done"),
    ]
    client.list_team_labels.return_value = [
        Label(id="x", name="Bug"),
        Label(id="y", name="Feature"),
        Label(id="z", name="Chore"),
    ]
    client.list_team_members.return_value = [
        Member(id="alice", name="Alice", email="alice@example.com"),
        Member(id="bob", name="Bob", email="bob@example.com"),
    ]

    assigned = {
        "alice": [Issue(id="i1"), Issue(id="i2"), Issue(id="i3")],
        "bob": [],
    }
    issue_labels = {
        "i1": [Label(id="x", name="Bug")],
        "i2": [Label(id="x", name="Bug")],
        "i3": [Label(id="y", name="Feature")],
    }
    client.list_assigned_issues.side_effect = (
        lambda *, assignee_id, team_id: assigned[assignee_id]
    )
    client.list_issue_labels.side_effect = lambda issue_id: issue_labels[issue_id]
    return client
