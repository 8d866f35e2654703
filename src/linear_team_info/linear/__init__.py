"""Linear API access."""

from linear_team_info.linear.client import (
    Issue,
    Label,
    LinearApiError,
    LinearClient,
    LinearError,
    Member,
    NoTeamsError,
    Team,
    TeamNotFoundError,
    WorkflowState,
)

__all__ = [
    "Issue",
    "Label",
    "LinearApiError",
    "LinearClient",
    "LinearError",
    "Member",
    "NoTeamsError",
    "Team",
    "TeamNotFoundError",
    "WorkflowState",
]
