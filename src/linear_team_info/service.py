"""Team report assembly.

Fetch order:
- resolve the team (explicit id, or the first visible team)
- workflow states, then labels, then members
- per member: assigned issues, then each issue's labels in turn

Members are processed concurrently on a bounded thread pool; within a member,
requests stay sequential.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from concurrent.futures import FIRST_EXCEPTION, Future, ThreadPoolExecutor, wait

from linear_team_info.aggregation import common_labels
from linear_team_info.linear.client import LinearClient, Member, Team
from linear_team_info.report import CatalogEntry, MemberSummary, TeamReport

logger = logging.getLogger(__name__)


class TeamInfoService:
    """Builds a `TeamReport` from read-only Linear queries."""

    def __init__(self, *, client: LinearClient, top_n: int = 2, max_concurrency: int = 4) -> None:
        if top_n < 1:
            raise ValueError("top_n must be at least 1")
        if max_concurrency < 1:
            raise ValueError("max_concurrency must be at least 1")
        self._client = client
        self._top_n = top_n
        self._max_concurrency = max_concurrency

    def resolve_team(self, team_id: str | None = None) -> Team:
        if team_id:
            return self._client.get_team(team_id)
        return self._client.get_first_team()

    def build_report(self, *, team_id: str | None = None, include_members: bool = True) -> TeamReport:
        team = self.resolve_team(team_id)
        logger.info("Fetching info for team", extra={"team_id": team.id, "team_name": team.name})

        states = self._client.list_team_states(team.id)
        logger.info("Fetched workflow states", extra={"team_id": team.id, "count": len(states)})

        labels = self._client.list_team_labels(team.id)
        logger.info("Fetched labels", extra={"team_id": team.id, "count": len(labels)})

        members: list[MemberSummary] | None = None
        if include_members:
            roster = self._client.list_team_members(team.id)
            logger.info("Fetched team members", extra={"team_id": team.id, "count": len(roster)})
            catalog = {label.id: label.name for label in labels}
            members = self.summarize_members(team, roster, catalog)

        return TeamReport(
            team_id=team.id,
            labels=[CatalogEntry.from_label(label) for label in labels],
            statuses=[CatalogEntry.from_state(state) for state in states],
            members=members,
        )

    def summarize_members(
        self, team: Team, roster: list[Member], catalog: Mapping[str, str]
    ) -> list[MemberSummary]:
        """Summarize every member, preserving roster order.

        The first member to fail aborts the whole batch: members not yet started are
        cancelled, running ones are allowed to finish, and that failure is re-raised.
        """

        if not roster:
            return []

        with ThreadPoolExecutor(
            max_workers=min(self._max_concurrency, len(roster)),
            thread_name_prefix="member",
        ) as executor:
            futures: list[Future[MemberSummary]] = [
                executor.submit(self.summarize_member, team, member, catalog) for member in roster
            ]
            done, _ = wait(futures, return_when=FIRST_EXCEPTION)
            failed = next((f for f in futures if f in done and f.exception() is not None), None)
            if failed is not None:
                executor.shutdown(wait=True, cancel_futures=True)
                error = failed.exception()
                assert error is not None
                raise error
            return [future.result() for future in futures]

    def summarize_member(
        self, team: Team, member: Member, catalog: Mapping[str, str]
    ) -> MemberSummary:
        issues = self._client.list_assigned_issues(assignee_id=member.id, team_id=team.id)

        issue_label_ids: list[list[str]] = []
        for issue in issues:
            issue_labels = self._client.list_issue_labels(issue.id)
            issue_label_ids.append([label.id for label in issue_labels])

        logger.debug(
            "Summarized member",
            extra={"member_id": member.id, "issue_count": len(issues)},
        )
        return MemberSummary(
            id=member.id,
            name=member.name,
            email=member.email,
            common_labels=common_labels(issue_label_ids, catalog, top_n=self._top_n),
        )
