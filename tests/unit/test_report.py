"""Unit tests for the report document schema."""

from __future__ import annotations

import json

from linear_team_info.linear.client import Label, WorkflowState
from linear_team_info.report import CatalogEntry, MemberSummary, TeamReport, render_report


def test_document_uses_camel_case_common_labels() -> None:
    report = TeamReport(
        team_id="team-1",
        labels=[CatalogEntry.from_label(Label(id="x", name="Bug"))],
        statuses=[CatalogEntry.from_state(WorkflowState(id="s1", name="Todo"))],
        members=[MemberSummary(id="m1", name="Ana", email=None, common_labels=["Bug"])],
    )

    assert report.to_document() == {
        "team_id": "team-1",
        "labels": [{"id": "x", "name": "Bug"}],
        "statuses": [{"id": "s1", "name": "Todo"}],
        "members": [{"id": "m1", "name": "Ana", "email": None, "commonLabels": ["Bug"]}],
    }


def test_members_key_is_omitted_when_not_computed() -> None:
    assert TeamReport(team_id="team-1").to_document() == {
        "team_id": "team-1",
        "labels": [],
        "statuses": [],
    }


def test_render_report_is_two_space_indented_and_keeps_unicode() -> None:
    rendered = render_report({"team_id": "t", "labels": [{"id": "x", "name": "Fehlerbehebung ✓"}]})

    assert rendered.splitlines()[1] == '  "team_id": "t",'
    assert "✓" in rendered
    assert json.loads(rendered)["labels"][0]["name"] == "Fehlerbehebung ✓"
