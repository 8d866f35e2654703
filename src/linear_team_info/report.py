"""Report document schema and JSON rendering."""

from __future__ import annotations

import json
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from linear_team_info.linear.client import Label, WorkflowState


class CatalogEntry(BaseModel):
    """An `{id, name}` pair from the team's label or status catalog."""

    id: str
    name: str

    @classmethod
    def from_label(cls, label: Label) -> CatalogEntry:
        return cls(id=label.id, name=label.name)

    @classmethod
    def from_state(cls, state: WorkflowState) -> CatalogEntry:
        return cls(id=state.id, name=state.name)


class MemberSummary(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    email: str | None = None
    common_labels: list[str] = Field(default_factory=list, alias="commonLabels")


class TeamReport(BaseModel):
    """The report emitted on stdout and optionally saved to disk.

    `members` is `None` when member aggregation was skipped; the key is then left out
    of the document entirely rather than rendered as `null`.
    """

    team_id: str
    labels: list[CatalogEntry] = Field(default_factory=list)
    statuses: list[CatalogEntry] = Field(default_factory=list)
    members: list[MemberSummary] | None = None

    def to_document(self) -> dict[str, Any]:
        document = self.model_dump(mode="json", by_alias=True)
        if self.members is None:
            document.pop("members")
        return document


def render_report(document: dict[str, Any]) -> str:
    """Render a report document exactly as it is printed and saved."""

    return json.dumps(document, indent=2, ensure_ascii=False)
