"""Per-member label frequency aggregation."""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable, Mapping, Sequence

UNKNOWN_LABEL = "Unknown"


def count_labels(issue_label_ids: Iterable[Sequence[str]]) -> Counter[str]:
    """Count how often each label id occurs across a member's issues."""

    counts: Counter[str] = Counter()
    for label_ids in issue_label_ids:
        counts.update(label_ids)
    return counts


def top_label_ids(counts: Mapping[str, int], top_n: int) -> list[str]:
    """Return up to `top_n` label ids by descending count, ties by ascending id."""

    if top_n <= 0:
        return []
    ranked = sorted(counts.items(), key=lambda item: (-item[1], item[0]))
    return [label_id for label_id, _ in ranked[:top_n]]


def common_labels(
    issue_label_ids: Iterable[Sequence[str]],
    catalog: Mapping[str, str],
    *,
    top_n: int,
) -> list[str]:
    """Names of a member's most frequent labels.

    `catalog` maps label id to name for the whole team. Ids missing from it (for
    example a label deleted since it was applied) resolve to `UNKNOWN_LABEL`.
    """

    ids = top_label_ids(count_labels(issue_label_ids), top_n)
    return [catalog.get(label_id, UNKNOWN_LABEL) for label_id in ids]
