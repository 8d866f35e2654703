"""Same-day report cache.

A cache entry is only trusted until its expiry, which is derived from the time it
was written by an injected policy (by default: the end of that local calendar day).
Storage and staleness are kept apart so either can be swapped independently.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from dataclasses import asdict, dataclass
from datetime import datetime, time, timedelta
from pathlib import Path
from typing import Any, Protocol

from linear_team_info.report import render_report

logger = logging.getLogger(__name__)

ExpiryPolicy = Callable[[datetime], datetime]
Clock = Callable[[], datetime]


def end_of_local_day(written_at: datetime) -> datetime:
    """Entries written on a given local day expire at the following local midnight."""

    return datetime.combine(written_at.date() + timedelta(days=1), time.min)


@dataclass(frozen=True, slots=True)
class ReportKey:
    """Identifies which report a cached document is.

    An empty `team_id` means "whichever team the default lookup picks" and matches any
    saved team. `top_labels` only matters when members were included.
    """

    team_id: str
    top_labels: int
    include_members: bool

    def matches(self, saved: ReportKey) -> bool:
        if self.team_id and self.team_id != saved.team_id:
            return False
        if self.include_members != saved.include_members:
            return False
        return not self.include_members or self.top_labels == saved.top_labels

    @classmethod
    def from_json(cls, raw: object) -> ReportKey | None:
        if not isinstance(raw, dict):
            return None
        team_id = raw.get("team_id")
        top_labels = raw.get("top_labels")
        include_members = raw.get("include_members")
        if (
            not isinstance(team_id, str)
            or not isinstance(top_labels, int)
            or not isinstance(include_members, bool)
        ):
            return None
        return cls(team_id=team_id, top_labels=top_labels, include_members=include_members)


@dataclass(frozen=True, slots=True)
class CacheEntry:
    key: ReportKey
    document: dict[str, Any]
    written_at: datetime
    valid_until: datetime


class ReportCache(Protocol):
    def get(self, key: ReportKey) -> CacheEntry | None: ...

    def put(self, key: ReportKey, document: dict[str, Any]) -> CacheEntry: ...


class FileReportCache:
    """Keeps the most recent report document in a single JSON file.

    The file holds exactly the rendered report; the key it was built for lives in a
    hidden sidecar next to it (`.<name>.key`). A report without a readable sidecar is
    never served. The report file's modification time is the write time; datetimes
    are naive local time.
    """

    def __init__(
        self,
        path: Path,
        *,
        expiry: ExpiryPolicy = end_of_local_day,
        clock: Clock = datetime.now,
    ) -> None:
        self._path = path
        self._expiry = expiry
        self._clock = clock

    @property
    def path(self) -> Path:
        return self._path

    @property
    def key_path(self) -> Path:
        return self._path.with_name(f".{self._path.name}.key")

    def get(self, key: ReportKey) -> CacheEntry | None:
        try:
            if not self._path.exists():
                logger.debug("No cached report", extra={"path": str(self._path)})
                return None
            written_at = datetime.fromtimestamp(self._path.stat().st_mtime)
            raw = self._path.read_text(encoding="utf-8")
            raw_key = self.key_path.read_text(encoding="utf-8")
        except OSError as e:
            logger.warning(
                "Could not read cached report; fetching live data",
                extra={"path": str(self._path), "error": str(e)},
            )
            return None

        valid_until = self._expiry(written_at)
        if self._clock() >= valid_until:
            logger.info(
                "Cached report is stale",
                extra={"path": str(self._path), "written_at": written_at.isoformat()},
            )
            return None

        try:
            document = json.loads(raw)
            saved_key = ReportKey.from_json(json.loads(raw_key))
        except json.JSONDecodeError:
            logger.warning(
                "Cached report is not valid JSON; fetching live data",
                extra={"path": str(self._path)},
            )
            return None

        if not isinstance(document, dict) or saved_key is None:
            logger.warning(
                "Cached report has unexpected shape; fetching live data",
                extra={"path": str(self._path)},
            )
            return None

        if not key.matches(saved_key):
            logger.info(
                "Cached report was built for different options",
                extra={"path": str(self._path), "wanted": asdict(key), "saved": asdict(saved_key)},
            )
            return None

        logger.info("Using cached report", extra={"path": str(self._path)})
        return CacheEntry(
            key=saved_key, document=document, written_at=written_at, valid_until=valid_until
        )

    def put(self, key: ReportKey, document: dict[str, Any]) -> CacheEntry:
        """Overwrite the report and its key; write errors propagate."""

        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(render_report(document), encoding="utf-8")
        self.key_path.write_text(json.dumps(asdict(key)) + "\n", encoding="utf-8")
        written_at = datetime.fromtimestamp(self._path.stat().st_mtime)
        return CacheEntry(
            key=key,
            document=document,
            written_at=written_at,
            valid_until=self._expiry(written_at),
        )
