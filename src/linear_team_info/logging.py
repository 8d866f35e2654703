"""Structured logging configuration.

JSON lines on stderr (stdout is reserved for the report). Records emitted from the
member fan-out carry the worker thread name, and the Linear API key is masked
wherever it would otherwise appear.
"""

from __future__ import annotations

import json
import logging
import sys
from collections.abc import Iterable
from datetime import UTC, datetime
from typing import Any, TextIO

REDACTED = "[redacted]"

# Everything a bare record carries; anything else was passed via `extra=`.
_STANDARD_ATTRS: frozenset[str] = frozenset(
    logging.LogRecord("", logging.INFO, "", 0, "", None, None).__dict__
) | {"message", "asctime"}


class JsonFormatter(logging.Formatter):
    """Formats records as one JSON object per line, masking the given secrets."""

    def __init__(self, *, secrets: Iterable[str] = ()) -> None:
        super().__init__()
        self._secrets = tuple(s for s in secrets if s)

    def _mask(self, text: str) -> str:
        for secret in self._secrets:
            text = text.replace(secret, REDACTED)
        return text

    def format(self, record: logging.LogRecord) -> str:  # noqa: A003 (record)
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.threadName and record.threadName != "MainThread":
            payload["thread"] = record.threadName

        extra = {
            key: value
            for key, value in record.__dict__.items()
            if key not in _STANDARD_ATTRS and not key.startswith("_")
        }
        if extra:
            payload["extra"] = extra

        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        return self._mask(json.dumps(payload, ensure_ascii=False, default=str))


def configure_logging(
    level: str, *, stream: TextIO | None = None, secrets: Iterable[str] = ()
) -> None:
    """Route all logging through one JSON handler on stderr (or `stream`)."""

    root = logging.getLogger()

    # Remove any existing handlers to avoid duplicate logs when re-configuring.
    for handler in list(root.handlers):
        root.removeHandler(handler)

    handler = logging.StreamHandler(stream=stream or sys.stderr)
    handler.setFormatter(JsonFormatter(secrets=secrets))

    root.addHandler(handler)
    root.setLevel(level.upper())

    # urllib3 logs every connection at DEBUG; keep it at WARNING unless asked for more.
    logging.getLogger("urllib3").setLevel(max(root.level, logging.WARNING))
