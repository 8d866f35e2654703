"""Unit tests for structured logging."""

from __future__ import annotations

import io
import json
import logging
import threading

from linear_team_info.logging import JsonFormatter, configure_logging


def test_json_formatter_includes_extra_fields() -> None:
    record = logging.LogRecord(
        name="linear_team_info.service",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg="Fetched labels",
        args=(),
        exc_info=None,
    )
    record.team_id = "team-1"

    payload = json.loads(JsonFormatter().format(record))

    assert payload["level"] == "INFO"
    assert payload["logger"] == "linear_team_info.service"
    assert payload["message"] == "Fetched labels"
    assert payload["extra"] == {"team_id": "team-1"}


def test_configure_logging_writes_json_to_given_stream() -> None:
    stream = io.StringIO()
    configure_logging("debug", stream=stream)

    logging.getLogger("linear_team_info.test").debug("hello", extra={"count": 2})

    line = json.loads(stream.getvalue().strip())
    assert line["message"] == "hello"
    assert line["extra"] == {"count": 2}
    assert logging.getLogger().level == logging.DEBUG


def test_api_key_is_masked_everywhere() -> None:
    stream = io.StringIO()
    configure_logging("INFO", stream=stream, secrets=["lin_api_secret123"])

    logging.getLogger("linear_team_info.test").info(
        "calling with lin_api_secret123", extra={"headers": {"Authorization": "lin_api_secret123"}}
    )

    out = stream.getvalue()
    assert "lin_api_secret123" not in out
    line = json.loads(out.strip())
    assert line["message"] == "calling with [redacted]"
    assert line["extra"] == {"headers": {"Authorization": "[redacted]"}}


def test_worker_thread_name_is_recorded() -> None:
    stream = io.StringIO()
    configure_logging("INFO", stream=stream)

    def _log() -> None:
        logging.getLogger("linear_team_info.service").info("Summarized member")

    worker = threading.Thread(target=_log, name="member_0")
    worker.start()
    worker.join()
    logging.getLogger("linear_team_info.service").info("Fetched labels")

    first, second = (json.loads(line) for line in stream.getvalue().splitlines())
    assert first["thread"] == "member_0"
    assert "thread" not in second
