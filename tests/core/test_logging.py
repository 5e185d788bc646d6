"""Unit tests for the JSON log formatter."""

from __future__ import annotations

import json
import logging

from helicone_node.core.logging import JsonFormatter


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="helicone_node.helicone",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg="Helicone item processed",
        args=(),
        exc_info=None,
    )
    record.__dict__.update(extra)
    return record


def test_node_fields_are_emitted_and_missing_fields_omitted() -> None:
    line = JsonFormatter().format(
        _record(request_id="req-1", provider="anthropic", item_index=0, outcome="success")
    )

    payload = json.loads(line)
    assert payload["logger"] == "helicone_node.helicone"
    assert payload["message"] == "Helicone item processed"
    assert payload["request_id"] == "req-1"
    assert payload["provider"] == "anthropic"
    assert payload["item_index"] == 0
    assert payload["outcome"] == "success"
    assert "status_code" not in payload
    assert "error" not in payload


def test_http_fields_use_short_keys() -> None:
    payload = json.loads(
        JsonFormatter().format(
            _record(http_method="POST", request_path="/helicone/execute", status_code=200)
        )
    )

    assert payload["method"] == "POST"
    assert payload["path"] == "/helicone/execute"
    assert payload["status_code"] == 200


def test_non_ascii_message_is_kept_readable() -> None:
    record = _record()
    record.msg = "Sesión terminada"

    assert "Sesión terminada" in JsonFormatter().format(record)
