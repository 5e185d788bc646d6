"""Centralized logging configuration.

Logs are JSON lines on stdout. Requests to the gateway carry API keys in
their headers, so log records hold metadata only:
- no headers, no request or response bodies, no prompts or completions
- extra fields are optional; the formatter must never raise due to missing keys
"""

from __future__ import annotations

import json
import logging
import logging.config
import os
from datetime import UTC, datetime
from typing import Any


LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Output key -> record attributes to try, first non-None wins.
_RECORD_FIELDS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("request_id", ("request_id",)),
    ("method", ("http_method",)),
    ("path", ("request_path",)),
    ("status_code", ("status_code",)),
    ("duration_ms", ("duration_ms",)),
    ("provider", ("provider",)),
    ("item_index", ("item_index",)),
    ("outcome", ("outcome",)),
    ("error", ("error",)),
)

# SDK/transport loggers that would otherwise print full URLs or retry chatter at INFO.
_QUIET_LOGGERS = ("httpx", "httpcore", "openai")


def _first_present(record: logging.LogRecord, names: tuple[str, ...]) -> Any:
    for name in names:
        value = getattr(record, name, None)
        if value is not None:
            return value
    return None


class JsonFormatter(logging.Formatter):
    """One JSON object per record; fields absent from the record are left out."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key, names in _RECORD_FIELDS:
            value = _first_present(record, names)
            if value is not None:
                payload[key] = value

        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        return json.dumps(payload, ensure_ascii=False, default=str)


def setup_logging(level: str = LOG_LEVEL) -> None:
    """Configure application logging (JSON to stdout)."""

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "json": {
                    "()": "helicone_node.core.logging.JsonFormatter",
                }
            },
            "handlers": {
                "default": {
                    "class": "logging.StreamHandler",
                    "formatter": "json",
                    "stream": "ext://sys.stdout",
                }
            },
            "loggers": {name: {"level": "WARNING"} for name in _QUIET_LOGGERS},
            "root": {
                "level": level,
                "handlers": ["default"],
            },
        }
    )
