"""Helicone header construction.

These headers are shared by direct provider requests and the gateway chat model:
- Helicone-Auth always
- one Helicone-Property-<key> per custom property (best effort)
- session and caching headers only when requested
"""

from __future__ import annotations

import json
import logging
from typing import Any

from helicone_node.helicone.schemas import DEFAULT_CACHE_TTL_SECONDS, ObservabilityOptions

logger = logging.getLogger("helicone_node.helicone.headers")

PROPERTY_HEADER_PREFIX = "Helicone-Property-"
REDACTED = "[REDACTED]"

_SECRET_HEADERS = frozenset({"helicone-auth", "authorization", "x-api-key", "api-key"})

_SESSION_HEADERS = (
    ("session_id", "Helicone-Session-Id"),
    ("session_path", "Helicone-Session-Path"),
    ("session_name", "Helicone-Session-Name"),
)


def build_helicone_headers(*, api_key: str, options: ObservabilityOptions) -> dict[str, str]:
    headers: dict[str, str] = {"Helicone-Auth": f"Bearer {api_key}"}

    for key, value in parse_custom_properties(options.custom_properties).items():
        headers[f"{PROPERTY_HEADER_PREFIX}{key}"] = stringify_property(value)

    for field, header in _SESSION_HEADERS:
        value = getattr(options, field)
        if value:
            headers[header] = value

    if options.enable_caching:
        headers["Helicone-Cache-Enabled"] = "true"
        ttl = options.cache_ttl or DEFAULT_CACHE_TTL_SECONDS
        headers["Cache-Control"] = f"max-age={ttl}"

    return headers


def redact_headers(headers: dict[str, str]) -> dict[str, str]:
    """Copy of headers with credential values masked (for previews, never for sending)."""

    return {
        name: (REDACTED if name.lower() in _SECRET_HEADERS else value)
        for name, value in headers.items()
    }


def parse_custom_properties(raw: str | dict[str, Any] | None) -> dict[str, Any]:
    """
    Return custom properties as a dict.

    Malformed input is logged and ignored: tracking properties are best effort and
    must never block the LLM request itself.
    """

    if not raw:
        return {}
    if isinstance(raw, dict):
        return raw

    try:
        parsed = json.loads(raw)
    except ValueError:
        # Do not log the raw value; callers sometimes paste secrets into it.
        logger.warning(
            "Ignoring malformed Helicone custom properties",
            extra={"error": "invalid_json"},
        )
        return {}

    if not isinstance(parsed, dict):
        logger.warning(
            "Ignoring Helicone custom properties that are not a JSON object",
            extra={"error": "not_an_object"},
        )
        return {}

    return parsed


def stringify_property(value: Any) -> str:
    """Coerce a JSON value to a header value (JSON spelling for literals)."""

    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return "null"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (dict, list)):
        return json.dumps(value, separators=(",", ":"), ensure_ascii=True)
    return str(value)
