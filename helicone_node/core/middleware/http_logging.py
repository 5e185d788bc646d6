"""HTTP logging middleware.

Node requests carry provider API keys and prompts, so only metadata is logged:
- method, route template, status code and duration
- an X-Request-ID, generated or propagated, echoed on the response
"""

from __future__ import annotations

import logging
import re
import time
import uuid
from typing import Any

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

logger = logging.getLogger("helicone_node.http")

REQUEST_ID_HEADER = "X-Request-ID"
UNMATCHED_ROUTE = "unmatched"
_SAFE_REQUEST_ID_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._-]{0,127}$")


def request_id_for(request: Request) -> str:
    """Propagate a well-formed X-Request-ID, otherwise generate a UUID4 hex."""

    candidate = request.headers.get(REQUEST_ID_HEADER)
    if candidate and _SAFE_REQUEST_ID_PATTERN.fullmatch(candidate):
        return candidate
    return uuid.uuid4().hex


def route_label(request: Request) -> str:
    """Matched route template (never the raw path), shared by logs and metrics."""

    path = getattr(request.scope.get("route"), "path", None)
    return path if isinstance(path, str) and path else UNMATCHED_ROUTE


def _request_fields(
    request: Request, *, request_id: str, status_code: int, started: float
) -> dict[str, Any]:
    return {
        "request_id": request_id,
        "http_method": request.method,
        "request_path": route_label(request),
        "status_code": status_code,
        "duration_ms": round((time.perf_counter() - started) * 1000.0, 2),
    }


class HttpLoggingMiddleware(BaseHTTPMiddleware):
    """Log one record per request and attach the correlation id.

    Request bodies, response bodies and headers are never logged.
    """

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        started = time.perf_counter()
        request_id = request_id_for(request)
        # Node services read it from request.state to tag per-item logs.
        request.state.request_id = request_id

        try:
            response = await call_next(request)
        except Exception:  # noqa: BLE001 - logged with stack trace, then re-raised
            logger.exception(
                "Unhandled exception while processing request",
                extra=_request_fields(
                    request, request_id=request_id, status_code=500, started=started
                ),
            )
            raise

        response.headers[REQUEST_ID_HEADER] = request_id
        logger.info(
            "Request completed",
            extra=_request_fields(
                request, request_id=request_id, status_code=response.status_code, started=started
            ),
        )
        return response
