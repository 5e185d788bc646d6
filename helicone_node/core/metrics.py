"""Prometheus metrics for the node service.

Labels stay low-cardinality: route templates, providers and fixed outcomes only.
Never label with models, session ids or custom property values.
"""

from __future__ import annotations

import time
from typing import cast

from fastapi import APIRouter, Request
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

from helicone_node.core.middleware.http_logging import route_label

metrics_router = APIRouter(tags=["metrics"])

# LLM calls are slow; buckets reach well past typical completion latencies.
_LLM_LATENCY_BUCKETS = (0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0, 120.0, 360.0)

http_requests_total = Counter(
    "http_requests_total",
    "HTTP requests served by the node API",
    labelnames=("method", "route", "status_code"),
)

http_request_duration_seconds = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    labelnames=("method", "route", "status_code"),
    buckets=_LLM_LATENCY_BUCKETS,
)

helicone_node_items_total = Counter(
    "helicone_node_items_total",
    "Node items processed through the Helicone gateway",
    labelnames=("provider", "outcome"),
)

helicone_node_item_duration_seconds = Histogram(
    "helicone_node_item_duration_seconds",
    "Time to build, send and receive one node item",
    labelnames=("provider", "outcome"),
    buckets=_LLM_LATENCY_BUCKETS,
)


def record_item(*, provider: str, outcome: str, duration_seconds: float) -> None:
    helicone_node_items_total.labels(provider=provider, outcome=outcome).inc()
    helicone_node_item_duration_seconds.labels(provider=provider, outcome=outcome).observe(
        duration_seconds
    )


class PrometheusMetricsMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        started = time.perf_counter()
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            return response
        finally:
            labels = {
                "method": request.method,
                "route": route_label(request),
                "status_code": str(status_code),
            }
            http_requests_total.labels(**labels).inc()
            http_request_duration_seconds.labels(**labels).observe(time.perf_counter() - started)


@metrics_router.get("/metrics", include_in_schema=False)
def metrics() -> Response:
    return Response(content=cast(bytes, generate_latest()), media_type=CONTENT_TYPE_LATEST)
