from __future__ import annotations

from fastapi import FastAPI

from helicone_node.api.exception_handlers import register_exception_handlers
from helicone_node.api.schemas import HealthOut
from helicone_node.core.logging import setup_logging
from helicone_node.core.metrics import PrometheusMetricsMiddleware, metrics_router
from helicone_node.core.middleware.http_logging import HttpLoggingMiddleware
from helicone_node.helicone.router import router as helicone_router

setup_logging()


def create_app() -> FastAPI:
    app = FastAPI(
        title="Helicone Node",
        description=(
            "Workflow node that sends chat-completion requests to OpenAI, Anthropic or "
            "Azure OpenAI through the Helicone observability gateway.\n\n"
            "Design principles:\n"
            "- Each input item becomes one independent gateway request; nothing is stored.\n"
            "- Helicone features (custom properties, sessions, caching) are plain headers.\n"
            "- Logs and metrics carry metadata only; API keys, prompts and completions "
            "never leave the request."
        ),
        docs_url="/docs",
        redoc_url=None,
        openapi_tags=[
            {
                "name": "health",
                "description": "Basic uptime check for load balancers and monitoring.",
            },
            {
                "name": "helicone",
                "description": (
                    "Execute the node over a batch of items, preview the outbound request, "
                    "or chat through the Helicone AI Gateway."
                ),
            },
            {
                "name": "metrics",
                "description": "Prometheus-compatible metrics endpoint.",
            },
        ],
    )

    app.add_middleware(PrometheusMetricsMiddleware)
    app.add_middleware(HttpLoggingMiddleware)

    register_exception_handlers(app)

    @app.get(
        "/health",
        response_model=HealthOut,
        tags=["health"],
        summary="Health check",
        description=(
            "Lightweight endpoint to verify the process is running. It does not call the "
            "gateway or any provider."
        ),
    )
    async def health() -> HealthOut:
        return HealthOut(status="ok")

    app.include_router(metrics_router)
    app.include_router(helicone_router)
    return app


app = create_app()
