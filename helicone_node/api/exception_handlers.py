from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from helicone_node.domain.exceptions import NodeConfigurationError, NodeOperationError

logger = logging.getLogger("helicone_node.node_errors")


def _log_failure(*, request: Request, status_code: int, error: str, item_index: int | None) -> None:
    # IMPORTANT: do not log request bodies or headers; they carry provider API keys.
    logger.info(
        "Node execution failed",
        extra={
            "request_id": getattr(request.state, "request_id", None),
            "http_method": request.method,
            "request_path": request.url.path,  # no query string
            "status_code": status_code,
            "item_index": item_index,
            "error": error,
        },
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register application exception handlers."""

    @app.exception_handler(NodeConfigurationError)
    async def handle_node_configuration_error(
        request: Request,
        exc: NodeConfigurationError,
    ) -> JSONResponse:
        _log_failure(request=request, status_code=400, error="configuration", item_index=None)
        return JSONResponse(status_code=400, content={"detail": exc.message})

    @app.exception_handler(NodeOperationError)
    async def handle_node_operation_error(
        request: Request,
        exc: NodeOperationError,
    ) -> JSONResponse:
        # Bad parameters are the caller's fault; everything else is an upstream failure.
        if isinstance(exc.__cause__, NodeConfigurationError):
            status_code, error = 400, "configuration"
        else:
            status_code, error = 502, "upstream"
        _log_failure(
            request=request, status_code=status_code, error=error, item_index=exc.item_index
        )
        return JSONResponse(
            status_code=status_code,
            content={"detail": exc.message, "item_index": exc.item_index},
        )
