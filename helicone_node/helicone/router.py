from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Request, status

from helicone_node.core.gateway.deps import (
    HeliconeCredentials,
    get_gateway_client,
    get_helicone_credentials,
)
from helicone_node.core.gateway.http_client import GatewayError, GatewayHttpClient
from helicone_node.helicone.builder import build_request
from helicone_node.helicone.chat_model import HeliconeChatModel, supply_chat_model
from helicone_node.helicone.headers import redact_headers
from helicone_node.helicone.schemas import (
    ChatIn,
    ExecuteIn,
    ExecuteOut,
    NodeItemOut,
    NodeParameters,
    RequestPreviewOut,
)
from helicone_node.helicone.service import HeliconeNodeService

router = APIRouter(prefix="/helicone", tags=["helicone"])
logger = logging.getLogger("helicone_node.helicone.router")


def get_chat_model_factory() -> Callable[..., HeliconeChatModel]:
    return supply_chat_model


def _request_id(request: Request) -> str | None:
    return getattr(request.state, "request_id", None) or request.headers.get("X-Request-ID")


def _require_credentials(
    credentials: HeliconeCredentials | None, *, request: Request
) -> HeliconeCredentials:
    if credentials is None:
        logger.info(
            "Helicone request rejected (credentials not configured)",
            extra={"request_id": _request_id(request), "success": False},
        )
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Helicone credentials not configured",
        )
    return credentials


@router.post("/execute", response_model=ExecuteOut)
async def execute_node(
    payload: ExecuteIn,
    request: Request,
    credentials: HeliconeCredentials | None = Depends(get_helicone_credentials),
    gateway_client: GatewayHttpClient = Depends(get_gateway_client),
) -> ExecuteOut:
    """
    Run the node over a batch of items, one gateway request per item.

    Output items are paired with their input index. With `continue_on_fail`, a failed
    item yields `{"error": ...}` instead of aborting the batch.
    """

    creds = _require_credentials(credentials, request=request)
    svc = HeliconeNodeService(credentials=creds, gateway_client=gateway_client)
    results = await svc.execute(
        items=payload.items,
        continue_on_fail=payload.continue_on_fail,
        request_id=_request_id(request),
    )
    return ExecuteOut(items=[NodeItemOut.model_validate(r) for r in results])


@router.post("/requests/preview", response_model=RequestPreviewOut)
async def preview_request(
    params: NodeParameters,
    request: Request,
    credentials: HeliconeCredentials | None = Depends(get_helicone_credentials),
) -> RequestPreviewOut:
    """Build the outbound request for one item without sending it (credentials masked)."""

    creds = _require_credentials(credentials, request=request)
    outbound = build_request(params=params, credentials=creds)
    return RequestPreviewOut(
        method=outbound.method,
        url=outbound.url,
        headers=redact_headers(outbound.headers),
        body=outbound.body,
    )


@router.post("/chat")
async def chat(
    payload: ChatIn,
    request: Request,
    credentials: HeliconeCredentials | None = Depends(get_helicone_credentials),
    chat_model_factory: Callable[..., HeliconeChatModel] = Depends(get_chat_model_factory),
) -> dict[str, Any]:
    """Send one chat completion through the Helicone AI Gateway."""

    creds = _require_credentials(credentials, request=request)
    chat_model = chat_model_factory(params=payload, credentials=creds)
    try:
        completion = await chat_model.ainvoke(payload.messages)
    except GatewayError:
        logger.info(
            "Helicone chat failed",
            extra={"request_id": _request_id(request), "provider": payload.provider},
        )
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="LLM service failed",
        ) from None

    logger.info(
        "Helicone chat completed",
        extra={"request_id": _request_id(request), "provider": payload.provider},
    )
    return completion
