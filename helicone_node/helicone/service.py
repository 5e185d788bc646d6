from __future__ import annotations

import logging
import time
from typing import Any, Protocol

from helicone_node.core.gateway.deps import HeliconeCredentials
from helicone_node.core.gateway.http_client import OutboundRequest
from helicone_node.core.metrics import record_item
from helicone_node.core.settings import get_settings
from helicone_node.domain.exceptions import NodeOperationError
from helicone_node.helicone.builder import build_request
from helicone_node.helicone.schemas import NodeParameters

logger = logging.getLogger("helicone_node.helicone")


class GatewayClient(Protocol):
    async def send(
        self, request: OutboundRequest, *, timeout_ms: int, max_retries: int
    ) -> dict[str, Any]: ...


class HeliconeNodeService:
    """Execute the Helicone node over a batch of input items.

    Items run sequentially: each request is built, sent and awaited before the
    next item starts. Items share no state.
    """

    def __init__(self, *, credentials: HeliconeCredentials, gateway_client: GatewayClient):
        self._credentials = credentials
        self._gateway = gateway_client

    async def execute(
        self,
        *,
        items: list[NodeParameters],
        continue_on_fail: bool = False,
        request_id: str | None = None,
    ) -> list[dict[str, Any]]:
        results: list[dict[str, Any]] = []

        for index, params in enumerate(items):
            started = time.perf_counter()
            try:
                response = await self.execute_item(params=params)
            except Exception as exc:  # noqa: BLE001 - any item failure is reported per item
                self._record(
                    params=params,
                    index=index,
                    outcome="error",
                    request_id=request_id,
                    started=started,
                )
                if continue_on_fail:
                    results.append({"json": {"error": str(exc)}, "paired_item": {"item": index}})
                    continue
                raise NodeOperationError(str(exc), item_index=index) from exc

            self._record(
                params=params, index=index, outcome="success", request_id=request_id, started=started
            )
            results.append({"json": response, "paired_item": {"item": index}})

        return results

    async def execute_item(self, *, params: NodeParameters) -> dict[str, Any]:
        request = build_request(params=params, credentials=self._credentials)

        settings = get_settings()
        options = params.options
        timeout_ms = options.timeout if options.timeout is not None else settings.helicone_timeout_ms
        max_retries = (
            options.max_retries
            if options.max_retries is not None
            else settings.helicone_max_retries
        )
        return await self._gateway.send(request, timeout_ms=timeout_ms, max_retries=max_retries)

    @staticmethod
    def _record(
        *,
        params: NodeParameters,
        index: int,
        outcome: str,
        request_id: str | None,
        started: float,
    ) -> None:
        duration = time.perf_counter() - started
        record_item(provider=params.provider, outcome=outcome, duration_seconds=duration)
        logger.info(
            "Helicone item processed",
            extra={
                "request_id": request_id,
                "provider": params.provider,
                "item_index": index,
                "outcome": outcome,
                "duration_ms": round(duration * 1000.0, 2),
            },
        )
