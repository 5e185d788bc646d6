from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import httpx


class GatewayError(Exception):
    """Base error for gateway request failures (safe to map to 502)."""


class GatewayUnavailableError(GatewayError):
    """Raised when the gateway is not configured (e.g., missing Helicone API key)."""


class GatewayUpstreamError(GatewayError):
    """Raised when the gateway or provider fails or returns an unexpected response."""

    def __init__(self, message: str, *, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class GatewayTimeoutError(GatewayUpstreamError):
    """Raised when a gateway request exceeds its timeout."""


@dataclass(frozen=True)
class OutboundRequest:
    url: str
    headers: dict[str, str]
    body: dict[str, Any] = field(default_factory=dict)
    method: str = "POST"


class GatewayHttpClient:
    """
    Sends fully built requests to the Helicone gateway.

    Design notes:
    - No logging in this module (headers carry API keys, bodies carry prompts).
    - One short-lived AsyncClient per call; timeout and retry count are per request.
    - Retries are the transport's connection retries; no local backoff.
    """

    def __init__(self, *, transport: httpx.AsyncBaseTransport | None = None):
        # A fixed transport (e.g. httpx.MockTransport) replaces the retrying default.
        self._transport = transport

    async def send(
        self, request: OutboundRequest, *, timeout_ms: int, max_retries: int
    ) -> dict[str, Any]:
        transport = self._transport or httpx.AsyncHTTPTransport(retries=max_retries)

        try:
            async with httpx.AsyncClient(
                transport=transport, timeout=timeout_ms / 1000.0
            ) as client:
                resp = await client.request(
                    request.method,
                    request.url,
                    headers=encode_header_values(request.headers),
                    json=request.body,
                )
        except httpx.TimeoutException as exc:
            raise GatewayTimeoutError("Gateway request timed out") from exc
        except httpx.HTTPError as exc:
            raise GatewayUpstreamError("Gateway request failed") from exc

        if resp.status_code >= 400:
            raise GatewayUpstreamError(
                _error_message(resp), status_code=resp.status_code
            )

        try:
            data = resp.json()
        except ValueError as exc:
            raise GatewayUpstreamError(
                "Gateway response was not valid JSON", status_code=resp.status_code
            ) from exc

        if not isinstance(data, dict):
            raise GatewayUpstreamError(
                "Gateway response JSON must be an object", status_code=resp.status_code
            )

        return data


def encode_header_values(headers: dict[str, str]) -> dict[str, bytes]:
    """UTF-8 encode header values; httpx would otherwise encode str values as ASCII."""

    return {name: value.encode("utf-8") for name, value in headers.items()}


def _error_message(resp: httpx.Response) -> str:
    """Build an error message from the provider's error envelope when there is one.

    OpenAI and Anthropic both use {"error": {"message": ...}}; Helicone itself may
    return {"error": "..."}.
    """

    message = None
    try:
        data = resp.json()
    except ValueError:
        data = None

    if isinstance(data, dict):
        err = data.get("error")
        if isinstance(err, dict):
            message = err.get("message")
        elif isinstance(err, str):
            message = err

    if message:
        return f"Gateway returned HTTP {resp.status_code}: {message}"
    return f"Gateway returned HTTP {resp.status_code}"
