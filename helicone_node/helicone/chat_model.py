"""Chat model routed through the Helicone AI Gateway.

The gateway speaks the OpenAI chat-completions protocol for every provider, so an
off-the-shelf ``openai.AsyncOpenAI`` client does the transport work (timeouts,
retries). This module only decides its configuration.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import httpx
import openai

from helicone_node.core.gateway.deps import HeliconeCredentials
from helicone_node.core.gateway.http_client import (
    GatewayTimeoutError,
    GatewayUpstreamError,
    encode_header_values,
)
from helicone_node.core.settings import get_settings
from helicone_node.helicone.builder import ANTHROPIC_VERSION, validate_options
from helicone_node.helicone.headers import build_helicone_headers
from helicone_node.helicone.schemas import ChatModelParameters

DEFAULT_TEMPERATURE = 0.7
DEFAULT_TIMEOUT_MS = 60_000
DEFAULT_MAX_RETRIES = 2


@dataclass(frozen=True)
class ChatModelConfig:
    model: str
    base_url: str
    api_key: str
    default_headers: dict[str, str]
    timeout_ms: int
    max_retries: int
    call_options: dict[str, Any] = field(default_factory=dict)


def build_chat_model_config(
    *, params: ChatModelParameters, credentials: HeliconeCredentials
) -> ChatModelConfig:
    validate_options(options=params.options, helicone_options=params.helicone_options)

    headers = build_helicone_headers(api_key=credentials.api_key, options=params.helicone_options)
    if params.provider == "anthropic":
        headers["anthropic-version"] = ANTHROPIC_VERSION

    options = params.options
    call_options: dict[str, Any] = {
        "temperature": options.temperature if options.temperature is not None else DEFAULT_TEMPERATURE,
    }
    # -1 (or any non-positive value) means "let the provider decide".
    if options.max_tokens is not None and options.max_tokens > 0:
        call_options["max_tokens"] = options.max_tokens
    if options.top_p is not None:
        call_options["top_p"] = options.top_p
    if options.frequency_penalty is not None:
        call_options["frequency_penalty"] = options.frequency_penalty
    if options.presence_penalty is not None:
        call_options["presence_penalty"] = options.presence_penalty
    if options.response_format == "json_object":
        call_options["response_format"] = {"type": "json_object"}

    return ChatModelConfig(
        model=f"{params.provider}/{params.model}",
        base_url=credentials.base_url or get_settings().helicone_gateway_base_url,
        api_key=credentials.api_key,
        default_headers=headers,
        timeout_ms=options.timeout if options.timeout is not None else DEFAULT_TIMEOUT_MS,
        max_retries=options.max_retries if options.max_retries is not None else DEFAULT_MAX_RETRIES,
        call_options=call_options,
    )


class HeliconeChatModel:
    """OpenAI-compatible chat model bound to one gateway configuration."""

    def __init__(self, *, config: ChatModelConfig, http_client: httpx.AsyncClient | None = None):
        self.config = config
        self._client = openai.AsyncOpenAI(
            api_key=config.api_key,
            base_url=config.base_url,
            # The SDK hands header values to httpx, which encodes str values as ASCII.
            default_headers=encode_header_values(config.default_headers),
            timeout=config.timeout_ms / 1000.0,
            max_retries=config.max_retries,
            http_client=http_client,
        )

    async def ainvoke(self, messages: list[dict[str, Any]]) -> dict[str, Any]:
        try:
            completion = await self._client.chat.completions.create(
                model=self.config.model,
                messages=messages,
                **self.config.call_options,
            )
        except openai.APITimeoutError as exc:
            raise GatewayTimeoutError("Gateway request timed out") from exc
        except openai.APIStatusError as exc:
            raise GatewayUpstreamError(
                f"Gateway returned HTTP {exc.status_code}", status_code=exc.status_code
            ) from exc
        except openai.OpenAIError as exc:
            raise GatewayUpstreamError("Gateway request failed") from exc

        return completion.model_dump()


def supply_chat_model(
    *,
    params: ChatModelParameters,
    credentials: HeliconeCredentials,
    http_client: httpx.AsyncClient | None = None,
) -> HeliconeChatModel:
    config = build_chat_model_config(params=params, credentials=credentials)
    return HeliconeChatModel(config=config, http_client=http_client)
