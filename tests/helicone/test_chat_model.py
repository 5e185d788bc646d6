"""Tests for the gateway chat model (the OpenAI SDK talks to an httpx.MockTransport)."""

from __future__ import annotations

import asyncio
import json

import httpx
import pytest

from helicone_node.core.gateway.deps import HeliconeCredentials
from helicone_node.core.gateway.http_client import GatewayUpstreamError
from helicone_node.domain.exceptions import NodeConfigurationError
from helicone_node.helicone.chat_model import build_chat_model_config, supply_chat_model
from helicone_node.helicone.schemas import (
    ChatModelParameters,
    ObservabilityOptions,
    RequestOptions,
)

_COMPLETION = {
    "id": "chatcmpl-1",
    "object": "chat.completion",
    "created": 1_700_000_000,
    "model": "openai/gpt-4o-mini",
    "choices": [
        {
            "index": 0,
            "message": {"role": "assistant", "content": "Why did the chicken..."},
            "finish_reason": "stop",
        }
    ],
}


def test_config_defaults(credentials: HeliconeCredentials) -> None:
    config = build_chat_model_config(params=ChatModelParameters(), credentials=credentials)

    assert config.model == "openai/gpt-4o-mini"
    assert config.base_url == "https://ai-gateway.helicone.ai/v1"
    assert config.api_key == "sk-helicone-test"
    assert config.default_headers == {"Helicone-Auth": "Bearer sk-helicone-test"}
    assert config.timeout_ms == 60_000
    assert config.max_retries == 2
    assert config.call_options == {"temperature": 0.7}


def test_anthropic_gets_version_header_and_prefixed_model(
    credentials: HeliconeCredentials,
) -> None:
    config = build_chat_model_config(
        params=ChatModelParameters(
            provider="anthropic",
            model="claude-3-5-sonnet-20241022",
            helicone_options=ObservabilityOptions(
                custom_properties='{"team": "growth"}',
                session_id="s-1",
                enable_caching=True,
            ),
        ),
        credentials=credentials,
    )

    assert config.model == "anthropic/claude-3-5-sonnet-20241022"
    assert config.default_headers == {
        "Helicone-Auth": "Bearer sk-helicone-test",
        "Helicone-Property-team": "growth",
        "Helicone-Session-Id": "s-1",
        "Helicone-Cache-Enabled": "true",
        "Cache-Control": "max-age=604800",
        "anthropic-version": "2023-06-01",
    }


@pytest.mark.parametrize(("max_tokens", "expected"), [(-1, None), (0, None), (512, 512)])
def test_max_tokens_only_when_positive(
    max_tokens: int, expected: int | None, credentials: HeliconeCredentials
) -> None:
    config = build_chat_model_config(
        params=ChatModelParameters(options=RequestOptions(max_tokens=max_tokens)),
        credentials=credentials,
    )

    assert config.call_options.get("max_tokens") == expected


def test_options_are_forwarded(credentials: HeliconeCredentials) -> None:
    config = build_chat_model_config(
        params=ChatModelParameters(
            options=RequestOptions(
                temperature=0,
                top_p=0.8,
                frequency_penalty=0.5,
                presence_penalty=0.1,
                timeout=15_000,
                max_retries=5,
                response_format="json_object",
            )
        ),
        credentials=credentials,
    )

    assert config.call_options == {
        "temperature": 0,
        "top_p": 0.8,
        "frequency_penalty": 0.5,
        "presence_penalty": 0.1,
        "response_format": {"type": "json_object"},
    }
    assert config.timeout_ms == 15_000
    assert config.max_retries == 5


def test_credential_base_url_overrides_gateway() -> None:
    config = build_chat_model_config(
        params=ChatModelParameters(),
        credentials=HeliconeCredentials(api_key="sk-h", base_url="https://gateway.example.com/v1"),
    )

    assert config.base_url == "https://gateway.example.com/v1"


def test_ainvoke_sends_request_through_gateway(credentials: HeliconeCredentials) -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=_COMPLETION)

    async def run() -> dict:
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http_client:
            model = supply_chat_model(
                params=ChatModelParameters(
                    helicone_options=ObservabilityOptions(session_name="Nightly run")
                ),
                credentials=credentials,
                http_client=http_client,
            )
            return await model.ainvoke([{"role": "user", "content": "Tell me a joke"}])

    completion = asyncio.run(run())

    assert completion["choices"][0]["message"]["content"] == "Why did the chicken..."
    request = seen[0]
    assert str(request.url) == "https://ai-gateway.helicone.ai/v1/chat/completions"
    assert request.headers["authorization"] == "Bearer sk-helicone-test"
    assert request.headers["helicone-auth"] == "Bearer sk-helicone-test"
    assert request.headers["helicone-session-name"] == "Nightly run"
    body = json.loads(request.content)
    assert body["model"] == "openai/gpt-4o-mini"
    assert body["temperature"] == 0.7
    assert body["messages"] == [{"role": "user", "content": "Tell me a joke"}]


def test_ainvoke_maps_status_errors(credentials: HeliconeCredentials) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(401, json={"error": {"message": "bad key"}})

    async def run() -> dict:
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http_client:
            model = supply_chat_model(
                params=ChatModelParameters(options=RequestOptions(max_retries=0)),
                credentials=credentials,
                http_client=http_client,
            )
            return await model.ainvoke([{"role": "user", "content": "Hi"}])

    with pytest.raises(GatewayUpstreamError) as exc_info:
        asyncio.run(run())

    assert exc_info.value.status_code == 401


def test_ainvoke_sends_non_ascii_headers_as_utf8(credentials: HeliconeCredentials) -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=_COMPLETION)

    async def run() -> dict:
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http_client:
            model = supply_chat_model(
                params=ChatModelParameters(
                    helicone_options=ObservabilityOptions(
                        custom_properties={"team": "Señal"}, session_path="/über/step-1"
                    )
                ),
                credentials=credentials,
                http_client=http_client,
            )
            return await model.ainvoke([{"role": "user", "content": "Hola"}])

    asyncio.run(run())

    raw = {name.lower(): value for name, value in seen[0].headers.raw}
    assert raw[b"helicone-property-team"] == "Señal".encode("utf-8")
    assert raw[b"helicone-session-path"] == "/über/step-1".encode("utf-8")


def test_out_of_range_option_is_a_configuration_error(credentials: HeliconeCredentials) -> None:
    with pytest.raises(NodeConfigurationError) as exc_info:
        build_chat_model_config(
            params=ChatModelParameters(options=RequestOptions(temperature=-1)),
            credentials=credentials,
        )

    assert exc_info.value.message == "Invalid parameter: temperature must be between 0 and 2"
