from __future__ import annotations

import json
from typing import Any
from urllib.parse import quote

from helicone_node.core.gateway.deps import HeliconeCredentials
from helicone_node.core.gateway.http_client import OutboundRequest
from helicone_node.core.settings import get_settings
from helicone_node.domain.exceptions import NodeConfigurationError
from helicone_node.helicone.headers import build_helicone_headers
from helicone_node.helicone.schemas import (
    MAX_CACHE_TTL_SECONDS,
    NodeParameters,
    ObservabilityOptions,
    RequestOptions,
)

ANTHROPIC_VERSION = "2023-06-01"

DEFAULT_MODELS = {
    "openai": "gpt-4o-mini",
    "anthropic": "claude-3-opus-20240229",
}

DEFAULT_MAX_TOKENS = 100
DEFAULT_TEMPERATURE = 1.0
MAX_TOKENS_LIMIT = 32_768

# (field, lower, upper); None leaves that side open.
_OPTION_RANGES = (
    ("temperature", 0, 2),
    ("max_tokens", None, MAX_TOKENS_LIMIT),
    ("top_p", 0, 1),
    ("frequency_penalty", -2, 2),
    ("presence_penalty", -2, 2),
    ("timeout", 1, None),
    ("max_retries", 0, None),
)


def build_request(*, params: NodeParameters, credentials: HeliconeCredentials) -> OutboundRequest:
    """
    Build the outbound request for one item.

    Raises NodeConfigurationError for missing/invalid parameters; nothing is sent.
    """

    validate_options(options=params.options, helicone_options=params.helicone_options)
    messages = parse_messages(params.messages)

    headers: dict[str, str] = {"Content-Type": "application/json"}
    headers.update(
        build_helicone_headers(api_key=credentials.api_key, options=params.helicone_options)
    )

    if params.provider == "openai":
        return _build_openai(params=params, messages=messages, headers=headers)
    if params.provider == "anthropic":
        return _build_anthropic(params=params, messages=messages, headers=headers)
    if params.provider == "azure":
        return _build_azure(params=params, messages=messages, headers=headers)

    raise NodeConfigurationError(f"Unsupported provider: {params.provider}")


def validate_options(
    *, options: RequestOptions, helicone_options: ObservabilityOptions
) -> None:
    """Range-check numeric options for one item (raises NodeConfigurationError)."""

    for name, lower, upper in _OPTION_RANGES:
        _check_range(getattr(options, name), name=name, lower=lower, upper=upper)
    _check_range(
        helicone_options.cache_ttl, name="cache_ttl", lower=0, upper=MAX_CACHE_TTL_SECONDS
    )


def parse_messages(raw: str | list[dict[str, Any]]) -> list[dict[str, Any]]:
    if isinstance(raw, list):
        return raw
    try:
        parsed = json.loads(raw)
    except ValueError as exc:
        raise NodeConfigurationError("Messages must be valid JSON") from exc
    if not isinstance(parsed, list):
        raise NodeConfigurationError("Messages must be a JSON array")
    return parsed


def _check_range(
    value: float | None, *, name: str, lower: float | None, upper: float | None
) -> None:
    if value is None:
        return
    if (lower is not None and value < lower) or (upper is not None and value > upper):
        if upper is None:
            bound = f"at least {lower}"
        elif lower is None:
            bound = f"at most {upper}"
        else:
            bound = f"between {lower} and {upper}"
        raise NodeConfigurationError(f"Invalid parameter: {name} must be {bound}")


def _require(value: str | None, *, name: str) -> str:
    if not value:
        raise NodeConfigurationError(f"Missing required parameter: {name}")
    return value


def _model(params: NodeParameters) -> str:
    model = params.model if params.model is not None else DEFAULT_MODELS[params.provider]
    return _require(model, name="model")


def _base_body(*, messages: list[dict[str, Any]], options: RequestOptions) -> dict[str, Any]:
    body: dict[str, Any] = {
        "messages": messages,
        "max_tokens": options.max_tokens if options.max_tokens is not None else DEFAULT_MAX_TOKENS,
        "temperature": (
            options.temperature if options.temperature is not None else DEFAULT_TEMPERATURE
        ),
    }
    if options.top_p is not None:
        body["top_p"] = options.top_p
    return body


def _add_openai_options(body: dict[str, Any], options: RequestOptions) -> None:
    # Anthropic's Messages API has no penalties and no response_format.
    if options.frequency_penalty is not None:
        body["frequency_penalty"] = options.frequency_penalty
    if options.presence_penalty is not None:
        body["presence_penalty"] = options.presence_penalty
    if options.response_format == "json_object":
        body["response_format"] = {"type": "json_object"}


def _build_openai(
    *, params: NodeParameters, messages: list[dict[str, Any]], headers: dict[str, str]
) -> OutboundRequest:
    api_key = _require(params.openai_api_key, name="openai_api_key")
    model = _model(params)

    headers["Authorization"] = f"Bearer {api_key}"
    body = {"model": model, **_base_body(messages=messages, options=params.options)}
    _add_openai_options(body, params.options)

    base_url = get_settings().helicone_openai_base_url.rstrip("/")
    return OutboundRequest(url=f"{base_url}/v1/chat/completions", headers=headers, body=body)


def _build_anthropic(
    *, params: NodeParameters, messages: list[dict[str, Any]], headers: dict[str, str]
) -> OutboundRequest:
    api_key = _require(params.anthropic_api_key, name="anthropic_api_key")
    model = _model(params)

    headers["x-api-key"] = api_key
    headers["anthropic-version"] = ANTHROPIC_VERSION
    body = {"model": model, **_base_body(messages=messages, options=params.options)}
    if params.system_message:
        body["system"] = params.system_message

    base_url = get_settings().helicone_anthropic_base_url.rstrip("/")
    return OutboundRequest(url=f"{base_url}/v1/messages", headers=headers, body=body)


def _build_azure(
    *, params: NodeParameters, messages: list[dict[str, Any]], headers: dict[str, str]
) -> OutboundRequest:
    api_key = _require(params.azure_api_key, name="azure_api_key")
    domain = _require(params.azure_domain, name="azure_domain")
    deployment = _require(params.azure_deployment_name, name="azure_deployment_name")
    api_version = _require(params.azure_api_version, name="azure_api_version")

    headers["api-key"] = api_key
    headers["Helicone-OpenAI-Api-Base"] = f"https://{domain}"
    # The deployment decides the model; no "model" field in the body.
    body = _base_body(messages=messages, options=params.options)
    _add_openai_options(body, params.options)

    base_url = get_settings().helicone_openai_base_url.rstrip("/")
    url = (
        f"{base_url}/openai/deployments/{quote(deployment, safe='')}/chat/completions"
        f"?api-version={quote(api_version, safe='')}"
    )
    return OutboundRequest(url=url, headers=headers, body=body)
