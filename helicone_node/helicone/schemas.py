from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

Provider = Literal["openai", "anthropic", "azure"]
ResponseFormat = Literal["text", "json_object"]

DEFAULT_MESSAGES = '[{"role": "user", "content": "Hello!"}]'
DEFAULT_CACHE_TTL_SECONDS = 604_800
MAX_CACHE_TTL_SECONDS = 31_536_000


class RequestOptions(BaseModel):
    """Sampling and transport options.

    Every field is optional; direct requests and the chat model apply their own defaults.
    Ranges are checked per item when the request is built, so one bad item does not
    reject a whole batch.
    """

    temperature: float | None = None
    max_tokens: int | None = Field(
        default=None,
        description="Completion length. Values <= 0 leave the limit unset for the chat model.",
    )
    top_p: float | None = None
    frequency_penalty: float | None = None
    presence_penalty: float | None = None
    timeout: int | None = Field(default=None, description="Request timeout (milliseconds).")
    max_retries: int | None = None
    response_format: ResponseFormat = "text"


class ObservabilityOptions(BaseModel):
    """Helicone tracking, session and caching options."""

    custom_properties: str | dict[str, Any] | None = Field(
        default=None,
        description="JSON object (or its string form); each key becomes a Helicone-Property header.",
        examples=['{"environment": "staging", "feature": "summaries"}'],
    )
    session_id: str | None = Field(default=None, description="Groups related requests.")
    session_path: str | None = Field(default=None, description="Hierarchical path, e.g. /plan/step-1.")
    session_name: str | None = Field(default=None, description="Human-readable session name.")
    enable_caching: bool = False
    cache_ttl: int | None = Field(
        default=None,
        description=f"Cache TTL in seconds (default {DEFAULT_CACHE_TTL_SECONDS}).",
    )


class NodeParameters(BaseModel):
    """Parameters of one input item for a direct provider request."""

    provider: Provider = "openai"
    model: str | None = Field(
        default=None,
        description="Model identifier. Defaults per provider; ignored for Azure (the deployment decides).",
    )

    openai_api_key: str | None = None
    anthropic_api_key: str | None = None
    azure_api_key: str | None = None
    azure_domain: str | None = Field(
        default=None, description="Azure OpenAI domain without scheme (myresource.openai.azure.com)."
    )
    azure_deployment_name: str | None = None
    azure_api_version: str = "2023-12-01-preview"

    messages: str | list[dict[str, Any]] = Field(
        default=DEFAULT_MESSAGES,
        description="Chat messages as a JSON array (or its string form).",
    )
    system_message: str = Field(default="", description="System prompt (Anthropic only).")

    options: RequestOptions = Field(default_factory=RequestOptions)
    helicone_options: ObservabilityOptions = Field(default_factory=ObservabilityOptions)


class ChatModelParameters(BaseModel):
    """Parameters of the gateway chat model."""

    provider: Provider = "openai"
    model: str = Field(default="gpt-4o-mini", min_length=1)
    options: RequestOptions = Field(default_factory=RequestOptions)
    helicone_options: ObservabilityOptions = Field(default_factory=ObservabilityOptions)


class ExecuteIn(BaseModel):
    items: list[NodeParameters] = Field(min_length=1)
    continue_on_fail: bool = Field(
        default=False,
        description="Turn item failures into error records instead of aborting the batch.",
    )


class NodeItemOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    json_: dict[str, Any] = Field(alias="json")
    paired_item: dict[str, int]


class ExecuteOut(BaseModel):
    items: list[NodeItemOut]


class RequestPreviewOut(BaseModel):
    method: str
    url: str
    headers: dict[str, str]
    body: dict[str, Any]


class ChatIn(ChatModelParameters):
    messages: list[dict[str, Any]] = Field(min_length=1)
