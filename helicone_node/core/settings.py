from __future__ import annotations

from functools import lru_cache

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_name: str = "helicone-node"
    app_env: str = Field(
        default="production",
        validation_alias=AliasChoices("APP_ENV", "app_env"),
        description="Runtime environment: development|production.",
    )

    # Helicone credential
    # IMPORTANT: the key is a secret; it must never reach logs or metric labels.
    helicone_api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("HELICONE_API_KEY", "helicone_api_key"),
        description="Helicone API key (pk- for write access, sk- for read access).",
    )
    helicone_base_url: str | None = Field(
        default=None,
        validation_alias=AliasChoices("HELICONE_BASE_URL", "helicone_base_url"),
        description=(
            "Optional override of the AI Gateway base URL used by the chat model "
            "(e.g. a self-hosted or EU gateway)."
        ),
    )

    # Gateway endpoints
    helicone_openai_base_url: str = Field(
        default="https://oai.helicone.ai",
        validation_alias=AliasChoices("HELICONE_OPENAI_BASE_URL", "helicone_openai_base_url"),
        description="Helicone proxy for OpenAI and Azure OpenAI requests.",
    )
    helicone_anthropic_base_url: str = Field(
        default="https://anthropic.helicone.ai",
        validation_alias=AliasChoices(
            "HELICONE_ANTHROPIC_BASE_URL", "helicone_anthropic_base_url"
        ),
        description="Helicone proxy for Anthropic requests.",
    )
    helicone_gateway_base_url: str = Field(
        default="https://ai-gateway.helicone.ai/v1",
        validation_alias=AliasChoices("HELICONE_GATEWAY_BASE_URL", "helicone_gateway_base_url"),
        description="OpenAI-compatible Helicone AI Gateway used by the chat model.",
    )

    # Outbound HTTP defaults (overridable per item through request options)
    helicone_timeout_ms: int = Field(
        default=360_000,
        ge=1,
        validation_alias=AliasChoices("HELICONE_TIMEOUT_MS", "helicone_timeout_ms"),
        description="Default timeout for gateway requests (milliseconds).",
    )
    helicone_max_retries: int = Field(
        default=2,
        ge=0,
        validation_alias=AliasChoices("HELICONE_MAX_RETRIES", "helicone_max_retries"),
        description="Default number of transport retries for gateway requests.",
    )

    @property
    def is_development(self) -> bool:
        return str(self.app_env).strip().lower() == "development"


@lru_cache
def get_settings() -> Settings:
    return Settings()
