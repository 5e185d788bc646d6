from __future__ import annotations

from dataclasses import dataclass

from helicone_node.core.gateway.http_client import GatewayHttpClient
from helicone_node.core.settings import get_settings


@dataclass(frozen=True)
class HeliconeCredentials:
    api_key: str
    base_url: str | None = None


def get_helicone_credentials() -> HeliconeCredentials | None:
    """
    Dependency provider for the Helicone credential.

    Returns None when not configured so routes can return a safe 502 without
    raising during dependency resolution.
    """

    settings = get_settings()
    if not settings.helicone_api_key:
        return None

    return HeliconeCredentials(
        api_key=settings.helicone_api_key,
        base_url=settings.helicone_base_url or None,
    )


def get_gateway_client() -> GatewayHttpClient:
    return GatewayHttpClient()
