"""Send live requests through Helicone to check keys and routing.

This script talks to real providers and costs tokens:
- HELICONE_API_KEY and OPENAI_API_KEY are required
- the Anthropic check only runs when ANTHROPIC_API_KEY is set
"""

# ruff: noqa: I001
from __future__ import annotations

import asyncio
import os

from helicone_node.core.gateway.deps import HeliconeCredentials
from helicone_node.core.gateway.http_client import GatewayHttpClient
from helicone_node.helicone.schemas import NodeParameters, ObservabilityOptions, RequestOptions
from helicone_node.helicone.service import HeliconeNodeService

_JOKE = [{"role": "user", "content": "Hello! Please tell me a short joke."}]


def _smoke_items(*, openai_key: str, anthropic_key: str | None) -> list[NodeParameters]:
    items = [
        NodeParameters(
            provider="openai",
            model="gpt-4o-mini",
            openai_api_key=openai_key,
            messages=_JOKE,
            options=RequestOptions(max_tokens=100, temperature=0.7),
            helicone_options=ObservabilityOptions(
                custom_properties={"test": True, "environment": "testing"},
                session_id="smoke-openai",
                session_name="Node Smoke Test",
            ),
        )
    ]
    if anthropic_key:
        items.append(
            NodeParameters(
                provider="anthropic",
                model="claude-3-opus-20240229",
                anthropic_api_key=anthropic_key,
                messages=_JOKE,
                system_message="You are a helpful assistant.",
                options=RequestOptions(max_tokens=100, temperature=0.7),
                helicone_options=ObservabilityOptions(
                    custom_properties={"test": True, "environment": "testing"},
                    session_id="smoke-anthropic",
                    session_name="Node Smoke Test",
                ),
            )
        )
    return items


async def run_smoke_test(*, helicone_key: str, openai_key: str, anthropic_key: str | None) -> bool:
    svc = HeliconeNodeService(
        credentials=HeliconeCredentials(api_key=helicone_key),
        gateway_client=GatewayHttpClient(),
    )
    items = _smoke_items(openai_key=openai_key, anthropic_key=anthropic_key)
    results = await svc.execute(items=items, continue_on_fail=True)

    ok = True
    for params, result in zip(items, results, strict=True):
        error = result["json"].get("error")
        if error:
            ok = False
            print(f"{params.provider}: FAIL ({error})")
        else:
            print(f"{params.provider}: PASS")
    if not anthropic_key:
        print("anthropic: SKIP (ANTHROPIC_API_KEY not set)")
    return ok


def main() -> None:
    """Entry point."""
    helicone_key = os.getenv("HELICONE_API_KEY", "")
    openai_key = os.getenv("OPENAI_API_KEY", "")
    if not helicone_key:
        raise SystemExit("HELICONE_API_KEY is not set")
    if not openai_key:
        raise SystemExit("OPENAI_API_KEY is not set")

    ok = asyncio.run(
        run_smoke_test(
            helicone_key=helicone_key,
            openai_key=openai_key,
            anthropic_key=os.getenv("ANTHROPIC_API_KEY") or None,
        )
    )
    if not ok:
        raise SystemExit(1)


if __name__ == "__main__":
    main()
