from __future__ import annotations

import pytest

from helicone_node.core.gateway.deps import HeliconeCredentials

HELICONE_TEST_KEY = "sk-helicone-test"

_GATEWAY_ENV_VARS = (
    "HELICONE_BASE_URL",
    "HELICONE_OPENAI_BASE_URL",
    "HELICONE_ANTHROPIC_BASE_URL",
    "HELICONE_GATEWAY_BASE_URL",
    "HELICONE_TIMEOUT_MS",
    "HELICONE_MAX_RETRIES",
)


@pytest.fixture(autouse=True)
def _set_test_settings(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("HELICONE_API_KEY", HELICONE_TEST_KEY)
    for name in _GATEWAY_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    # Settings are cached via @lru_cache; clear so each test sees its own environment.
    from helicone_node.core.settings import get_settings

    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def credentials() -> HeliconeCredentials:
    return HeliconeCredentials(api_key=HELICONE_TEST_KEY)


@pytest.fixture
def client():
    from fastapi.testclient import TestClient

    from helicone_node.main import create_app

    app = create_app()
    with TestClient(app) as c:
        yield c
