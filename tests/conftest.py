"""Pytest configuration and shared fixtures."""
from __future__ import annotations

import pytest

from kg_config.settings import MemoryApiSettings
from kg_memory_mcp.client import MemoryApiClient
from kg_memory_mcp.dispatcher import Dispatcher
from kg_memory_mcp.http_client import HttpClient
from tests.helpers.fake_http import FakeSession
from tests.helpers.mcp_runtime import UNREACHABLE_API_URL, build_test_env, mcp_stdio_session


@pytest.fixture(autouse=True)
def _isolate_telemetry(tmp_path, monkeypatch):
    """Keep telemetry out of the repo; tests that need it re-enable it explicitly."""
    monkeypatch.setenv("KG_TELEMETRY_DIR", str(tmp_path / "telemetry"))
    monkeypatch.setenv("KG_DISABLE_TELEMETRY", "1")


@pytest.fixture()
def settings() -> MemoryApiSettings:
    return MemoryApiSettings(api_key="test-key", base_url="http://memory.test")


@pytest.fixture()
def fake_session() -> FakeSession:
    return FakeSession()


@pytest.fixture()
def api_client(settings, fake_session) -> MemoryApiClient:
    return MemoryApiClient(settings, http=HttpClient(settings, session=fake_session))


@pytest.fixture()
def dispatcher(api_client) -> Dispatcher:
    return Dispatcher(api_client)


@pytest.fixture()
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
async def server_session(tmp_path):
    """Initialized session for the stdio server, pointed at an unreachable API."""
    env = build_test_env(tmp_path, extra={"MEMORY_API_KEY": "integration-key", "MEMORY_API_URL": UNREACHABLE_API_URL})
    async with mcp_stdio_session(env=env) as session:
        yield session
