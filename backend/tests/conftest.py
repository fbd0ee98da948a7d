"""Shared test fixtures."""

import os
from collections.abc import AsyncGenerator

import httpx
import pytest
from httpx import ASGITransport, AsyncClient

# Keep tests away from any local .env / Redis
os.environ.setdefault("SESSION_BACKEND", "memory")
os.environ.setdefault("ENVIRONMENT", "test")

import clickid_service.core.dependencies as deps_mod  # noqa: E402
from clickid_service.core.config import Settings  # noqa: E402
from clickid_service.main import app  # noqa: E402
from clickid_service.services.session_store import MemorySessionStore  # noqa: E402
from tests.helpers import DEFAULT_CAMPAIGN, LOOKUP_BASE, MINT_BASE, FakeUpstream  # noqa: E402


@pytest.fixture
def test_settings() -> Settings:
    return Settings(
        _env_file=None,
        API_BASE_URL=LOOKUP_BASE,
        MINT_BASE_URL=MINT_BASE,
        DEFAULT_CAMPAIGN_ID=DEFAULT_CAMPAIGN,
        SESSION_BACKEND="memory",
    )


@pytest.fixture
def upstream() -> FakeUpstream:
    """Records outbound lookup/mint calls; tests set the canned replies."""
    return FakeUpstream()


@pytest.fixture
def session_store() -> MemorySessionStore:
    return MemorySessionStore()


@pytest.fixture
async def lookup_client(
    upstream: FakeUpstream, test_settings: Settings
) -> AsyncGenerator[httpx.AsyncClient, None]:
    async with httpx.AsyncClient(
        base_url=test_settings.API_BASE_URL,
        transport=httpx.MockTransport(upstream.handle),
        headers={"Accept": "application/json"},
    ) as c:
        yield c


@pytest.fixture
async def mint_client(upstream: FakeUpstream) -> AsyncGenerator[httpx.AsyncClient, None]:
    async with httpx.AsyncClient(transport=httpx.MockTransport(upstream.handle)) as c:
        yield c


@pytest.fixture
def overrides(test_settings, session_store, lookup_client, mint_client):
    """Wire the app to test settings, in-memory sessions and fake upstreams."""
    app.dependency_overrides[deps_mod.get_settings] = lambda: test_settings
    app.dependency_overrides[deps_mod.get_session_store] = lambda: session_store
    app.dependency_overrides[deps_mod.get_lookup_client] = lambda: lookup_client
    app.dependency_overrides[deps_mod.get_mint_client] = lambda: mint_client
    try:
        yield
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
async def client(overrides) -> AsyncGenerator[AsyncClient, None]:
    """HTTP test client for the FastAPI app (plain http, as a non-TLS site)."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://www.example.com") as c:
        yield c


@pytest.fixture
async def https_client(overrides) -> AsyncGenerator[AsyncClient, None]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="https://example.com") as c:
        yield c
