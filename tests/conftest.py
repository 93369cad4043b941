"""Shared test fixtures."""

from __future__ import annotations

from collections.abc import AsyncGenerator
from pathlib import Path

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from kingdom.config import Settings, get_settings
from kingdom.main import create_app, shutdown, startup
from kingdom.tenancy.registry import TenantRegistry

ADMIN_USERNAME = "admin"
ADMIN_PASSWORD = "admin123"


@pytest.fixture
def settings(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Settings:
    """Settings pointing at a per-test data directory, with Redis disabled."""
    monkeypatch.setenv("KINGDOM_DATA_DIR", str(tmp_path / "data"))
    monkeypatch.setenv("KINGDOM_REDIS_URL", "")
    monkeypatch.setenv("KINGDOM_LOG_FORMAT", "console")
    monkeypatch.setenv("KINGDOM_ADMIN_USERNAME", ADMIN_USERNAME)
    monkeypatch.setenv("KINGDOM_ADMIN_PASSWORD", ADMIN_PASSWORD)
    get_settings.cache_clear()
    yield get_settings()
    get_settings.cache_clear()


@pytest_asyncio.fixture
async def app(settings: Settings) -> AsyncGenerator[FastAPI, None]:
    """Application with startup run by hand (ASGITransport skips lifespan)."""
    application = create_app()
    await startup(application, settings)
    yield application
    await shutdown(application)


@pytest_asyncio.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


def bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


async def login(client: AsyncClient, username: str, password: str) -> str:
    response = await client.post("/api/auth/login", json={"username": username, "password": password})
    assert response.status_code == 200, response.text
    return response.json()["access_token"]


@pytest_asyncio.fixture
async def admin_headers(client: AsyncClient) -> dict[str, str]:
    """Authorization headers for the bootstrap admin."""
    return bearer(await login(client, ADMIN_USERNAME, ADMIN_PASSWORD))


async def register(client: AsyncClient, admin_headers: dict[str, str], username: str, password: str) -> dict:
    response = await client.post(
        "/api/auth/register",
        json={"username": username, "password": password},
        headers=admin_headers,
    )
    assert response.status_code == 201, response.text
    return response.json()


@pytest_asyncio.fixture
async def make_user(client: AsyncClient, admin_headers: dict[str, str]):
    """Factory: register a non-admin user and return their authorization headers."""

    async def _make(username: str, password: str = "secret1") -> dict[str, str]:
        await register(client, admin_headers, username, password)
        return bearer(await login(client, username, password))

    return _make


@pytest_asyncio.fixture
async def user_headers(make_user) -> dict[str, str]:
    """Authorization headers for a freshly registered, non-admin user."""
    return await make_user("warden")


# ---------------------------------------------------------------------------
# Direct store access (no HTTP)
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture
async def registry(tmp_path: Path) -> AsyncGenerator[TenantRegistry, None]:
    reg = TenantRegistry(tmp_path / "stores")
    await reg.init_shared()
    yield reg
    await reg.close()


@pytest_asyncio.fixture
async def tenant_db(registry: TenantRegistry) -> AsyncGenerator[AsyncSession, None]:
    """A session on a provisioned tenant store for user 1."""
    store = await registry.resolve(1)
    async with store.session() as session:
        yield session
