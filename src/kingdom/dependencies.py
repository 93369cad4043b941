"""Shared FastAPI dependencies."""

from __future__ import annotations

from collections.abc import AsyncGenerator

from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncSession

from kingdom.tenancy.registry import TenantRegistry


def get_registry(request: Request) -> TenantRegistry:
    """The application's tenant registry (created at startup)."""
    registry: TenantRegistry | None = getattr(request.app.state, "registry", None)
    if registry is None:
        msg = "Tenant registry not initialized. Call startup() first."
        raise RuntimeError(msg)
    return registry


async def get_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """Yield a session on the shared store (users, mappings, feedback)."""
    registry = get_registry(request)
    async with registry.shared_session() as session:
        yield session
