"""Per-request access to the caller's tenant store."""

from __future__ import annotations

from collections.abc import AsyncGenerator

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from kingdom.auth.dependencies import get_current_user
from kingdom.db.models import User
from kingdom.dependencies import get_registry
from kingdom.tenancy.registry import TenantRegistry


async def get_tenant_session(
    user: User = Depends(get_current_user),
    registry: TenantRegistry = Depends(get_registry),
) -> AsyncGenerator[AsyncSession, None]:
    """Yield a session on the current user's store, provisioning it on first use."""
    store = await registry.resolve(user.id)
    async with store.session() as session:
        yield session
