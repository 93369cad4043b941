"""Tenant database registry.

Maps each user to a dedicated SQLite store, provisioning it on first use and
caching the open engine for the lifetime of the process. One registry is
created per application and injected into request handlers; it also owns the
shared store (users, mappings, feedback).
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

import structlog
from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from kingdom.database import create_session_factory, create_store_engine
from kingdom.db.base import Base
from kingdom.db.models import UserDatabase
from kingdom.exceptions import ProvisioningError
from kingdom.tenancy.provisioner import provision_tenant_schema

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

    from kingdom.config import Settings

logger = structlog.get_logger()

Provisioner = Callable[["AsyncEngine"], Awaitable[object]]


@dataclass
class TenantStore:
    """Handle to one user's provisioned store."""

    user_id: int
    database_name: str
    path: Path
    engine: AsyncEngine
    session_factory: async_sessionmaker[AsyncSession] = field(repr=False)

    def session(self) -> AsyncSession:
        """Open a new session on this store."""
        return self.session_factory()


class TenantRegistry:
    """Resolve user ids to tenant stores, creating them lazily."""

    def __init__(
        self,
        data_dir: Path | str,
        shared_database_name: str = "main",
        busy_timeout: float = 30.0,
        provisioner: Provisioner = provision_tenant_schema,
    ) -> None:
        self.data_dir = Path(data_dir)
        self._busy_timeout = busy_timeout
        self._provisioner = provisioner

        self.shared_engine = create_store_engine(
            self.data_dir / f"{shared_database_name}.db", busy_timeout=busy_timeout
        )
        self._shared_sessions = create_session_factory(self.shared_engine)

        # Opened engines, provisioned or not.
        self._engines: dict[int, AsyncEngine] = {}
        # Stores provisioned by this process.
        self._stores: dict[int, TenantStore] = {}
        self._locks: dict[int, asyncio.Lock] = {}

    @classmethod
    def from_settings(cls, settings: Settings) -> TenantRegistry:
        return cls(
            settings.data_path,
            shared_database_name=settings.shared_database_name,
            busy_timeout=settings.sqlite_busy_timeout,
        )

    # ------------------------------------------------------------------
    # Shared store
    # ------------------------------------------------------------------

    async def init_shared(self) -> None:
        """Create the shared tables if they do not exist."""
        async with self.shared_engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    def shared_session(self) -> AsyncSession:
        """Open a session on the shared store."""
        return self._shared_sessions()

    # ------------------------------------------------------------------
    # Tenant stores
    # ------------------------------------------------------------------

    @staticmethod
    def database_name_for(user_id: int) -> str:
        """Deterministic store name for a user."""
        return f"user_{user_id}"

    def path_for(self, database_name: str) -> Path:
        return self.data_dir / f"{database_name}.db"

    def is_provisioned(self, user_id: int) -> bool:
        return user_id in self._stores

    async def resolve(self, user_id: int) -> TenantStore:
        """Return the user's store, creating mapping and schema on first access.

        Concurrent first calls for the same user wait on a per-user lock, so
        the store is provisioned once.

        Raises:
            ProvisioningError: If the mapping or the store could not be created.
        """
        store = self._stores.get(user_id)
        if store is not None:
            return store

        lock = self._locks.setdefault(user_id, asyncio.Lock())
        async with lock:
            store = self._stores.get(user_id)
            if store is None:
                store = await self._provision(user_id)
                self._stores[user_id] = store
        # Later calls hit the cache before reaching the lock.
        if self._locks.get(user_id) is lock:
            del self._locks[user_id]
        return store

    async def get_handle(self, user_id: int | None = None) -> AsyncEngine:
        """Return an open engine for a user's store, or the shared engine.

        Unlike :meth:`resolve`, opening a store here does not provision it.
        """
        if user_id is None:
            return self.shared_engine

        engine = self._engines.get(user_id)
        if engine is None:
            database_name = await self._lookup_mapping(user_id) or self.database_name_for(user_id)
            engine = create_store_engine(self.path_for(database_name), busy_timeout=self._busy_timeout)
            self._engines[user_id] = engine
        return engine

    async def evict(self, user_id: int) -> None:
        """Dispose and forget a user's cached store. Data files are kept."""
        self._stores.pop(user_id, None)
        self._locks.pop(user_id, None)
        engine = self._engines.pop(user_id, None)
        if engine is not None:
            await engine.dispose()
            logger.info("tenant_evicted", user_id=user_id)

    async def close(self) -> None:
        """Dispose every engine, tenant and shared."""
        for engine in self._engines.values():
            await engine.dispose()
        self._engines.clear()
        self._stores.clear()
        self._locks.clear()
        await self.shared_engine.dispose()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _lookup_mapping(self, user_id: int) -> str | None:
        async with self.shared_session() as db:
            result = await db.execute(
                select(UserDatabase.database_name).where(UserDatabase.user_id == user_id)
            )
            return result.scalar_one_or_none()

    async def _ensure_mapping(self, user_id: int) -> tuple[str, bool]:
        """Return (database_name, created) for the user's mapping row."""
        existing = await self._lookup_mapping(user_id)
        if existing is not None:
            return existing, False

        database_name = self.database_name_for(user_id)
        async with self.shared_session() as db:
            db.add(UserDatabase(user_id=user_id, database_name=database_name))
            try:
                await db.commit()
            except IntegrityError:
                # Another process inserted it first.
                await db.rollback()
                existing = await self._lookup_mapping(user_id)
                if existing is None:
                    raise
                return existing, False
        logger.info("tenant_mapping_created", user_id=user_id, database_name=database_name)
        return database_name, True

    async def _remove_mapping(self, user_id: int) -> None:
        async with self.shared_session() as db:
            await db.execute(delete(UserDatabase).where(UserDatabase.user_id == user_id))
            await db.commit()

    async def _provision(self, user_id: int) -> TenantStore:
        try:
            database_name, created = await self._ensure_mapping(user_id)
        except SQLAlchemyError as exc:
            logger.error("tenant_mapping_failed", user_id=user_id, error=str(exc))
            msg = f"Could not register database for user {user_id}: {exc}"
            raise ProvisioningError(msg) from exc

        path = self.path_for(database_name)
        engine = self._engines.get(user_id)
        opened_here = engine is None
        try:
            if engine is None:
                engine = create_store_engine(path, busy_timeout=self._busy_timeout)
            await self._provisioner(engine)
        except (SQLAlchemyError, OSError) as exc:
            logger.error("tenant_provisioning_failed", user_id=user_id, path=str(path), error=str(exc))
            if opened_here and engine is not None:
                await engine.dispose()
            if created:
                try:
                    await self._remove_mapping(user_id)
                except SQLAlchemyError as cleanup_exc:
                    logger.error("tenant_mapping_cleanup_failed", user_id=user_id, error=str(cleanup_exc))
            msg = f"Could not provision database for user {user_id}: {exc}"
            raise ProvisioningError(msg) from exc

        self._engines[user_id] = engine
        logger.info("tenant_provisioned", user_id=user_id, database_name=database_name, created=created)
        return TenantStore(
            user_id=user_id,
            database_name=database_name,
            path=path,
            engine=engine,
            session_factory=create_session_factory(engine),
        )
