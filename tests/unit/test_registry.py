"""Tenant registry tests: isolation, lazy provisioning, locking and rollback."""

from __future__ import annotations

import asyncio

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError

from kingdom.db.models import UserDatabase
from kingdom.db.tenant_models import Player
from kingdom.exceptions import ProvisioningError
from kingdom.players.service import create_player
from kingdom.tenancy.provisioner import provision_tenant_schema
from kingdom.tenancy.registry import TenantRegistry


async def _mapping_count(registry: TenantRegistry, user_id: int) -> int:
    async with registry.shared_session() as db:
        result = await db.execute(
            select(func.count()).select_from(UserDatabase).where(UserDatabase.user_id == user_id)
        )
        return result.scalar_one()


class CountingProvisioner:
    def __init__(self) -> None:
        self.calls = 0

    async def __call__(self, engine):
        self.calls += 1
        # Yield so concurrent resolvers get a chance to race.
        await asyncio.sleep(0.01)
        return await provision_tenant_schema(engine)


class FlakyProvisioner:
    """Fails the first call, then provisions normally."""

    def __init__(self) -> None:
        self.calls = 0

    async def __call__(self, engine):
        self.calls += 1
        if self.calls == 1:
            raise OperationalError("CREATE TABLE players", {}, Exception("disk I/O error"))
        return await provision_tenant_schema(engine)


class TestResolve:
    async def test_creates_mapping_and_file(self, registry: TenantRegistry):
        store = await registry.resolve(7)
        assert store.database_name == "user_7"
        assert store.path.exists()
        assert registry.is_provisioned(7)
        assert await _mapping_count(registry, 7) == 1

    async def test_second_resolve_reuses_cached_store(self, registry: TenantRegistry):
        first = await registry.resolve(3)
        second = await registry.resolve(3)
        assert first is second
        assert await _mapping_count(registry, 3) == 1
        assert registry._locks == {}

    async def test_stores_are_isolated(self, registry: TenantRegistry):
        store_a = await registry.resolve(1)
        store_b = await registry.resolve(2)

        async with store_a.session() as db:
            await create_player(db, "Aria")

        async with store_b.session() as db:
            count = (await db.execute(select(func.count()).select_from(Player))).scalar_one()
        assert count == 0

        async with store_a.session() as db:
            names = (await db.execute(select(Player.name))).scalars().all()
        assert names == ["Aria"]

    async def test_concurrent_first_access_provisions_once(self, tmp_path):
        provisioner = CountingProvisioner()
        registry = TenantRegistry(tmp_path, provisioner=provisioner)
        await registry.init_shared()
        try:
            stores = await asyncio.gather(*(registry.resolve(5) for _ in range(5)))
            assert provisioner.calls == 1
            assert all(s is stores[0] for s in stores)
            assert await _mapping_count(registry, 5) == 1
            assert registry._locks == {}
        finally:
            await registry.close()


class TestProvisioningFailure:
    async def test_failure_removes_new_mapping(self, tmp_path):
        registry = TenantRegistry(tmp_path, provisioner=FlakyProvisioner())
        await registry.init_shared()
        try:
            with pytest.raises(ProvisioningError):
                await registry.resolve(9)
            assert not registry.is_provisioned(9)
            assert await _mapping_count(registry, 9) == 0
        finally:
            await registry.close()

    async def test_cleanup_failure_keeps_original_error(self, tmp_path, monkeypatch):
        registry = TenantRegistry(tmp_path, provisioner=FlakyProvisioner())
        await registry.init_shared()

        async def broken_remove(user_id: int) -> None:
            raise OperationalError("DELETE FROM user_databases", {}, Exception("database is locked"))

        monkeypatch.setattr(registry, "_remove_mapping", broken_remove)
        try:
            with pytest.raises(ProvisioningError, match="Could not provision") as exc_info:
                await registry.resolve(9)
            assert "disk I/O error" in str(exc_info.value.__cause__)
            assert not registry.is_provisioned(9)
        finally:
            await registry.close()

    async def test_retry_after_failure_succeeds(self, tmp_path):
        provisioner = FlakyProvisioner()
        registry = TenantRegistry(tmp_path, provisioner=provisioner)
        await registry.init_shared()
        try:
            with pytest.raises(ProvisioningError):
                await registry.resolve(9)
            store = await registry.resolve(9)
            assert store.database_name == "user_9"
            assert provisioner.calls == 2
            assert await _mapping_count(registry, 9) == 1
        finally:
            await registry.close()


class TestHandles:
    async def test_default_handle_is_shared_engine(self, registry: TenantRegistry):
        assert await registry.get_handle() is registry.shared_engine

    async def test_handle_does_not_provision(self, registry: TenantRegistry):
        engine = await registry.get_handle(4)
        assert engine is await registry.get_handle(4)
        assert not registry.is_provisioned(4)
        assert await _mapping_count(registry, 4) == 0

    async def test_resolve_reuses_opened_handle(self, registry: TenantRegistry):
        engine = await registry.get_handle(4)
        store = await registry.resolve(4)
        assert store.engine is engine

    async def test_evict_forgets_store(self, registry: TenantRegistry):
        await registry.resolve(6)
        await registry.evict(6)
        assert not registry.is_provisioned(6)
        # Reopening finds the existing mapping and file.
        store = await registry.resolve(6)
        assert store.database_name == "user_6"
        assert await _mapping_count(registry, 6) == 1
