"""Schema provisioner tests: fresh stores, legacy stores and re-runs."""

from __future__ import annotations

import pytest_asyncio
from sqlalchemy import inspect, select, text

from kingdom.database import create_session_factory, create_store_engine
from kingdom.db.tenant_models import Alliance, Player
from kingdom.tenancy.provisioner import ADDITIVE_COLUMNS, provision_tenant_schema

TENANT_TABLES = {"players", "events", "alliances", "event_alliances"}


@pytest_asyncio.fixture
async def engine(tmp_path):
    eng = create_store_engine(tmp_path / "tenant.db")
    yield eng
    await eng.dispose()


async def _columns(engine) -> dict[str, list[str]]:
    def _read(sync_conn):
        inspector = inspect(sync_conn)
        return {t: [c["name"] for c in inspector.get_columns(t)] for t in inspector.get_table_names()}

    async with engine.connect() as conn:
        return await conn.run_sync(_read)


class TestFreshStore:
    async def test_creates_all_tables(self, engine):
        applied = await provision_tenant_schema(engine)
        columns = await _columns(engine)
        assert TENANT_TABLES <= set(columns)
        # Fresh tables already carry every column.
        assert applied == []

    async def test_running_twice_is_a_no_op(self, engine):
        await provision_tenant_schema(engine)
        before = await _columns(engine)
        applied = await provision_tenant_schema(engine)
        assert applied == []
        assert await _columns(engine) == before


class TestLegacyStore:
    async def _create_legacy_tables(self, engine):
        async with engine.begin() as conn:
            await conn.execute(
                text(
                    "CREATE TABLE players (id INTEGER PRIMARY KEY AUTOINCREMENT, name TEXT NOT NULL, "
                    "mvp_count INTEGER DEFAULT 0, last_mvp_date DATETIME, created_at DATETIME)"
                )
            )
            await conn.execute(
                text("CREATE TABLE alliances (id INTEGER PRIMARY KEY AUTOINCREMENT, name TEXT NOT NULL, created_at DATETIME)")
            )
            await conn.execute(text("INSERT INTO players (name, mvp_count) VALUES ('Old Guard', 2)"))
            await conn.execute(text("INSERT INTO alliances (name) VALUES ('Iron Pact')"))

    async def test_missing_columns_are_added(self, engine):
        await self._create_legacy_tables(engine)

        applied = await provision_tenant_schema(engine)

        assert applied == [f"{table}.{column}" for table, column, _ddl in ADDITIVE_COLUMNS]
        columns = await _columns(engine)
        for table, column, _ddl in ADDITIVE_COLUMNS:
            assert column in columns[table]
        assert {"events", "event_alliances"} <= set(columns)

    async def test_existing_rows_get_defaults(self, engine):
        await self._create_legacy_tables(engine)
        await provision_tenant_schema(engine)

        async with create_session_factory(engine)() as db:
            player = (await db.execute(select(Player))).scalar_one()
            alliance = (await db.execute(select(Alliance))).scalar_one()
        assert player.name == "Old Guard"
        assert player.mvp_count == 2
        assert player.role == "normal"
        assert player.is_on_holidays is False
        assert alliance.is_blacklisted is False

    async def test_partially_patched_store(self, engine):
        await self._create_legacy_tables(engine)
        async with engine.begin() as conn:
            await conn.execute(text("ALTER TABLE players ADD COLUMN description TEXT"))

        applied = await provision_tenant_schema(engine)

        assert "players.description" not in applied
        assert "players.role" in applied
        assert await provision_tenant_schema(engine) == []
