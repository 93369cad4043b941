"""Tenant schema provisioning.

Creates the tenant tables and then patches in columns that older stores
were created without. Safe to run on every store open: tables are created
only when missing, and each column patch is skipped when introspection shows
the column is already there.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog
from sqlalchemy import inspect, text

from kingdom.db import tenant_models  # noqa: F401  (registers tenant tables)
from kingdom.db.base import TenantBase

if TYPE_CHECKING:
    from sqlalchemy.engine import Connection
    from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine

logger = structlog.get_logger()

# (table, column, column DDL) in the order they were introduced.
ADDITIVE_COLUMNS: tuple[tuple[str, str, str], ...] = (
    ("alliances", "description", "TEXT"),
    ("alliances", "is_blacklisted", "INTEGER DEFAULT 0"),
    ("players", "description", "TEXT"),
    ("players", "role", "TEXT DEFAULT 'normal'"),
    ("players", "is_on_holidays", "INTEGER DEFAULT 0"),
)


def _existing_columns(sync_conn: Connection) -> dict[str, set[str]]:
    inspector = inspect(sync_conn)
    tables = {table for table, _column, _ddl in ADDITIVE_COLUMNS}
    return {table: {col["name"] for col in inspector.get_columns(table)} for table in tables}


async def apply_column_patches(conn: AsyncConnection) -> list[str]:
    """Add each missing column from ADDITIVE_COLUMNS. Returns the patches applied."""
    existing = await conn.run_sync(_existing_columns)
    applied: list[str] = []
    for table, column, ddl in ADDITIVE_COLUMNS:
        if column in existing[table]:
            continue
        await conn.execute(text(f"ALTER TABLE {table} ADD COLUMN {column} {ddl}"))
        existing[table].add(column)
        applied.append(f"{table}.{column}")
    return applied


async def provision_tenant_schema(engine: AsyncEngine) -> list[str]:
    """Ensure a tenant store has every table and column.

    Base tables are created first in their own transaction, since the column
    patches introspect them.

    Returns:
        The ``table.column`` patches applied (empty when already current).
    """
    async with engine.begin() as conn:
        await conn.run_sync(TenantBase.metadata.create_all)

    async with engine.begin() as conn:
        applied = await apply_column_patches(conn)

    if applied:
        logger.info("tenant_schema_patched", database=str(engine.url.database), columns=applied)
    return applied
