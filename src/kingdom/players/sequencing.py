"""Player id sequencing guard.

SQLite's AUTOINCREMENT keeps the last issued id in ``sqlite_sequence``. When
external tooling edits or empties the players table, that value can drift.
Before each insert the stored sequence is realigned with the table, and the
new row's id is read back from the row itself.

Every repair step is best-effort: failures are logged and never stop the
insert. A failed statement does not abort the surrounding SQLite
transaction, so the insert can proceed in the same session.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog
from sqlalchemy import func, insert, select, text
from sqlalchemy.exc import SQLAlchemyError

from kingdom.db.tenant_models import Player

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger()

_TABLE = Player.__tablename__


async def _store_sequence(db: AsyncSession, max_id: int) -> None:
    result = await db.execute(
        text("UPDATE sqlite_sequence SET seq = :seq WHERE name = :name"),
        {"seq": max_id, "name": _TABLE},
    )
    if result.rowcount == 0:
        await db.execute(
            text("INSERT INTO sqlite_sequence (name, seq) VALUES (:name, :seq)"),
            {"seq": max_id, "name": _TABLE},
        )


async def realign_player_sequence(db: AsyncSession) -> int | None:
    """Reset or realign the players sequence to the current max id.

    Returns:
        The max id observed, or None when the table is empty or could not be read.
    """
    try:
        max_id = (await db.execute(select(func.max(Player.id)))).scalar()
    except SQLAlchemyError as exc:
        logger.warning("player_max_id_failed", error=str(exc))
        return None

    try:
        if max_id is None:
            await db.execute(text("DELETE FROM sqlite_sequence WHERE name = :name"), {"name": _TABLE})
        else:
            await _store_sequence(db, max_id)
    except SQLAlchemyError as exc:
        logger.warning("player_sequence_repair_failed", max_id=max_id, error=str(exc))
    return max_id


async def insert_player(db: AsyncSession, name: str) -> Player:
    """Insert a player after realigning the id sequence, and return the stored row."""
    await realign_player_sequence(db)

    result = await db.execute(insert(Player.__table__).values(name=name))
    row_id = result.lastrowid

    player: Player | None = None
    try:
        player = (
            await db.execute(select(Player).where(text("players.rowid = :rowid").bindparams(rowid=row_id)))
        ).scalar_one_or_none()
    except SQLAlchemyError as exc:
        logger.warning("player_lookup_by_rowid_failed", rowid=row_id, error=str(exc))

    if player is None:
        # Fall back to the newest row with this name.
        player = (
            await db.execute(
                select(Player)
                .where(Player.name == name)
                .order_by(Player.created_at.desc(), Player.id.desc())
                .limit(1)
            )
        ).scalar_one()
    return player
