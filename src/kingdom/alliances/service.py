"""Alliance business logic."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

import structlog
from sqlalchemy import delete, select, update

from kingdom.db.tenant_models import Alliance, Event, EventAlliance, Player
from kingdom.exceptions import NotFoundError

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger()


async def list_alliances(
    db: AsyncSession, limit: int | None = None
) -> list[tuple[Alliance, str | None, datetime | None]]:
    """Alliances newest first, one row per event assignment.

    An alliance linked to several events appears once per event; an
    unlinked alliance appears once with ``event_name`` and ``assigned_at``
    set to None.
    """
    stmt = (
        select(Alliance, Event.name, EventAlliance.created_at)
        .outerjoin(EventAlliance, EventAlliance.alliance_id == Alliance.id)
        .outerjoin(Event, Event.id == EventAlliance.event_id)
        .order_by(Alliance.created_at.desc(), Alliance.id.desc(), EventAlliance.id.asc())
    )
    if limit is not None:
        stmt = stmt.limit(limit)
    result = await db.execute(stmt)
    return [(alliance, event_name, assigned_at) for alliance, event_name, assigned_at in result.all()]


async def create_alliance(db: AsyncSession, name: str, description: str | None = None) -> Alliance:
    alliance = Alliance(name=name, description=description or "")
    db.add(alliance)
    await db.commit()
    logger.info("alliance_created", alliance_id=alliance.id, name=name)
    return alliance


async def update_alliance(db: AsyncSession, alliance_id: int, name: str, description: str | None = None) -> None:
    result = await db.execute(
        update(Alliance).where(Alliance.id == alliance_id).values(name=name, description=description or "")
    )
    if result.rowcount == 0:
        await db.rollback()
        msg = "Alliance not found"
        raise NotFoundError(msg)
    await db.commit()


async def set_blacklisted(db: AsyncSession, alliance_id: int, is_blacklisted: bool) -> None:
    """Flag or unflag an alliance as blacklisted.

    Raises:
        NotFoundError: If the alliance does not exist.
    """
    result = await db.execute(
        update(Alliance).where(Alliance.id == alliance_id).values(is_blacklisted=is_blacklisted)
    )
    if result.rowcount == 0:
        await db.rollback()
        msg = "Alliance not found"
        raise NotFoundError(msg)
    await db.commit()
    logger.info("alliance_blacklist_changed", alliance_id=alliance_id, is_blacklisted=is_blacklisted)


async def delete_alliance(db: AsyncSession, alliance_id: int) -> None:
    """Delete an alliance and its event links in one transaction."""
    await db.execute(delete(EventAlliance).where(EventAlliance.alliance_id == alliance_id))
    result = await db.execute(delete(Alliance).where(Alliance.id == alliance_id))
    if result.rowcount == 0:
        await db.rollback()
        msg = "Alliance not found"
        raise NotFoundError(msg)
    await db.commit()
    logger.info("alliance_deleted", alliance_id=alliance_id)


async def list_alliance_events(db: AsyncSession, alliance_id: int) -> list[tuple[Event, str | None]]:
    """Events the alliance is attached to, newest first, with MVP player names."""
    result = await db.execute(
        select(Event, Player.name)
        .join(EventAlliance, EventAlliance.event_id == Event.id)
        .outerjoin(Player, Event.mvp_player_id == Player.id)
        .where(EventAlliance.alliance_id == alliance_id)
        .order_by(Event.created_at.desc(), Event.id.desc())
    )
    return [(event, player_name) for event, player_name in result.all()]
