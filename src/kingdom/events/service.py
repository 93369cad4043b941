"""Event business logic, including the event/alliance junction."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog
from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError

from kingdom.db.tenant_models import Alliance, Event, EventAlliance, Player
from kingdom.exceptions import ConflictError, NotFoundError

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger()


async def get_event(db: AsyncSession, event_id: int) -> Event | None:
    result = await db.execute(select(Event).where(Event.id == event_id))
    return result.scalar_one_or_none()


async def list_events(db: AsyncSession, limit: int | None = None) -> list[tuple[Event, str | None]]:
    """Events newest first, each with its MVP player's name (None if unset or deleted)."""
    stmt = (
        select(Event, Player.name)
        .outerjoin(Player, Event.mvp_player_id == Player.id)
        .order_by(Event.created_at.desc(), Event.id.desc())
    )
    if limit is not None:
        stmt = stmt.limit(limit)
    result = await db.execute(stmt)
    return [(event, player_name) for event, player_name in result.all()]


async def create_event(db: AsyncSession, name: str, mvp_player_id: int | None = None) -> Event:
    """Create an event. Setting mvp_player_id here links without crowning (no counter bump)."""
    event = Event(name=name, mvp_player_id=mvp_player_id or None)
    db.add(event)
    await db.commit()
    logger.info("event_created", event_id=event.id, name=name)
    return event


async def update_event(db: AsyncSession, event_id: int, name: str, mvp_player_id: int | None = None) -> None:
    """Rename an event and set or clear its MVP link.

    Raises:
        NotFoundError: If the event does not exist.
    """
    result = await db.execute(
        update(Event).where(Event.id == event_id).values(name=name, mvp_player_id=mvp_player_id or None)
    )
    if result.rowcount == 0:
        await db.rollback()
        msg = "Event not found"
        raise NotFoundError(msg)
    await db.commit()


async def delete_event(db: AsyncSession, event_id: int) -> None:
    """Delete an event and its alliance links in one transaction.

    Raises:
        NotFoundError: If the event does not exist.
    """
    await db.execute(delete(EventAlliance).where(EventAlliance.event_id == event_id))
    result = await db.execute(delete(Event).where(Event.id == event_id))
    if result.rowcount == 0:
        await db.rollback()
        msg = "Event not found"
        raise NotFoundError(msg)
    await db.commit()
    logger.info("event_deleted", event_id=event_id)


# ---------------------------------------------------------------------------
# Alliances of an event
# ---------------------------------------------------------------------------


async def list_event_alliances(db: AsyncSession, event_id: int) -> list[Alliance]:
    result = await db.execute(
        select(Alliance)
        .join(EventAlliance, EventAlliance.alliance_id == Alliance.id)
        .where(EventAlliance.event_id == event_id)
        .order_by(EventAlliance.created_at.asc(), EventAlliance.id.asc())
    )
    return list(result.scalars().all())


async def link_alliance(db: AsyncSession, event_id: int, alliance_id: int) -> EventAlliance:
    """Attach an alliance to an event.

    Raises:
        NotFoundError: If the event or alliance does not exist.
        ConflictError: If the alliance is already attached.
    """
    if await get_event(db, event_id) is None:
        msg = "Event not found"
        raise NotFoundError(msg)
    alliance = (await db.execute(select(Alliance.id).where(Alliance.id == alliance_id))).scalar_one_or_none()
    if alliance is None:
        msg = "Alliance not found"
        raise NotFoundError(msg)

    existing = await db.execute(
        select(EventAlliance.id)
        .where(EventAlliance.event_id == event_id)
        .where(EventAlliance.alliance_id == alliance_id)
    )
    if existing.scalar_one_or_none() is not None:
        msg = "Alliance already assigned to this event"
        raise ConflictError(msg)

    link = EventAlliance(event_id=event_id, alliance_id=alliance_id)
    db.add(link)
    try:
        await db.commit()
    except IntegrityError as e:
        # Lost a race with a concurrent link of the same pair.
        await db.rollback()
        msg = "Alliance already assigned to this event"
        raise ConflictError(msg) from e
    logger.info("alliance_linked", event_id=event_id, alliance_id=alliance_id)
    return link


async def unlink_alliance(db: AsyncSession, event_id: int, alliance_id: int) -> None:
    """
    Raises:
        NotFoundError: If the alliance is not attached to the event.
    """
    result = await db.execute(
        delete(EventAlliance)
        .where(EventAlliance.event_id == event_id)
        .where(EventAlliance.alliance_id == alliance_id)
    )
    if result.rowcount == 0:
        await db.rollback()
        msg = "Alliance not found in this event"
        raise NotFoundError(msg)
    await db.commit()
