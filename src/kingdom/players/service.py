"""Player and MVP business logic.

Rules:
- A player is MVP iff at least one event's mvp_player_id points at it. This is
  joined at read time and never stored on the player.
- mvp_count counts crownings ever. Reassigning an event to another player
  never decrements the previous MVP's count.
- mvp_count and last_mvp_date change only through assign_mvp and
  reset_rotation, never through profile edits.
- Deleting a player leaves events pointing at its id; reads skip it.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import TYPE_CHECKING

import structlog
from sqlalchemy import delete, select, update

from kingdom.db.tenant_models import PLAYER_ROLES, Event, Player
from kingdom.exceptions import NotFoundError, ValidationError
from kingdom.players.sequencing import insert_player

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger()


@dataclass
class PlayerStanding:
    """A player with MVP status derived from events."""

    player: Player
    is_mvp: bool
    mvp_event: str | None


@dataclass
class RotationStatus:
    players: list[Player]
    total_players: int
    players_with_mvp: int
    needs_reset: bool
    next_mvp: Player | None


@dataclass
class MvpHistoryEntry:
    event_name: str
    assigned_date: datetime | None


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------


async def get_player(db: AsyncSession, player_id: int) -> Player | None:
    """Fetch a player by ID."""
    result = await db.execute(select(Player).where(Player.id == player_id))
    return result.scalar_one_or_none()


async def list_players_with_mvp_status(db: AsyncSession) -> list[PlayerStanding]:
    """List players newest first, each with is_mvp and one MVP event name.

    A player crowned on several events appears once; the first matching
    event (lowest id) is reported.
    """
    result = await db.execute(
        select(Player, Event.name)
        .outerjoin(Event, Event.mvp_player_id == Player.id)
        .order_by(Player.created_at.desc(), Player.id.desc(), Event.id.asc())
    )

    standings: dict[int, PlayerStanding] = {}
    for player, event_name in result.all():
        if player.id in standings:
            continue
        standings[player.id] = PlayerStanding(
            player=player,
            is_mvp=event_name is not None,
            mvp_event=event_name,
        )
    return list(standings.values())


async def get_mvp_history(db: AsyncSession, player_id: int) -> list[MvpHistoryEntry]:
    """Events currently crowned with this player, newest first.

    Only current links are visible: an event later reassigned to someone
    else no longer appears here.
    """
    result = await db.execute(
        select(Event.name, Event.created_at)
        .where(Event.mvp_player_id == player_id)
        .order_by(Event.created_at.desc(), Event.id.desc())
    )
    return [MvpHistoryEntry(event_name=name, assigned_date=created_at) for name, created_at in result.all()]


async def get_rotation_status(db: AsyncSession) -> RotationStatus:
    """Rank players by who is most due for MVP.

    Fewest crownings first, then the longest since the last one (never
    crowned sorts first). needs_reset is set once every player has been
    crowned at least once.
    """
    result = await db.execute(
        select(Player).order_by(Player.mvp_count.asc(), Player.last_mvp_date.asc(), Player.id.asc())
    )
    players = list(result.scalars().all())
    crowned = sum(1 for p in players if p.mvp_count > 0)
    return RotationStatus(
        players=players,
        total_players=len(players),
        players_with_mvp=crowned,
        needs_reset=bool(players) and crowned == len(players),
        next_mvp=players[0] if players else None,
    )


# ---------------------------------------------------------------------------
# Profile mutations
# ---------------------------------------------------------------------------


async def create_player(db: AsyncSession, name: str) -> Player:
    """Create a player with a fresh id.

    Raises:
        ValidationError: If the name is blank.
    """
    if not name or not name.strip():
        msg = "Player name is required"
        raise ValidationError(msg)

    player = await insert_player(db, name)
    await db.commit()
    logger.info("player_created", player_id=player.id, name=name)
    return player


async def update_player(
    db: AsyncSession,
    player_id: int,
    name: str,
    description: str | None = None,
    role: str | None = None,
    is_on_holidays: bool = False,
) -> Player:
    """Update a player's profile. MVP counters are left untouched.

    Raises:
        ValidationError: If the name is blank or the role unknown.
        NotFoundError: If the player does not exist.
    """
    if not name or not name.strip():
        msg = "Player name is required"
        raise ValidationError(msg)
    role = role or "normal"
    if role not in PLAYER_ROLES:
        msg = f"Invalid role: {role}"
        raise ValidationError(msg)

    player = await get_player(db, player_id)
    if player is None:
        msg = "Player not found"
        raise NotFoundError(msg)

    player.name = name
    player.description = description or ""
    player.role = role
    player.is_on_holidays = bool(is_on_holidays)
    await db.commit()
    return player


async def delete_player(db: AsyncSession, player_id: int) -> None:
    """Delete a player. Events crowned with it keep the dangling id.

    Raises:
        NotFoundError: If the player does not exist.
    """
    result = await db.execute(delete(Player).where(Player.id == player_id))
    if result.rowcount == 0:
        await db.rollback()
        msg = "Player not found"
        raise NotFoundError(msg)
    await db.commit()
    logger.info("player_deleted", player_id=player_id)


# ---------------------------------------------------------------------------
# MVP mutations
# ---------------------------------------------------------------------------


async def assign_mvp(db: AsyncSession, player_id: int, event_id: int | None = None) -> Player:
    """Crown a player, optionally as the MVP of an event.

    The counter bump and the event link commit together. Any previous MVP of
    the event is replaced and keeps its count. An unknown event id links
    nothing, but the player is still crowned.

    Raises:
        NotFoundError: If the player does not exist.
    """
    player = await get_player(db, player_id)
    if player is None:
        msg = "Player not found"
        raise NotFoundError(msg)

    await db.execute(
        update(Player)
        .where(Player.id == player_id)
        .values(mvp_count=Player.mvp_count + 1, last_mvp_date=datetime.now(timezone.utc))
    )

    if event_id is not None:
        result = await db.execute(update(Event).where(Event.id == event_id).values(mvp_player_id=player_id))
        if result.rowcount == 0:
            logger.warning("mvp_event_missing", player_id=player_id, event_id=event_id)

    await db.commit()
    await db.refresh(player)
    logger.info("mvp_assigned", player_id=player_id, event_id=event_id, mvp_count=player.mvp_count)
    return player


async def reset_rotation(db: AsyncSession) -> int:
    """Clear every player's MVP counter and date. Returns the rows touched."""
    result = await db.execute(update(Player).values(mvp_count=0, last_mvp_date=None))
    await db.commit()
    logger.info("mvp_rotation_reset", players=result.rowcount)
    return result.rowcount
