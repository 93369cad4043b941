"""Dashboard aggregation over a tenant store."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Any

from sqlalchemy import func, select

from kingdom.alliances.service import list_alliances
from kingdom.db.tenant_models import Alliance, Event, Player
from kingdom.events.service import list_events

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

RECENT_LIMIT = 5


@dataclass
class RecentMvp:
    player: Player
    mvp_event: str
    mvp_assigned_date: datetime | None


@dataclass
class DashboardSummary:
    total_players: int = 0
    total_events: int = 0
    total_alliances: int = 0
    recent_mvps: list[RecentMvp] = field(default_factory=list)
    recent_events: list[tuple[Event, str | None]] = field(default_factory=list)
    recent_alliances: list[tuple[Alliance, str | None, datetime | None]] = field(default_factory=list)


async def _count(db: AsyncSession, model: Any) -> int:
    result = await db.execute(select(func.count()).select_from(model))
    return int(result.scalar_one())


async def recent_mvps(db: AsyncSession, limit: int = RECENT_LIMIT) -> list[RecentMvp]:
    """The latest MVP links, newest event first."""
    result = await db.execute(
        select(Player, Event.name, Event.created_at)
        .join(Event, Event.mvp_player_id == Player.id)
        .order_by(Event.created_at.desc(), Event.id.desc())
        .limit(limit)
    )
    return [
        RecentMvp(player=player, mvp_event=event_name, mvp_assigned_date=assigned)
        for player, event_name, assigned in result.all()
    ]


async def get_dashboard(db: AsyncSession) -> DashboardSummary:
    return DashboardSummary(
        total_players=await _count(db, Player),
        total_events=await _count(db, Event),
        total_alliances=await _count(db, Alliance),
        recent_mvps=await recent_mvps(db),
        recent_events=await list_events(db, limit=RECENT_LIMIT),
        recent_alliances=await list_alliances(db, limit=RECENT_LIMIT),
    )
