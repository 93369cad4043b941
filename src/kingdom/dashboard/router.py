"""Dashboard router."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from kingdom.alliances.schemas import AllianceAssignmentResponse
from kingdom.dashboard.schemas import DashboardResponse, DashboardStats, RecentActivity, RecentMvpResponse
from kingdom.dashboard.service import get_dashboard
from kingdom.events.schemas import EventResponse
from kingdom.tenancy.dependencies import get_tenant_session

router = APIRouter(prefix="/api/dashboard", tags=["Dashboard"])


@router.get("", response_model=DashboardResponse)
async def dashboard(
    db: AsyncSession = Depends(get_tenant_session),
) -> DashboardResponse:
    """Totals and the five most recent MVPs, events and alliances."""
    summary = await get_dashboard(db)
    return DashboardResponse(
        stats=DashboardStats(
            total_players=summary.total_players,
            total_events=summary.total_events,
            total_alliances=summary.total_alliances,
        ),
        recent_activity=RecentActivity(
            players=[
                RecentMvpResponse(
                    id=m.player.id,
                    name=m.player.name,
                    mvp_count=m.player.mvp_count or 0,
                    mvp_event=m.mvp_event,
                    mvp_assigned_date=m.mvp_assigned_date,
                )
                for m in summary.recent_mvps
            ],
            events=[
                EventResponse(
                    id=event.id,
                    name=event.name,
                    mvp_player_id=event.mvp_player_id,
                    mvp_player_name=player_name,
                    created_at=event.created_at,
                )
                for event, player_name in summary.recent_events
            ],
            alliances=[
                AllianceAssignmentResponse(
                    id=alliance.id,
                    name=alliance.name,
                    description=alliance.description or "",
                    is_blacklisted=bool(alliance.is_blacklisted),
                    created_at=alliance.created_at,
                    event_name=event_name,
                    assigned_at=assigned_at,
                )
                for alliance, event_name, assigned_at in summary.recent_alliances
            ],
        ),
    )
