"""Response schemas for the dashboard endpoint."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel

from kingdom.alliances.schemas import AllianceAssignmentResponse
from kingdom.events.schemas import EventResponse


class DashboardStats(BaseModel):
    total_players: int
    total_events: int
    total_alliances: int


class RecentMvpResponse(BaseModel):
    id: int
    name: str
    mvp_count: int
    is_mvp: bool = True
    mvp_event: str
    mvp_assigned_date: datetime | None = None


class RecentActivity(BaseModel):
    players: list[RecentMvpResponse]
    events: list[EventResponse]
    alliances: list[AllianceAssignmentResponse]


class DashboardResponse(BaseModel):
    stats: DashboardStats
    recent_activity: RecentActivity
