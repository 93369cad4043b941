"""Request/response schemas for event endpoints."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class EventRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=256)
    mvp_player_id: int | None = None


class EventResponse(BaseModel):
    id: int
    name: str
    mvp_player_id: int | None = None
    mvp_player_name: str | None = None
    created_at: datetime | None = None


class EventListResponse(BaseModel):
    events: list[EventResponse]


class AllianceLinkRequest(BaseModel):
    alliance_id: int
