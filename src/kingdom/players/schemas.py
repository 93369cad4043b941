"""Request/response schemas for player and MVP endpoints."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

PlayerRole = Literal["leader", "co-leader", "elite", "normal"]


class PlayerCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=128)


class PlayerUpdateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=128)
    description: str | None = Field(None, max_length=2000)
    role: PlayerRole = "normal"
    is_on_holidays: bool = False


class PlayerCreatedResponse(BaseModel):
    id: int
    name: str


class PlayerResponse(BaseModel):
    id: int
    name: str
    description: str = ""
    role: str = "normal"
    is_on_holidays: bool = False
    mvp_count: int = 0
    last_mvp_date: datetime | None = None
    created_at: datetime | None = None
    is_mvp: bool = False
    mvp_event: str | None = None


class PlayerListResponse(BaseModel):
    players: list[PlayerResponse]


class AssignMvpRequest(BaseModel):
    """Crown a player; ``event_id`` also makes them that event's MVP."""

    event_id: int | None = None


class MvpHistoryItem(BaseModel):
    event_name: str
    assigned_date: datetime | None


class MvpHistoryResponse(BaseModel):
    history: list[MvpHistoryItem]


class RotationPlayer(BaseModel):
    id: int
    name: str
    mvp_count: int
    last_mvp_date: datetime | None


class RotationResponse(BaseModel):
    players: list[RotationPlayer]
    total_players: int
    players_with_mvp: int
    needs_reset: bool
    next_mvp: RotationPlayer | None
