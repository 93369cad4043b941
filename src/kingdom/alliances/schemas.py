"""Request/response schemas for alliance endpoints."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from pydantic import BaseModel, Field

if TYPE_CHECKING:
    from kingdom.db.tenant_models import Alliance


class AllianceRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=256)
    description: str | None = Field(None, max_length=2000)


class BlacklistRequest(BaseModel):
    is_blacklisted: bool


class AllianceResponse(BaseModel):
    id: int
    name: str
    description: str = ""
    is_blacklisted: bool = False
    created_at: datetime | None = None

    @classmethod
    def from_model(cls, alliance: Alliance) -> AllianceResponse:
        return cls(
            id=alliance.id,
            name=alliance.name,
            description=alliance.description or "",
            is_blacklisted=bool(alliance.is_blacklisted),
            created_at=alliance.created_at,
        )


class AllianceAssignmentResponse(AllianceResponse):
    """An alliance row annotated with one of its event assignments."""

    event_name: str | None = None
    assigned_at: datetime | None = None


class AllianceListResponse(BaseModel):
    alliances: list[AllianceAssignmentResponse]
