"""Alliance router: /api/alliances/* endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from kingdom.alliances.schemas import (
    AllianceAssignmentResponse,
    AllianceListResponse,
    AllianceRequest,
    BlacklistRequest,
)
from kingdom.alliances.service import (
    create_alliance,
    delete_alliance,
    list_alliance_events,
    list_alliances,
    set_blacklisted,
    update_alliance,
)
from kingdom.events.schemas import EventListResponse, EventResponse
from kingdom.tenancy.dependencies import get_tenant_session

router = APIRouter(prefix="/api/alliances", tags=["Alliances"])


@router.get("", response_model=AllianceListResponse)
async def get_alliances(
    db: AsyncSession = Depends(get_tenant_session),
) -> AllianceListResponse:
    rows = await list_alliances(db)
    return AllianceListResponse(
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
            for alliance, event_name, assigned_at in rows
        ]
    )


@router.post("", status_code=201)
async def post_alliance(
    body: AllianceRequest,
    db: AsyncSession = Depends(get_tenant_session),
) -> dict[str, object]:
    alliance = await create_alliance(db, body.name, body.description)
    return {"id": alliance.id, "name": alliance.name}


@router.put("/{alliance_id}")
async def put_alliance(
    alliance_id: int,
    body: AllianceRequest,
    db: AsyncSession = Depends(get_tenant_session),
) -> dict[str, str]:
    await update_alliance(db, alliance_id, body.name, body.description)
    return {"status": "alliance_updated"}


@router.patch("/{alliance_id}/blacklist")
async def patch_blacklist(
    alliance_id: int,
    body: BlacklistRequest,
    db: AsyncSession = Depends(get_tenant_session),
) -> dict[str, object]:
    await set_blacklisted(db, alliance_id, body.is_blacklisted)
    return {"status": "alliance_blacklist_updated", "is_blacklisted": body.is_blacklisted}


@router.delete("/{alliance_id}")
async def remove_alliance(
    alliance_id: int,
    db: AsyncSession = Depends(get_tenant_session),
) -> dict[str, str]:
    """Delete an alliance along with its event links."""
    await delete_alliance(db, alliance_id)
    return {"status": "alliance_deleted"}


@router.get("/{alliance_id}/events", response_model=EventListResponse)
async def get_alliance_events(
    alliance_id: int,
    db: AsyncSession = Depends(get_tenant_session),
) -> EventListResponse:
    rows = await list_alliance_events(db, alliance_id)
    return EventListResponse(
        events=[
            EventResponse(
                id=event.id,
                name=event.name,
                mvp_player_id=event.mvp_player_id,
                mvp_player_name=player_name,
                created_at=event.created_at,
            )
            for event, player_name in rows
        ]
    )
