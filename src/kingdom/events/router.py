"""Event router: /api/events/* endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from kingdom.alliances.schemas import AllianceResponse
from kingdom.events.schemas import AllianceLinkRequest, EventListResponse, EventRequest, EventResponse
from kingdom.events.service import (
    create_event,
    delete_event,
    link_alliance,
    list_event_alliances,
    list_events,
    unlink_alliance,
    update_event,
)
from kingdom.tenancy.dependencies import get_tenant_session

router = APIRouter(prefix="/api/events", tags=["Events"])


@router.get("", response_model=EventListResponse)
async def get_events(
    db: AsyncSession = Depends(get_tenant_session),
) -> EventListResponse:
    rows = await list_events(db)
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


@router.post("", status_code=201)
async def post_event(
    body: EventRequest,
    db: AsyncSession = Depends(get_tenant_session),
) -> dict[str, object]:
    event = await create_event(db, body.name, body.mvp_player_id)
    return {"id": event.id, "name": event.name}


@router.put("/{event_id}")
async def put_event(
    event_id: int,
    body: EventRequest,
    db: AsyncSession = Depends(get_tenant_session),
) -> dict[str, str]:
    await update_event(db, event_id, body.name, body.mvp_player_id)
    return {"status": "event_updated"}


@router.delete("/{event_id}")
async def remove_event(
    event_id: int,
    db: AsyncSession = Depends(get_tenant_session),
) -> dict[str, str]:
    """Delete an event along with its alliance links."""
    await delete_event(db, event_id)
    return {"status": "event_deleted"}


# ---------------------------------------------------------------------------
# Alliances attached to an event
# ---------------------------------------------------------------------------


@router.get("/{event_id}/alliances", response_model=list[AllianceResponse])
async def get_event_alliances(
    event_id: int,
    db: AsyncSession = Depends(get_tenant_session),
) -> list[AllianceResponse]:
    alliances = await list_event_alliances(db, event_id)
    return [AllianceResponse.from_model(a) for a in alliances]


@router.post("/{event_id}/alliances", status_code=201)
async def post_event_alliance(
    event_id: int,
    body: AllianceLinkRequest,
    db: AsyncSession = Depends(get_tenant_session),
) -> dict[str, str]:
    await link_alliance(db, event_id, body.alliance_id)
    return {"status": "alliance_added"}


@router.delete("/{event_id}/alliances/{alliance_id}")
async def remove_event_alliance(
    event_id: int,
    alliance_id: int,
    db: AsyncSession = Depends(get_tenant_session),
) -> dict[str, str]:
    await unlink_alliance(db, event_id, alliance_id)
    return {"status": "alliance_removed"}
