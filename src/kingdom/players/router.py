"""Player router: /api/players/* endpoints.

Static MVP routes are declared before the ``/{player_id}`` ones.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from kingdom.db.tenant_models import Player
from kingdom.players.schemas import (
    AssignMvpRequest,
    MvpHistoryItem,
    MvpHistoryResponse,
    PlayerCreatedResponse,
    PlayerCreateRequest,
    PlayerListResponse,
    PlayerResponse,
    PlayerUpdateRequest,
    RotationPlayer,
    RotationResponse,
)
from kingdom.players.service import (
    PlayerStanding,
    assign_mvp,
    create_player,
    delete_player,
    get_mvp_history,
    get_rotation_status,
    list_players_with_mvp_status,
    reset_rotation,
    update_player,
)
from kingdom.tenancy.dependencies import get_tenant_session

router = APIRouter(prefix="/api/players", tags=["Players"])


def _player_response(standing: PlayerStanding) -> PlayerResponse:
    p = standing.player
    return PlayerResponse(
        id=p.id,
        name=p.name,
        description=p.description or "",
        role=p.role or "normal",
        is_on_holidays=bool(p.is_on_holidays),
        mvp_count=p.mvp_count or 0,
        last_mvp_date=p.last_mvp_date,
        created_at=p.created_at,
        is_mvp=standing.is_mvp,
        mvp_event=standing.mvp_event,
    )


def _rotation_player(p: Player) -> RotationPlayer:
    return RotationPlayer(id=p.id, name=p.name, mvp_count=p.mvp_count or 0, last_mvp_date=p.last_mvp_date)


@router.get("", response_model=PlayerListResponse)
async def list_players(
    db: AsyncSession = Depends(get_tenant_session),
) -> PlayerListResponse:
    """All players with derived MVP status."""
    standings = await list_players_with_mvp_status(db)
    return PlayerListResponse(players=[_player_response(s) for s in standings])


@router.post("", response_model=PlayerCreatedResponse, status_code=201)
async def post_player(
    body: PlayerCreateRequest,
    db: AsyncSession = Depends(get_tenant_session),
) -> PlayerCreatedResponse:
    player = await create_player(db, body.name)
    return PlayerCreatedResponse(id=player.id, name=player.name)


# ---------------------------------------------------------------------------
# Rotation
# ---------------------------------------------------------------------------


@router.get("/mvp/rotation", response_model=RotationResponse)
async def rotation_status(
    db: AsyncSession = Depends(get_tenant_session),
) -> RotationResponse:
    """Players ordered by who is most due for MVP."""
    status = await get_rotation_status(db)
    return RotationResponse(
        players=[_rotation_player(p) for p in status.players],
        total_players=status.total_players,
        players_with_mvp=status.players_with_mvp,
        needs_reset=status.needs_reset,
        next_mvp=_rotation_player(status.next_mvp) if status.next_mvp else None,
    )


@router.post("/mvp/reset")
async def post_reset_rotation(
    db: AsyncSession = Depends(get_tenant_session),
) -> dict[str, str]:
    """Start a new MVP rotation."""
    await reset_rotation(db)
    return {"status": "mvp_rotation_reset"}


# ---------------------------------------------------------------------------
# Single player
# ---------------------------------------------------------------------------


@router.get("/{player_id}/mvp-history", response_model=MvpHistoryResponse)
async def mvp_history(
    player_id: int,
    db: AsyncSession = Depends(get_tenant_session),
) -> MvpHistoryResponse:
    entries = await get_mvp_history(db, player_id)
    return MvpHistoryResponse(
        history=[MvpHistoryItem(event_name=e.event_name, assigned_date=e.assigned_date) for e in entries]
    )


@router.post("/{player_id}/mvp")
async def post_mvp(
    player_id: int,
    body: AssignMvpRequest | None = None,
    db: AsyncSession = Depends(get_tenant_session),
) -> dict[str, object]:
    """Crown a player, optionally linking them as an event's MVP."""
    event_id = body.event_id if body else None
    player = await assign_mvp(db, player_id, event_id)
    return {"status": "mvp_assigned", "player_id": player.id, "mvp_count": player.mvp_count}


@router.put("/{player_id}")
async def put_player(
    player_id: int,
    body: PlayerUpdateRequest,
    db: AsyncSession = Depends(get_tenant_session),
) -> dict[str, str]:
    await update_player(
        db,
        player_id,
        name=body.name,
        description=body.description,
        role=body.role,
        is_on_holidays=body.is_on_holidays,
    )
    return {"status": "player_updated"}


@router.delete("/{player_id}")
async def remove_player(
    player_id: int,
    db: AsyncSession = Depends(get_tenant_session),
) -> dict[str, str]:
    await delete_player(db, player_id)
    return {"status": "player_deleted"}
