"""Authentication router: all /api/auth/* endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from kingdom.auth.dependencies import get_current_user, require_admin
from kingdom.auth.jwt import create_access_token
from kingdom.auth.schemas import (
    AdminUserResponse,
    LoginRequest,
    RegisterRequest,
    RegisterResponse,
    TokenResponse,
    UserListResponse,
    UserResponse,
    UserUpdateRequest,
)
from kingdom.auth.service import (
    authenticate_user,
    delete_user,
    list_users,
    register_user,
    update_user,
)
from kingdom.config import get_settings
from kingdom.db.models import User
from kingdom.dependencies import get_registry, get_session
from kingdom.tenancy.registry import TenantRegistry

router = APIRouter(prefix="/api/auth", tags=["Authentication"])


def _user_response(user: User) -> UserResponse:
    """Build a UserResponse from a User model."""
    return UserResponse(
        id=user.id,
        username=user.username,
        is_admin=user.is_admin,
        created_at=user.created_at,
    )


# ---------------------------------------------------------------------------
# Session
# ---------------------------------------------------------------------------


@router.post("/login", response_model=TokenResponse)
async def login(
    body: LoginRequest,
    db: AsyncSession = Depends(get_session),
) -> TokenResponse:
    """Exchange username + password for an access token."""
    user = await authenticate_user(db, body.username, body.password)
    if user is None:
        raise HTTPException(status_code=401, detail="Invalid credentials")

    settings = get_settings()
    return TokenResponse(
        access_token=create_access_token(user.id, user.username, user.is_admin),
        expires_in=settings.jwt_access_token_expire_minutes * 60,
        user=_user_response(user),
    )


@router.get("/me", response_model=UserResponse)
async def me(user: User = Depends(get_current_user)) -> UserResponse:
    """Current user info."""
    return _user_response(user)


# ---------------------------------------------------------------------------
# Administration
# ---------------------------------------------------------------------------


@router.post("/register", response_model=RegisterResponse, status_code=201)
async def register(
    body: RegisterRequest,
    _admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_session),
    registry: TenantRegistry = Depends(get_registry),
) -> RegisterResponse:
    """Create a user and provision their kingdom database."""
    user, database_name = await register_user(db, registry, body.username, body.password)
    return RegisterResponse(user=_user_response(user), database_name=database_name)


@router.get("/users", response_model=UserListResponse)
async def get_users(
    _admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_session),
) -> UserListResponse:
    """List every user with their database name."""
    rows = await list_users(db)
    return UserListResponse(
        users=[
            AdminUserResponse(
                id=user.id,
                username=user.username,
                is_admin=user.is_admin,
                created_at=user.created_at,
                database_name=database_name,
            )
            for user, database_name in rows
        ]
    )


@router.put("/users/{user_id}", response_model=UserResponse)
async def put_user(
    user_id: int,
    body: UserUpdateRequest,
    _admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_session),
) -> UserResponse:
    """Rename a user, change their admin flag or reset their password."""
    user = await update_user(db, user_id, body.username, password=body.password, is_admin=body.is_admin)
    return _user_response(user)


@router.delete("/users/{user_id}")
async def remove_user(
    user_id: int,
    _admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_session),
    registry: TenantRegistry = Depends(get_registry),
) -> dict[str, str]:
    """Delete a non-admin user. Their kingdom data file is kept on disk."""
    await delete_user(db, registry, user_id)
    return {"status": "user_deleted"}
