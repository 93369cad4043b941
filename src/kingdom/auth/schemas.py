"""Request/response schemas for authentication and user administration."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field, field_validator


class LoginRequest(BaseModel):
    """Login with username + password."""

    username: str = Field(..., min_length=1, max_length=64)
    password: str = Field(..., min_length=1, max_length=128)


class UserResponse(BaseModel):
    id: int
    username: str
    is_admin: bool
    created_at: datetime | None = None


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int
    user: UserResponse


class RegisterRequest(BaseModel):
    """Admin-only creation of a kingdom user."""

    username: str = Field(..., min_length=3, max_length=64)
    password: str = Field(..., min_length=1, max_length=128)

    @field_validator("username")
    @classmethod
    def strip_username(cls, v: str) -> str:
        v = v.strip()
        if len(v) < 3:
            msg = "Username must be at least 3 characters"
            raise ValueError(msg)
        return v


class RegisterResponse(BaseModel):
    user: UserResponse
    database_name: str


class UserUpdateRequest(BaseModel):
    username: str = Field(..., min_length=3, max_length=64)
    password: str | None = Field(None, max_length=128)
    is_admin: bool = False


class AdminUserResponse(UserResponse):
    database_name: str | None = None


class UserListResponse(BaseModel):
    users: list[AdminUserResponse]
