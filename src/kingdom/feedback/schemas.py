"""Request/response schemas for feedback endpoints."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, EmailStr, Field

FeedbackType = Literal["general", "bug", "feature", "improvement"]
FeedbackStatus = Literal["new", "in_progress", "resolved", "closed"]


class FeedbackCreateRequest(BaseModel):
    """Public feedback submission, optionally noting a donation."""

    message: str = Field(..., min_length=1, max_length=5000)
    feedback_type: FeedbackType = "general"
    name: str | None = Field(None, min_length=2, max_length=128)
    email: EmailStr | None = None
    subject: str | None = Field(None, min_length=5, max_length=256)
    donation_amount: float | None = Field(None, ge=0)


class FeedbackStatusRequest(BaseModel):
    status: FeedbackStatus
    admin_notes: str | None = Field(None, min_length=5, max_length=5000)


class FeedbackResponse(BaseModel):
    id: int
    name: str | None = None
    email: str | None = None
    subject: str | None = None
    message: str
    feedback_type: str
    donation_amount: float | None = None
    status: str
    admin_notes: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class FeedbackListResponse(BaseModel):
    feedback: list[FeedbackResponse]


class FeedbackStatsResponse(BaseModel):
    total: int
    total_donations: float
    by_status: dict[str, int]
    by_type: dict[str, int]
