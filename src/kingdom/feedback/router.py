"""Feedback router: public submission plus admin triage."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from kingdom.auth.dependencies import require_admin
from kingdom.db.models import Feedback, User
from kingdom.dependencies import get_session
from kingdom.feedback.schemas import (
    FeedbackCreateRequest,
    FeedbackListResponse,
    FeedbackResponse,
    FeedbackStatsResponse,
    FeedbackStatusRequest,
)
from kingdom.feedback.service import (
    delete_feedback,
    get_feedback_stats,
    list_feedback,
    submit_feedback,
    update_feedback_status,
)

router = APIRouter(prefix="/api/feedback", tags=["Feedback"])


def _feedback_response(fb: Feedback) -> FeedbackResponse:
    return FeedbackResponse(
        id=fb.id,
        name=fb.name,
        email=fb.email,
        subject=fb.subject,
        message=fb.message,
        feedback_type=fb.feedback_type,
        donation_amount=float(fb.donation_amount) if fb.donation_amount is not None else None,
        status=fb.status,
        admin_notes=fb.admin_notes,
        created_at=fb.created_at,
        updated_at=fb.updated_at,
    )


@router.post("", status_code=201)
async def post_feedback(
    body: FeedbackCreateRequest,
    db: AsyncSession = Depends(get_session),
) -> dict[str, object]:
    """Submit feedback. No authentication required."""
    feedback = await submit_feedback(
        db,
        body.message,
        feedback_type=body.feedback_type,
        name=body.name,
        email=body.email,
        subject=body.subject,
        donation_amount=body.donation_amount,
    )
    return {"status": "feedback_submitted", "id": feedback.id}


@router.get("", response_model=FeedbackListResponse)
async def get_feedback(
    _admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_session),
) -> FeedbackListResponse:
    rows = await list_feedback(db)
    return FeedbackListResponse(feedback=[_feedback_response(fb) for fb in rows])


@router.get("/stats", response_model=FeedbackStatsResponse)
async def feedback_stats(
    _admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_session),
) -> FeedbackStatsResponse:
    stats = await get_feedback_stats(db)
    return FeedbackStatsResponse(
        total=stats.total,
        total_donations=stats.total_donations,
        by_status=stats.by_status,
        by_type=stats.by_type,
    )


@router.put("/{feedback_id}/status")
async def put_feedback_status(
    feedback_id: int,
    body: FeedbackStatusRequest,
    _admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_session),
) -> dict[str, str]:
    await update_feedback_status(db, feedback_id, body.status, body.admin_notes)
    return {"status": "feedback_updated"}


@router.delete("/{feedback_id}")
async def remove_feedback(
    feedback_id: int,
    _admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_session),
) -> dict[str, str]:
    await delete_feedback(db, feedback_id)
    return {"status": "feedback_deleted"}
