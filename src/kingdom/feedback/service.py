"""Feedback business logic (shared store)."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from typing import TYPE_CHECKING

import structlog
from sqlalchemy import case, delete, func, select, update

from kingdom.db.models import Feedback
from kingdom.exceptions import NotFoundError

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger()

FEEDBACK_TYPES = ("general", "bug", "feature", "improvement")
FEEDBACK_STATUSES = ("new", "in_progress", "resolved", "closed")


@dataclass
class FeedbackStats:
    total: int = 0
    total_donations: float = 0.0
    by_status: dict[str, int] = field(default_factory=dict)
    by_type: dict[str, int] = field(default_factory=dict)


async def submit_feedback(
    db: AsyncSession,
    message: str,
    feedback_type: str = "general",
    name: str | None = None,
    email: str | None = None,
    subject: str | None = None,
    donation_amount: float | None = None,
) -> Feedback:
    feedback = Feedback(
        name=name,
        email=email,
        subject=subject,
        message=message,
        feedback_type=feedback_type,
        donation_amount=Decimal(str(donation_amount)) if donation_amount is not None else None,
        status="new",
    )
    db.add(feedback)
    await db.commit()
    logger.info("feedback_submitted", feedback_id=feedback.id, feedback_type=feedback_type)
    return feedback


async def list_feedback(db: AsyncSession) -> list[Feedback]:
    result = await db.execute(select(Feedback).order_by(Feedback.created_at.desc(), Feedback.id.desc()))
    return list(result.scalars().all())


async def update_feedback_status(
    db: AsyncSession, feedback_id: int, status: str, admin_notes: str | None = None
) -> None:
    """Move feedback through triage.

    Raises:
        NotFoundError: If the feedback does not exist.
    """
    result = await db.execute(
        update(Feedback)
        .where(Feedback.id == feedback_id)
        .values(status=status, admin_notes=admin_notes, updated_at=datetime.now(timezone.utc))
    )
    if result.rowcount == 0:
        await db.rollback()
        msg = "Feedback not found"
        raise NotFoundError(msg)
    await db.commit()
    logger.info("feedback_status_changed", feedback_id=feedback_id, status=status)


async def delete_feedback(db: AsyncSession, feedback_id: int) -> None:
    result = await db.execute(delete(Feedback).where(Feedback.id == feedback_id))
    if result.rowcount == 0:
        await db.rollback()
        msg = "Feedback not found"
        raise NotFoundError(msg)
    await db.commit()


async def get_feedback_stats(db: AsyncSession) -> FeedbackStats:
    """Totals per status and per type, plus the sum of positive donations."""
    columns = [
        func.count(Feedback.id),
        func.coalesce(
            func.sum(case((Feedback.donation_amount > 0, Feedback.donation_amount), else_=0)),
            0,
        ),
    ]
    columns += [func.coalesce(func.sum(case((Feedback.status == s, 1), else_=0)), 0) for s in FEEDBACK_STATUSES]
    columns += [func.coalesce(func.sum(case((Feedback.feedback_type == t, 1), else_=0)), 0) for t in FEEDBACK_TYPES]

    row = (await db.execute(select(*columns))).one()
    total, donations = row[0], row[1]
    status_counts = row[2 : 2 + len(FEEDBACK_STATUSES)]
    type_counts = row[2 + len(FEEDBACK_STATUSES) :]

    return FeedbackStats(
        total=int(total or 0),
        total_donations=float(donations or 0),
        by_status={s: int(c) for s, c in zip(FEEDBACK_STATUSES, status_counts, strict=True)},
        by_type={t: int(c) for t, c in zip(FEEDBACK_TYPES, type_counts, strict=True)},
    )
