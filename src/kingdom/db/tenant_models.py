"""ORM models for a per-user tenant store.

``is_mvp`` is deliberately absent from Player: it is derived at read time by
joining against ``events.mvp_player_id``.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column

from kingdom.db.base import TenantBase

PLAYER_ROLES = ("leader", "co-leader", "elite", "normal")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Player(TenantBase):
    """A warrior of the kingdom."""

    __tablename__ = "players"
    # AUTOINCREMENT keeps ids in sqlite_sequence, which the sequencing guard repairs.
    __table_args__ = {"sqlite_autoincrement": True}  # noqa: RUF012

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    role: Mapped[str] = mapped_column(String(16), default="normal", server_default="normal")
    is_on_holidays: Mapped[bool] = mapped_column(Boolean, default=False, server_default="0")
    mvp_count: Mapped[int] = mapped_column(Integer, default=0, server_default="0")
    last_mvp_date: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=_utcnow, server_default=func.current_timestamp()
    )


class Event(TenantBase):
    """A battle. Holds at most one current MVP."""

    __tablename__ = "events"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    # No referential action: deleting a player leaves this pointing at nothing.
    mvp_player_id: Mapped[int | None] = mapped_column(Integer, ForeignKey("players.id"), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=_utcnow, server_default=func.current_timestamp()
    )


class Alliance(TenantBase):
    """Another kingdom's alliance, possibly blacklisted."""

    __tablename__ = "alliances"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_blacklisted: Mapped[bool] = mapped_column(Boolean, default=False, server_default="0")
    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=_utcnow, server_default=func.current_timestamp()
    )


class EventAlliance(TenantBase):
    """Junction between events and alliances."""

    __tablename__ = "event_alliances"
    __table_args__ = (UniqueConstraint("event_id", "alliance_id", name="uq_event_alliance"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    event_id: Mapped[int] = mapped_column(Integer, ForeignKey("events.id"), nullable=False)
    alliance_id: Mapped[int] = mapped_column(Integer, ForeignKey("alliances.id"), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=_utcnow, server_default=func.current_timestamp()
    )
