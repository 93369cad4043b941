"""Async SQLAlchemy engine and session helpers for SQLite stores."""

from __future__ import annotations

from pathlib import Path

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)


def sqlite_url(path: Path) -> str:
    """Build an aiosqlite URL for a database file."""
    return f"sqlite+aiosqlite:///{path}"


def create_store_engine(path: Path, busy_timeout: float = 30.0, echo: bool = False) -> AsyncEngine:
    """Create an async engine for one SQLite file, creating its directory if needed."""
    path.parent.mkdir(parents=True, exist_ok=True)
    return create_async_engine(
        sqlite_url(path),
        echo=echo,
        connect_args={"timeout": busy_timeout},
    )


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session factory bound to an engine."""
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )
