"""FastAPI application factory."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI

from kingdom.alliances.router import router as alliances_router
from kingdom.auth.router import router as auth_router
from kingdom.auth.service import ensure_admin_user
from kingdom.config import Settings, get_settings
from kingdom.dashboard.router import router as dashboard_router
from kingdom.events.router import router as events_router
from kingdom.feedback.router import router as feedback_router
from kingdom.health.router import router as health_router
from kingdom.middleware import setup_middleware
from kingdom.patch_notes.router import router as patch_notes_router
from kingdom.players.router import router as players_router
from kingdom.redis_client import connect_redis, disconnect_redis
from kingdom.tenancy.registry import TenantRegistry

logger = structlog.get_logger()


async def startup(app: FastAPI, settings: Settings | None = None) -> None:
    """Open the shared store, bootstrap the admin and connect Redis if configured."""
    settings = settings or get_settings()

    registry = TenantRegistry.from_settings(settings)
    await registry.init_shared()
    async with registry.shared_session() as db:
        await ensure_admin_user(db, settings.admin_username, settings.admin_password)
    app.state.registry = registry

    connect_redis(app, settings.redis_url)
    logger.info("app_started", data_dir=str(settings.data_path), rate_limit=bool(settings.redis_url))


async def shutdown(app: FastAPI) -> None:
    """Dispose every store engine and the Redis pool."""
    registry: TenantRegistry | None = getattr(app.state, "registry", None)
    if registry is not None:
        await registry.close()
        app.state.registry = None

    await disconnect_redis(app)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    await startup(app)
    yield
    await shutdown(app)


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="Kingdom Manager API",
        description="Per-user kingdom management: players, events, alliances and MVP rotation",
        version=settings.app_version,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )

    setup_middleware(app, settings)
    app.include_router(health_router, tags=["Health"])
    app.include_router(auth_router)
    app.include_router(players_router)
    app.include_router(events_router)
    app.include_router(alliances_router)
    app.include_router(dashboard_router)
    app.include_router(feedback_router)
    app.include_router(patch_notes_router)

    return app


app = create_app()
