"""FastAPI application factory."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from inkwell.community.categories import ensure_defaults
from inkwell.community.moderation_router import router as moderation_router
from inkwell.community.router import router as community_router
from inkwell.config import Settings, get_settings
from inkwell.database import Database
from inkwell.health.router import router as health_router
from inkwell.middleware import setup_middleware
from inkwell.redis_client import close_redis, create_redis

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup and shutdown lifecycle."""
    settings: Settings = app.state.settings
    database: Database = app.state.database

    # Seed the default category catalog (idempotent)
    if settings.seed_categories_on_startup:
        try:
            async with database.session_factory() as db:
                await ensure_defaults(db)
                await db.commit()
        except Exception:
            logger.warning("Category seeding failed (tables may not exist yet)", exc_info=True)

    yield

    await database.dispose()
    await close_redis(app.state.redis)


def create_app(settings: Settings | None = None, database: Database | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    ``settings`` and ``database`` default to the environment configuration;
    tests pass their own to run against SQLite.
    """
    settings = settings or get_settings()

    app = FastAPI(
        title="Inkwell Community API",
        description="Discussion forum backend for the Inkwell newsletter platform",
        version=settings.app_version,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.database = database or Database.from_settings(settings)
    app.state.redis = create_redis(settings.redis_url)

    setup_middleware(app, settings)
    app.include_router(health_router, tags=["Health"])
    app.include_router(community_router)
    app.include_router(moderation_router)

    return app


app = create_app()
