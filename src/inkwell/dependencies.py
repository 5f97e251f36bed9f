"""Shared FastAPI dependencies."""

from __future__ import annotations

from collections.abc import AsyncGenerator

from fastapi import Request
from redis.asyncio import Redis
from sqlalchemy.ext.asyncio import AsyncSession

from inkwell.config import Settings
from inkwell.database import Database


def get_database(request: Request) -> Database:
    """Return the Database attached to the running app."""
    database: Database | None = getattr(request.app.state, "database", None)
    if database is None:
        msg = "Database not configured on this application"
        raise RuntimeError(msg)
    return database


async def get_db(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """Yield an async database session (FastAPI dependency)."""
    async for session in get_database(request).session():
        yield session


def get_redis(request: Request) -> Redis | None:
    """Return the app's Redis client, if one is configured."""
    return getattr(request.app.state, "redis", None)


def get_app_settings(request: Request) -> Settings:
    """Return the settings the app was built with."""
    return request.app.state.settings
