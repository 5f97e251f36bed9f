"""Async SQLAlchemy engine and session management."""

from __future__ import annotations

from collections.abc import AsyncGenerator
from typing import Any

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from inkwell.config import Settings
from inkwell.db.base import Base


class Database:
    """Owns one engine and its session factory.

    Built by the application factory and kept on ``app.state``; handlers reach
    it through :func:`inkwell.dependencies.get_db`.
    """

    def __init__(self, url: str, **engine_kwargs: Any) -> None:  # noqa: ANN401
        self.url = url
        self.engine: AsyncEngine = create_async_engine(url, **engine_kwargs)
        self.session_factory: async_sessionmaker[AsyncSession] = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> Database:
        """Create a pooled Postgres database from settings."""
        kwargs: dict[str, Any] = {"pool_pre_ping": True, "echo": False}
        if settings.database_url.startswith("postgresql"):
            kwargs.update(
                pool_size=settings.db_pool_size,
                max_overflow=settings.db_max_overflow,
                connect_args={"statement_cache_size": 0},
            )
        return cls(settings.database_url, **kwargs)

    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """Yield an async database session."""
        async with self.session_factory() as session:
            yield session

    async def create_all(self) -> None:
        """Create every mapped table (tests and local development only)."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def dispose(self) -> None:
        """Dispose of the engine and its pool."""
        await self.engine.dispose()
