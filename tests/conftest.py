"""Shared test fixtures.

Every test gets a fresh in-memory SQLite database built from the ORM
metadata, and an app wired to it with Redis disabled.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator

import pytest
import pytest_asyncio
from helpers import auth_headers, create_user
from httpx import ASGITransport, AsyncClient
from sqlalchemy.pool import StaticPool

from inkwell.community.categories import ensure_defaults
from inkwell.config import Settings
from inkwell.database import Database
from inkwell.db.models import User
from inkwell.main import create_app


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        database_url="sqlite+aiosqlite://",
        redis_url="",
        log_format="console",
        log_level="WARNING",
        jwt_secret="test-secret-key-with-enough-length-for-hs256",
        seed_categories_on_startup=False,
    )


@pytest_asyncio.fixture
async def database(settings: Settings) -> AsyncGenerator[Database, None]:
    db = Database(
        settings.database_url,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    await db.create_all()
    async with db.session_factory() as session:
        await ensure_defaults(session)
        await session.commit()
    yield db
    await db.dispose()


@pytest_asyncio.fixture
async def client(settings: Settings, database: Database) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client against an app bound to the test database."""
    app = create_app(settings, database)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest_asyncio.fixture
async def alice(database: Database) -> User:
    return await create_user(database, "Alice")


@pytest_asyncio.fixture
async def bob(database: Database) -> User:
    return await create_user(database, "Bob")


@pytest_asyncio.fixture
async def moderator(database: Database) -> User:
    return await create_user(database, "Mod Mary", role="moderator")


@pytest.fixture
def alice_headers(settings: Settings, alice: User) -> dict[str, str]:
    return auth_headers(settings, alice)


@pytest.fixture
def bob_headers(settings: Settings, bob: User) -> dict[str, str]:
    return auth_headers(settings, bob)


@pytest.fixture
def mod_headers(settings: Settings, moderator: User) -> dict[str, str]:
    return auth_headers(settings, moderator)
