"""Tests for health, readiness, and version endpoints."""

import pytest
from httpx import AsyncClient
from sqlalchemy import delete

from inkwell.db.models import Category


@pytest.mark.asyncio
async def test_health(client: AsyncClient) -> None:
    """Liveness check always reports healthy."""
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}


@pytest.mark.asyncio
async def test_ready_without_redis(client: AsyncClient) -> None:
    """Readiness passes with Redis disabled."""
    response = await client.get("/ready")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ready"
    assert data["checks"] == {"database": "ok", "catalog": "ok", "redis": "disabled"}


@pytest.mark.asyncio
async def test_version(client: AsyncClient, settings) -> None:
    """Version endpoint echoes settings."""
    response = await client.get("/version")
    assert response.json() == {"version": settings.app_version, "environment": settings.environment}


@pytest.mark.asyncio
async def test_ready_degraded_without_catalog(client: AsyncClient, database) -> None:
    """An unseeded catalog makes readiness degraded."""
    async with database.session_factory() as session:
        await session.execute(delete(Category))
        await session.commit()

    data = (await client.get("/ready")).json()
    assert data["status"] == "degraded"
    assert data["checks"]["catalog"] == "empty"
