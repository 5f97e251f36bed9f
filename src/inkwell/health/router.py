"""Liveness, readiness, and version endpoints."""

from fastapi import APIRouter, Depends
from redis.asyncio import Redis
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from inkwell.config import Settings
from inkwell.db.models import Category
from inkwell.dependencies import get_app_settings, get_db, get_redis

router = APIRouter()

_HEALTHY = ("ok", "disabled")


@router.get("/health")
async def health() -> dict[str, str]:
    """Liveness check. Returns 200 while the process is alive."""
    return {"status": "healthy"}


@router.get("/ready")
async def readiness(
    db: AsyncSession = Depends(get_db),  # noqa: B008
    redis: Redis | None = Depends(get_redis),  # noqa: B008
) -> dict[str, object]:
    """Readiness check.

    ``database`` and ``catalog`` come from one query against the category
    table: it fails when the schema is missing and is empty until the
    default categories are seeded. Redis is ``disabled`` when not configured.
    """
    checks: dict[str, str] = {}

    try:
        result = await db.execute(select(func.count()).select_from(Category))
        seeded = result.scalar_one()
        checks["database"] = "ok"
        checks["catalog"] = "ok" if seeded else "empty"
    except Exception as exc:  # noqa: BLE001
        checks["database"] = f"error: {exc}"
        checks["catalog"] = "unknown"

    if redis is None:
        checks["redis"] = "disabled"
    else:
        try:
            await redis.ping()
            checks["redis"] = "ok"
        except Exception as exc:  # noqa: BLE001
            checks["redis"] = f"error: {exc}"

    ready = all(v in _HEALTHY for v in checks.values())
    return {"status": "ready" if ready else "degraded", "checks": checks}


@router.get("/version")
async def version(settings: Settings = Depends(get_app_settings)) -> dict[str, str]:  # noqa: B008
    return {
        "version": settings.app_version,
        "environment": settings.environment,
    }
