"""Health, readiness, and version endpoints."""

from typing import Any

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from jgp.config import get_settings
from jgp.database import get_session
from jgp.redis_client import get_redis
from jgp.schemas import envelope

router = APIRouter()


@router.get("/health")
async def health() -> dict[str, Any]:
    """Liveness probe — returns 200 if the process is alive."""
    return envelope({"status": "healthy"})


@router.get("/ready")
async def readiness(
    db: AsyncSession = Depends(get_session),  # noqa: B008
) -> dict[str, Any]:
    """Readiness probe — checks database and Redis connectivity."""
    checks: dict[str, str] = {}

    try:
        await db.execute(text("SELECT 1"))
        checks["database"] = "ok"
    except Exception as exc:  # noqa: BLE001
        checks["database"] = f"error: {exc}"

    try:
        await get_redis().ping()
        checks["redis"] = "ok"
    except Exception as exc:  # noqa: BLE001
        checks["redis"] = f"error: {exc}"

    all_ok = all(v == "ok" for v in checks.values())
    return envelope({"status": "ready" if all_ok else "degraded", "checks": checks})


@router.get("/version")
async def version() -> dict[str, Any]:
    """Return API version and environment."""
    settings = get_settings()
    return envelope({"version": settings.app_version, "environment": settings.environment})
