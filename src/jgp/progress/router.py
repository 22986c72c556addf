"""Progress and streak endpoints — /api/v1/progress/*."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from jgp.auth.dependencies import get_current_parent
from jgp.auth.permissions import require_permission
from jgp.database import get_session
from jgp.db.models import Parent
from jgp.progress import service, streak_service
from jgp.schemas import envelope

router = APIRouter(prefix="/api/v1/progress", tags=["Progress"])


@router.get("/{child_id}", dependencies=[Depends(require_permission("children:read"))])
async def get_stats(
    child_id: str,
    parent: Parent = Depends(get_current_parent),
    db: AsyncSession = Depends(get_session),
) -> dict[str, Any]:
    return envelope({"stats": await service.get_stats(db, parent.id, child_id)})


@router.get("/{child_id}/streak", dependencies=[Depends(require_permission("children:read"))])
async def get_streak(
    child_id: str,
    parent: Parent = Depends(get_current_parent),
    db: AsyncSession = Depends(get_session),
) -> dict[str, Any]:
    streak = await streak_service.get_streak(db, parent, child_id)
    await db.commit()
    return envelope({"streak": streak})


@router.post("/{child_id}/streak", dependencies=[Depends(require_permission("children:write"))])
async def update_streak(
    child_id: str,
    parent: Parent = Depends(get_current_parent),
    db: AsyncSession = Depends(get_session),
) -> dict[str, Any]:
    """Count one completed session toward the child's weekly goal."""
    streak = await streak_service.update_streak(db, parent, child_id)
    await db.commit()
    return envelope({"streak": streak})
