"""User settings endpoints — /api/v1/settings."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from jgp.auth.permissions import require_permission
from jgp.database import get_session
from jgp.db.models import User
from jgp.preferences import service
from jgp.preferences.schemas import UpdateSettingsRequest
from jgp.schemas import envelope

router = APIRouter(prefix="/api/v1/settings", tags=["Settings"])


@router.get("")
async def get_settings(
    user: User = Depends(require_permission("settings:read")),
    db: AsyncSession = Depends(get_session),
) -> dict[str, Any]:
    settings = await service.get_settings(db, user.id, user.parent)
    await db.commit()
    return envelope({"settings": settings})


@router.patch("")
async def update_settings(
    body: UpdateSettingsRequest,
    user: User = Depends(require_permission("settings:write")),
    db: AsyncSession = Depends(get_session),
) -> dict[str, Any]:
    # explicit null only means something for the reminder time
    changes = {
        k: v for k, v in body.model_dump(exclude_unset=True).items() if v is not None or k == "daily_reminder_time"
    }
    settings = await service.update_settings(db, user.id, user.parent, changes)
    await db.commit()
    return envelope({"settings": settings})
