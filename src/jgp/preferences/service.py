"""Per-user preferences, merged with the streak goal kept on the parent profile."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import structlog

from jgp.db.models import Parent, UserSettings
from jgp.preferences.schemas import SettingsOut
from jgp.progress.streak_service import streak_goal_name

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger()

DEFAULTS: dict[str, Any] = {
    "notifications_enabled": True,
    "daily_reminder_time": None,
    "sound_enabled": True,
    "theme": "light",
    "language": "en",
}


async def _get_or_create(db: AsyncSession, user_id: str) -> UserSettings:
    settings = await db.get(UserSettings, user_id)
    if settings is None:
        settings = UserSettings(user_id=user_id, **DEFAULTS)
        db.add(settings)
        await db.flush()
    return settings


def _view(settings: UserSettings, parent: Parent | None) -> SettingsOut:
    return SettingsOut(
        user_id=settings.user_id,
        notifications_enabled=settings.notifications_enabled,
        daily_reminder_time=settings.daily_reminder_time,
        sound_enabled=settings.sound_enabled,
        theme=settings.theme,
        language=settings.language,
        streak_goal=streak_goal_name(parent.settings if parent else None),
    )


async def get_settings(db: AsyncSession, user_id: str, parent: Parent | None) -> SettingsOut:
    """Settings for a user; defaults are stored on first read."""
    return _view(await _get_or_create(db, user_id), parent)


async def update_settings(
    db: AsyncSession, user_id: str, parent: Parent | None, changes: dict[str, Any]
) -> SettingsOut:
    """Apply a partial update. ``streak_goal`` goes to the parent's settings blob."""
    streak_goal = changes.pop("streak_goal", None)
    settings = await _get_or_create(db, user_id)
    for field, value in changes.items():
        setattr(settings, field, value)

    if streak_goal is not None and parent is not None:
        parent.settings = {**(parent.settings or {}), "streakGoal": streak_goal}

    await db.flush()
    logger.info("settings_updated", user_id=user_id, fields=sorted(changes) + (["streak_goal"] if streak_goal else []))
    return _view(settings, parent)
