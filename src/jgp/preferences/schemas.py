"""User preference schemas."""

from __future__ import annotations

from typing import Literal

from pydantic import Field

from jgp.schemas import CamelModel

Theme = Literal["light", "dark", "system"]
Language = Literal["en", "es", "fr", "de"]
StreakGoal = Literal["DAILY", "FIVE_PER_WEEK", "THREE_PER_WEEK", "TWO_PER_WEEK"]

REMINDER_TIME_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"


class UpdateSettingsRequest(CamelModel):
    """Partial update; ``dailyReminderTime: null`` clears the reminder."""

    notifications_enabled: bool | None = None
    daily_reminder_time: str | None = Field(None, pattern=REMINDER_TIME_PATTERN)
    sound_enabled: bool | None = None
    theme: Theme | None = None
    language: Language | None = None
    streak_goal: StreakGoal | None = None


class SettingsOut(CamelModel):
    user_id: str
    notifications_enabled: bool
    daily_reminder_time: str | None = None
    sound_enabled: bool
    theme: str
    language: str
    streak_goal: str
