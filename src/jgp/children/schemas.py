"""Request/response schemas for child profiles."""

from __future__ import annotations

from datetime import date, datetime
from typing import Any

from pydantic import Field

from jgp.db.models import AgeBand, SkillLevel
from jgp.schemas import CamelModel


class CreateChildRequest(CamelModel):
    name: str = Field(..., min_length=1, max_length=50)
    age_band: AgeBand
    skill_level: SkillLevel = SkillLevel.BEGINNER
    avatar_state: dict[str, Any] | None = None


class UpdateChildRequest(CamelModel):
    name: str | None = Field(None, min_length=1, max_length=50)
    age_band: AgeBand | None = None
    skill_level: SkillLevel | None = None


class ChildOut(CamelModel):
    id: str
    name: str
    age_band: str
    skill_level: str
    total_stars: int
    available_stars: int
    avatar_state: dict[str, Any]
    created_at: datetime
    updated_at: datetime | None = None


class StreakSummary(CamelModel):
    current_streak: int
    longest_streak: int
    weekly_session_count: int
    week_start_date: date
    last_session_date: date | None = None


class RecentSession(CamelModel):
    id: str
    status: str
    total_stars_earned: int
    started_at: datetime
    completed_at: datetime | None = None


class ChildDetailOut(ChildOut):
    """Child with streak, the five newest sessions and a session count."""

    streak: StreakSummary | None = None
    recent_sessions: list[RecentSession] = []
    total_sessions: int = 0
