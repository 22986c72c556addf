"""Drill catalogue schemas."""

from __future__ import annotations

from jgp.schemas import CamelModel


class DrillOut(CamelModel):
    id: str
    title: str
    age_band: str
    skill_category: str
    duration_minutes: int
    setup: str
    child_action: str
    parent_cue: str
    common_mistakes: str
    success_criteria: str
    image_url: str | None = None
    video_url: str | None = None
    is_premium: bool


class DrillListOut(CamelModel):
    drills: list[DrillOut]
    total: int
    limit: int
    offset: int
