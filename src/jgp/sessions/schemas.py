"""Practice session schemas."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import Field

from jgp.schemas import CamelModel

DurationBucket = Literal["10", "15", "20"]


class GenerateSessionRequest(CamelModel):
    child_id: str = Field(..., min_length=1)
    duration_minutes: DurationBucket = "15"


class CompleteDrillRequest(CamelModel):
    """Accepted for client compatibility; the award is fixed server-side."""

    stars_earned: int | None = Field(None, ge=0, le=3)


class DrillBrief(CamelModel):
    id: str
    title: str
    skill_category: str
    duration_minutes: int


class SessionDrillOut(CamelModel):
    id: str
    order: int
    completed: bool
    stars_earned: int
    verified_at: datetime | None = None
    drill: DrillBrief


class SessionOut(CamelModel):
    id: str
    child_id: str
    status: str
    total_stars_earned: int
    started_at: datetime
    completed_at: datetime | None = None
    drills: list[SessionDrillOut]


class SessionListOut(CamelModel):
    sessions: list[SessionOut]
    total: int
    limit: int
    offset: int
