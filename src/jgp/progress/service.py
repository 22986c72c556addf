"""Child progress statistics."""

from __future__ import annotations

from collections import defaultdict
from typing import TYPE_CHECKING, Any

from sqlalchemy import select
from sqlalchemy.orm import selectinload

from jgp.children.service import get_owned_child
from jgp.db.models import PracticeSession, SessionStatus

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession


async def get_stats(db: AsyncSession, parent_id: str, child_id: str) -> dict[str, Any]:
    """
    Star and session totals for a child.

    ``skillProgress`` sums the stars of completed drills in completed
    sessions, keyed by the drill's skill category.
    """
    child = await get_owned_child(db, parent_id, child_id)
    result = await db.execute(
        select(PracticeSession)
        .where(PracticeSession.child_id == child.id)
        .options(selectinload(PracticeSession.drills))
    )
    sessions = list(result.scalars())
    completed = [s for s in sessions if s.status == SessionStatus.COMPLETED.value]

    skill_progress: dict[str, int] = defaultdict(int)
    for session in completed:
        for session_drill in session.drills:
            if session_drill.completed:
                skill_progress[session_drill.drill.skill_category] += session_drill.stars_earned

    average = 0.0
    if completed:
        average = round(sum(s.total_stars_earned for s in completed) / len(completed), 1)

    return {
        "childId": child.id,
        "name": child.name,
        "totalStars": child.total_stars,
        "availableStars": child.available_stars,
        "totalSessions": len(sessions),
        "completedSessions": len(completed),
        "averageStarsPerSession": average,
        "skillProgress": dict(skill_progress),
    }
