"""
Child roster management.

Every lookup is scoped to the calling parent: a child that does not exist
and a child owned by someone else are both reported as NotFound.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import structlog
from sqlalchemy import func, select
from sqlalchemy.orm import selectinload

from jgp.children.schemas import ChildDetailOut, ChildOut, RecentSession, StreakSummary
from jgp.db.models import Child, PracticeSession
from jgp.errors import NotFound

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger()


async def get_owned_child(db: AsyncSession, parent_id: str, child_id: str, *, for_update: bool = False) -> Child:
    """
    Load a child belonging to ``parent_id`` or raise NotFound.

    ``for_update`` row-locks the child until commit, serializing writers that
    read and rewrite the child's avatar or streak.
    """
    stmt = select(Child).where(Child.id == child_id, Child.parent_id == parent_id)
    if for_update:
        stmt = stmt.with_for_update().execution_options(populate_existing=True)
    child = (await db.execute(stmt)).scalar_one_or_none()
    if child is None:
        raise NotFound("Child not found")
    return child


async def create_child(db: AsyncSession, parent_id: str, data: dict[str, Any]) -> Child:
    """Create a child from validated, JSON-mode request data."""
    child = Child(
        parent_id=parent_id,
        name=data["name"],
        age_band=data["age_band"],
        skill_level=data["skill_level"],
        avatar_state=data.get("avatar_state") or {},
    )
    db.add(child)
    await db.flush()
    logger.info("child_created", child_id=child.id, parent_id=parent_id)
    return child


async def list_children(db: AsyncSession, parent_id: str) -> list[Child]:
    """All children of a parent, oldest profile first."""
    result = await db.execute(select(Child).where(Child.parent_id == parent_id).order_by(Child.created_at))
    return list(result.scalars())


async def update_child(db: AsyncSession, parent_id: str, child_id: str, changes: dict[str, Any]) -> Child:
    child = await get_owned_child(db, parent_id, child_id)
    for field, value in changes.items():
        setattr(child, field, value)
    await db.flush()
    await db.refresh(child)
    return child


async def delete_child(db: AsyncSession, parent_id: str, child_id: str) -> None:
    """Delete a child; sessions, streak and owned items go with it."""
    child = await get_owned_child(db, parent_id, child_id)
    await db.delete(child)
    await db.flush()
    logger.info("child_deleted", child_id=child_id, parent_id=parent_id)


async def get_child_with_stats(db: AsyncSession, parent_id: str, child_id: str) -> ChildDetailOut:
    result = await db.execute(
        select(Child)
        .where(Child.id == child_id, Child.parent_id == parent_id)
        .options(selectinload(Child.streak))
    )
    child = result.scalar_one_or_none()
    if child is None:
        raise NotFound("Child not found")

    recent = await db.execute(
        select(PracticeSession)
        .where(PracticeSession.child_id == child.id)
        .order_by(PracticeSession.started_at.desc())
        .limit(5)
    )
    total = await db.scalar(select(func.count()).select_from(PracticeSession).where(PracticeSession.child_id == child.id))

    return ChildDetailOut(
        **ChildOut.model_validate(child).model_dump(),
        streak=StreakSummary.model_validate(child.streak) if child.streak else None,
        recent_sessions=[RecentSession.model_validate(s) for s in recent.scalars()],
        total_sessions=total or 0,
    )
