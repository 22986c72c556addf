"""
Session and reward engine.

A session moves IN_PROGRESS -> COMPLETED (or ABANDONED) and never back.
Each completed drill is worth a fixed number of stars; stars reach the
child's balance only when the whole session is completed.
"""

from __future__ import annotations

import random
from datetime import datetime, timezone
from typing import TYPE_CHECKING

import structlog
from sqlalchemy import func, select, update
from sqlalchemy.orm import selectinload

from jgp.children.service import get_owned_child
from jgp.db.models import Child, PracticeSession, SessionDrill, SessionStatus
from jgp.drills.service import get_drills_by_age_band
from jgp.errors import AlreadyCompleted, NoDrillsAvailable, NotFound, SessionClosed

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger()

STARS_PER_DRILL = 2

DURATION_TO_DRILL_COUNT: dict[str, int] = {
    "10": 2,
    "15": 3,
    "20": 4,
}
DEFAULT_DURATION = "15"

_IN_PROGRESS = SessionStatus.IN_PROGRESS.value


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------


def _owned_sessions(parent_id: str):  # noqa: ANN202
    return (
        select(PracticeSession)
        .join(Child, Child.id == PracticeSession.child_id)
        .where(Child.parent_id == parent_id)
    )


async def get_session(db: AsyncSession, parent_id: str, session_id: str, *, reload: bool = False) -> PracticeSession:
    """Load a session (with drills) owned through the parent's children, or raise NotFound."""
    stmt = (
        _owned_sessions(parent_id)
        .where(PracticeSession.id == session_id)
        .options(selectinload(PracticeSession.drills))
    )
    if reload:
        stmt = stmt.execution_options(populate_existing=True)
    session = (await db.execute(stmt)).scalar_one_or_none()
    if session is None:
        raise NotFound("Session not found")
    return session


async def list_sessions(
    db: AsyncSession,
    parent_id: str,
    *,
    child_id: str | None = None,
    status: str | None = None,
    limit: int = 20,
    offset: int = 0,
) -> tuple[list[PracticeSession], int]:
    """Newest-first page of the parent's sessions and the total match count."""
    filters = []
    if child_id is not None:
        filters.append(PracticeSession.child_id == child_id)
    if status is not None:
        filters.append(PracticeSession.status == status)

    stmt = _owned_sessions(parent_id).where(*filters)
    result = await db.execute(
        stmt.options(selectinload(PracticeSession.drills))
        .order_by(PracticeSession.started_at.desc())
        .limit(limit)
        .offset(offset)
    )
    total = await db.scalar(select(func.count()).select_from(stmt.subquery()))
    return list(result.scalars()), total or 0


# ---------------------------------------------------------------------------
# Generation
# ---------------------------------------------------------------------------


async def generate_session(
    db: AsyncSession,
    parent_id: str,
    child_id: str,
    duration: str = DEFAULT_DURATION,
    rng: random.Random | None = None,
) -> PracticeSession:
    """
    Start a session for a child with drills sampled from its age band.

    The bucket fixes the drill count; a catalogue smaller than that is used
    whole. Drills are drawn without replacement and numbered from 1.
    """
    child = await get_owned_child(db, parent_id, child_id)
    candidates = await get_drills_by_age_band(db, child.age_band)
    if not candidates:
        raise NoDrillsAvailable

    count = min(DURATION_TO_DRILL_COUNT[duration], len(candidates))
    chosen = (rng or random).sample(candidates, count)

    session = PracticeSession(child_id=child.id, status=_IN_PROGRESS, total_stars_earned=0)
    db.add(session)
    await db.flush()
    for position, drill in enumerate(chosen, start=1):
        db.add(SessionDrill(session_id=session.id, drill_id=drill.id, order=position))
    await db.flush()

    logger.info("session_generated", session_id=session.id, child_id=child.id, drills=count)
    return await get_session(db, parent_id, session.id, reload=True)


# ---------------------------------------------------------------------------
# Completion
# ---------------------------------------------------------------------------


async def complete_drill(db: AsyncSession, parent_id: str, session_id: str, session_drill_id: str) -> PracticeSession:
    """
    Mark one drill of an open session done and add its stars to the session total.

    Raises NotFound, SessionClosed or AlreadyCompleted.
    """
    session = await get_session(db, parent_id, session_id)
    if session.status != _IN_PROGRESS:
        raise SessionClosed
    if not any(sd.id == session_drill_id for sd in session.drills):
        raise NotFound("Drill not found in session")

    now = datetime.now(timezone.utc)
    marked = await db.execute(
        update(SessionDrill)
        .where(
            SessionDrill.id == session_drill_id,
            SessionDrill.session_id == session.id,
            SessionDrill.completed.is_(False),
        )
        .values(completed=True, stars_earned=STARS_PER_DRILL, verified_at=now)
        .execution_options(synchronize_session=False)
    )
    if marked.rowcount != 1:
        raise AlreadyCompleted

    credited = await db.execute(
        update(PracticeSession)
        .where(PracticeSession.id == session.id, PracticeSession.status == _IN_PROGRESS)
        .values(total_stars_earned=PracticeSession.total_stars_earned + STARS_PER_DRILL)
        .execution_options(synchronize_session=False)
    )
    if credited.rowcount != 1:
        raise SessionClosed

    logger.info("drill_completed", session_id=session.id, session_drill_id=session_drill_id)
    return await get_session(db, parent_id, session.id, reload=True)


async def complete_session(db: AsyncSession, parent_id: str, session_id: str) -> PracticeSession:
    """
    Close an open session and pay its stars out to the child.

    The status flip is conditional on IN_PROGRESS, so a session can be paid
    at most once. Both writes land in the caller's single commit.
    """
    session = await get_session(db, parent_id, session_id)
    if session.status != _IN_PROGRESS:
        raise SessionClosed

    closed = await db.execute(
        update(PracticeSession)
        .where(PracticeSession.id == session.id, PracticeSession.status == _IN_PROGRESS)
        .values(status=SessionStatus.COMPLETED.value, completed_at=datetime.now(timezone.utc))
        .execution_options(synchronize_session=False)
    )
    if closed.rowcount != 1:
        raise SessionClosed

    earned = await db.scalar(select(PracticeSession.total_stars_earned).where(PracticeSession.id == session.id))
    await db.execute(
        update(Child)
        .where(Child.id == session.child_id)
        .values(
            total_stars=Child.total_stars + earned,
            available_stars=Child.available_stars + earned,
        )
        .execution_options(synchronize_session=False)
    )

    logger.info("session_completed", session_id=session.id, child_id=session.child_id, stars=earned)
    return await get_session(db, parent_id, session.id, reload=True)
