"""Weekly-goal streaks: week boundaries, the streak transition, and persistence.

A streak counts consecutive weeks in which a child met the parent's weekly
session goal. It only advances when ``update_streak`` is called.
"""

from __future__ import annotations

import dataclasses
from datetime import date, datetime, timedelta, timezone
from typing import TYPE_CHECKING, Any

import structlog
from sqlalchemy import select

from jgp.children.service import get_owned_child
from jgp.db.models import Parent, Streak

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger()

STREAK_GOAL_TARGETS: dict[str, int] = {
    "DAILY": 7,
    "FIVE_PER_WEEK": 5,
    "THREE_PER_WEEK": 3,
    "TWO_PER_WEEK": 2,
}
DEFAULT_STREAK_GOAL = "THREE_PER_WEEK"


def get_monday(dt: datetime | date) -> date:
    """Get the Monday of the ISO week containing dt."""
    d = dt.date() if isinstance(dt, datetime) else dt
    return d - timedelta(days=d.weekday())


def streak_goal_name(settings: dict[str, Any] | None) -> str:
    goal = (settings or {}).get("streakGoal")
    return goal if goal in STREAK_GOAL_TARGETS else DEFAULT_STREAK_GOAL


def weekly_goal(settings: dict[str, Any] | None) -> int:
    """Sessions per week required by the parent's configured streak goal."""
    return STREAK_GOAL_TARGETS[streak_goal_name(settings)]


@dataclasses.dataclass(frozen=True)
class StreakState:
    current_streak: int
    longest_streak: int
    weekly_session_count: int
    week_start_date: date
    last_session_date: date | None = None


def advance_streak(state: StreakState | None, *, today: date, goal: int) -> StreakState:
    """
    Count one more qualifying session on ``today``.

    - No prior state: first session of the current week, streak 0.
    - New week: the stored week is judged against ``goal``; meeting it
      extends the streak, missing it resets the streak to 0. The weekly
      count restarts at 1.
    - Same week: the weekly count grows; the session that first lifts it
      to the goal extends the streak once.
    """
    week_start = get_monday(today)
    if state is None:
        return StreakState(
            current_streak=0,
            longest_streak=0,
            weekly_session_count=1,
            week_start_date=week_start,
            last_session_date=today,
        )

    current = state.current_streak
    if state.week_start_date < week_start:
        current = current + 1 if state.weekly_session_count >= goal else 0
        weekly = 1
    else:
        weekly = state.weekly_session_count + 1
        if state.weekly_session_count < goal <= weekly:
            current += 1

    return StreakState(
        current_streak=current,
        longest_streak=max(state.longest_streak, current),
        weekly_session_count=weekly,
        week_start_date=week_start,
        last_session_date=today,
    )


# ---------------------------------------------------------------------------
# Persistence
# ---------------------------------------------------------------------------


# Weeks are cut at Monday 00:00 UTC, not at the family's local midnight.
def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _as_state(streak: Streak) -> StreakState:
    return StreakState(
        current_streak=streak.current_streak,
        longest_streak=streak.longest_streak,
        weekly_session_count=streak.weekly_session_count,
        week_start_date=streak.week_start_date,
        last_session_date=streak.last_session_date,
    )


def streak_view(child_id: str, streak: Streak, goal: int) -> dict[str, Any]:
    """Wire shape of a streak, with the goal it is measured against."""
    return {
        "childId": child_id,
        "currentStreak": streak.current_streak,
        "longestStreak": streak.longest_streak,
        "lastSessionDate": streak.last_session_date.isoformat() if streak.last_session_date else None,
        "weeklySessionCount": streak.weekly_session_count,
        "weeklyGoal": goal,
        "goalMet": streak.weekly_session_count >= goal,
        "weekStartDate": streak.week_start_date.isoformat(),
    }


async def _load(db: AsyncSession, parent: Parent, child_id: str) -> tuple[str, Streak | None]:
    child = await get_owned_child(db, parent.id, child_id, for_update=True)
    streak = (await db.execute(select(Streak).where(Streak.child_id == child.id))).scalar_one_or_none()
    return child.id, streak


async def get_streak(db: AsyncSession, parent: Parent, child_id: str, now: datetime | None = None) -> dict[str, Any]:
    """Current streak for a child, created empty on first read."""
    child_id, streak = await _load(db, parent, child_id)
    if streak is None:
        streak = Streak(child_id=child_id, week_start_date=get_monday(now or _utcnow()))
        db.add(streak)
        await db.flush()
    return streak_view(child_id, streak, weekly_goal(parent.settings))


async def update_streak(
    db: AsyncSession, parent: Parent, child_id: str, now: datetime | None = None
) -> dict[str, Any]:
    """Record one qualifying session for the child and return the new streak."""
    child_id, streak = await _load(db, parent, child_id)
    goal = weekly_goal(parent.settings)
    today = (now or _utcnow()).date()

    new_state = advance_streak(_as_state(streak) if streak else None, today=today, goal=goal)
    if streak is None:
        streak = Streak(child_id=child_id, **dataclasses.asdict(new_state))
        db.add(streak)
    else:
        for field, value in dataclasses.asdict(new_state).items():
            setattr(streak, field, value)
    await db.flush()

    logger.info(
        "streak_updated",
        child_id=child_id,
        current_streak=new_state.current_streak,
        weekly_session_count=new_state.weekly_session_count,
        weekly_goal=goal,
    )
    return streak_view(child_id, streak, goal)
