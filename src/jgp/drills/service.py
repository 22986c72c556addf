"""Read-only queries over the drill catalogue."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import func, select

from jgp.db.models import Drill
from jgp.errors import NotFound

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession


async def list_drills(
    db: AsyncSession,
    *,
    age_band: str | None = None,
    skill_category: str | None = None,
    is_premium: bool | None = None,
    limit: int = 20,
    offset: int = 0,
) -> tuple[list[Drill], int]:
    """Filtered page of drills ordered by skill category then title, plus the total match count."""
    filters = []
    if age_band is not None:
        filters.append(Drill.age_band == age_band)
    if skill_category is not None:
        filters.append(Drill.skill_category == skill_category)
    if is_premium is not None:
        filters.append(Drill.is_premium == is_premium)

    result = await db.execute(
        select(Drill).where(*filters).order_by(Drill.skill_category, Drill.title).limit(limit).offset(offset)
    )
    total = await db.scalar(select(func.count()).select_from(Drill).where(*filters))
    return list(result.scalars()), total or 0


async def get_drill(db: AsyncSession, drill_id: str) -> Drill:
    drill = await db.get(Drill, drill_id)
    if drill is None:
        raise NotFound("Drill not found")
    return drill


async def get_drills_by_age_band(db: AsyncSession, age_band: str) -> list[Drill]:
    result = await db.execute(select(Drill).where(Drill.age_band == age_band).order_by(Drill.title))
    return list(result.scalars())


async def list_skill_categories(db: AsyncSession, age_band: str | None = None) -> list[str]:
    """Distinct skill categories, alphabetically, optionally within one age band."""
    stmt = select(Drill.skill_category).distinct().order_by(Drill.skill_category)
    if age_band is not None:
        stmt = stmt.where(Drill.age_band == age_band)
    return list((await db.execute(stmt)).scalars())
