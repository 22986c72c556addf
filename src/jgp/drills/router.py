"""Drill catalogue endpoints — /api/v1/drills/*."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from jgp.auth.permissions import require_permission
from jgp.database import get_session
from jgp.db.models import AgeBand
from jgp.dependencies import Page, pagination
from jgp.drills import service
from jgp.drills.schemas import DrillListOut, DrillOut
from jgp.schemas import envelope

router = APIRouter(
    prefix="/api/v1/drills",
    tags=["Drills"],
    dependencies=[Depends(require_permission("drills:read"))],
)


@router.get("")
async def list_drills(
    age_band: AgeBand | None = Query(None, alias="ageBand"),
    skill_category: str | None = Query(None, alias="skillCategory"),
    is_premium: bool | None = Query(None, alias="isPremium"),
    page: Page = Depends(pagination),
    db: AsyncSession = Depends(get_session),
) -> dict[str, Any]:
    drills, total = await service.list_drills(
        db,
        age_band=age_band.value if age_band else None,
        skill_category=skill_category,
        is_premium=is_premium,
        limit=page.limit,
        offset=page.offset,
    )
    return envelope(
        DrillListOut(
            drills=[DrillOut.model_validate(d) for d in drills],
            total=total,
            limit=page.limit,
            offset=page.offset,
        )
    )


@router.get("/categories")
async def list_categories(
    age_band: AgeBand | None = Query(None, alias="ageBand"),
    db: AsyncSession = Depends(get_session),
) -> dict[str, Any]:
    categories = await service.list_skill_categories(db, age_band.value if age_band else None)
    return envelope({"categories": categories})


@router.get("/{drill_id}")
async def get_drill(drill_id: str, db: AsyncSession = Depends(get_session)) -> dict[str, Any]:
    drill = await service.get_drill(db, drill_id)
    return envelope({"drill": DrillOut.model_validate(drill)})
