"""Child profile endpoints — /api/v1/children/*."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from jgp.auth.dependencies import get_current_parent
from jgp.auth.permissions import require_permission
from jgp.children import service
from jgp.children.schemas import ChildOut, CreateChildRequest, UpdateChildRequest
from jgp.database import get_session
from jgp.db.models import Parent
from jgp.schemas import envelope

router = APIRouter(prefix="/api/v1/children", tags=["Children"])


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_permission("children:write"))],
)
async def create_child(
    body: CreateChildRequest,
    parent: Parent = Depends(get_current_parent),
    db: AsyncSession = Depends(get_session),
) -> dict[str, Any]:
    child = await service.create_child(db, parent.id, body.model_dump(mode="json"))
    await db.commit()
    return envelope({"child": ChildOut.model_validate(child)})


@router.get("", dependencies=[Depends(require_permission("children:read"))])
async def list_children(
    parent: Parent = Depends(get_current_parent),
    db: AsyncSession = Depends(get_session),
) -> dict[str, Any]:
    children = await service.list_children(db, parent.id)
    return envelope({"children": [ChildOut.model_validate(c) for c in children]}, count=len(children))


@router.get("/{child_id}", dependencies=[Depends(require_permission("children:read"))])
async def get_child(
    child_id: str,
    parent: Parent = Depends(get_current_parent),
    db: AsyncSession = Depends(get_session),
) -> dict[str, Any]:
    """Child profile with streak, recent sessions and session count."""
    return envelope({"child": await service.get_child_with_stats(db, parent.id, child_id)})


@router.patch("/{child_id}", dependencies=[Depends(require_permission("children:write"))])
async def update_child(
    child_id: str,
    body: UpdateChildRequest,
    parent: Parent = Depends(get_current_parent),
    db: AsyncSession = Depends(get_session),
) -> dict[str, Any]:
    changes = body.model_dump(mode="json", exclude_none=True)
    child = await service.update_child(db, parent.id, child_id, changes)
    await db.commit()
    return envelope({"child": ChildOut.model_validate(child)})


@router.delete("/{child_id}", dependencies=[Depends(require_permission("children:delete"))])
async def delete_child(
    child_id: str,
    parent: Parent = Depends(get_current_parent),
    db: AsyncSession = Depends(get_session),
) -> dict[str, Any]:
    await service.delete_child(db, parent.id, child_id)
    await db.commit()
    return envelope({"message": "Child deleted successfully"})
