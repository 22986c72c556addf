"""Avatar and shop endpoints — /api/v1/avatar/*."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from jgp.auth.dependencies import get_current_parent
from jgp.auth.permissions import require_permission
from jgp.avatar import service
from jgp.avatar.schemas import AvatarItemOut, ItemRequest
from jgp.database import get_session
from jgp.db.models import ItemType, Parent
from jgp.schemas import envelope

router = APIRouter(prefix="/api/v1/avatar", tags=["Avatar"])

_read = [Depends(require_permission("avatar:read"))]
_write = [Depends(require_permission("avatar:write"))]


@router.get("/shop", dependencies=_read)
async def shop(
    item_type: ItemType | None = Query(None, alias="type"),
    db: AsyncSession = Depends(get_session),
) -> dict[str, Any]:
    items = await service.list_shop(db, item_type.value if item_type else None)
    return envelope({"items": [AvatarItemOut.model_validate(i) for i in items]})


@router.get("/{child_id}", dependencies=_read)
async def get_avatar(
    child_id: str,
    parent: Parent = Depends(get_current_parent),
    db: AsyncSession = Depends(get_session),
) -> dict[str, Any]:
    return envelope({"avatar": await service.get_child_avatar(db, parent.id, child_id)})


@router.post("/{child_id}/purchase", dependencies=_write)
async def purchase(
    child_id: str,
    body: ItemRequest,
    parent: Parent = Depends(get_current_parent),
    db: AsyncSession = Depends(get_session),
) -> dict[str, Any]:
    balance = await service.purchase_item(db, parent.id, child_id, body.item_id)
    await db.commit()
    return envelope({"message": "Item purchased", "availableStars": balance})


@router.post("/{child_id}/equip", dependencies=_write)
async def equip(
    child_id: str,
    body: ItemRequest,
    parent: Parent = Depends(get_current_parent),
    db: AsyncSession = Depends(get_session),
) -> dict[str, Any]:
    avatar_state = await service.equip_item(db, parent.id, child_id, body.item_id)
    await db.commit()
    return envelope({"avatarState": avatar_state})


@router.delete("/{child_id}/equip/{item_type}", dependencies=_write)
async def unequip(
    child_id: str,
    item_type: ItemType,
    parent: Parent = Depends(get_current_parent),
    db: AsyncSession = Depends(get_session),
) -> dict[str, Any]:
    avatar_state = await service.unequip_item(db, parent.id, child_id, item_type.value)
    await db.commit()
    return envelope({"avatarState": avatar_state})
