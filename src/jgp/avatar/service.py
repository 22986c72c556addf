"""
Avatar shop: star spending and equip slots.

A child holds at most one equipped item per item type; the child's
``avatar_state`` mirrors the equipped item id under the type name.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import structlog
from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import selectinload

from jgp.avatar.schemas import AvatarItemOut, ChildAvatarOut
from jgp.children.service import get_owned_child
from jgp.db.models import AvatarItem, Child, ChildAvatarItem
from jgp.errors import AlreadyOwned, InsufficientStars, NotFound

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger()


async def list_shop(db: AsyncSession, item_type: str | None = None) -> list[AvatarItem]:
    """Shop items ordered by type, then price."""
    stmt = select(AvatarItem).order_by(AvatarItem.type, AvatarItem.unlock_stars, AvatarItem.name)
    if item_type is not None:
        stmt = stmt.where(AvatarItem.type == item_type)
    return list((await db.execute(stmt)).scalars())


async def get_child_avatar(db: AsyncSession, parent_id: str, child_id: str) -> ChildAvatarOut:
    result = await db.execute(
        select(Child)
        .where(Child.id == child_id, Child.parent_id == parent_id)
        .options(selectinload(Child.unlocked_items))
    )
    child = result.scalar_one_or_none()
    if child is None:
        raise NotFound("Child not found")

    owned = sorted(child.unlocked_items, key=lambda ui: ui.unlocked_at)
    return ChildAvatarOut(
        child_id=child.id,
        equipped_items=[AvatarItemOut.model_validate(ui.item) for ui in owned if ui.equipped],
        owned_items=[AvatarItemOut.model_validate(ui.item) for ui in owned],
        avatar_state=child.avatar_state or {},
    )


async def purchase_item(db: AsyncSession, parent_id: str, child_id: str, item_id: str) -> int:
    """
    Buy an item with the child's spendable stars. Returns the new balance.

    The debit is a conditional UPDATE so the balance cannot go negative;
    lifetime ``total_stars`` is untouched.
    """
    child = await get_owned_child(db, parent_id, child_id)
    item = await db.get(AvatarItem, item_id)
    if item is None:
        raise NotFound("Item not found")

    owned = await db.scalar(
        select(ChildAvatarItem.id).where(ChildAvatarItem.child_id == child.id, ChildAvatarItem.item_id == item.id)
    )
    if owned is not None:
        raise AlreadyOwned
    if child.available_stars < item.unlock_stars:
        raise InsufficientStars

    debited = await db.execute(
        update(Child)
        .where(Child.id == child.id, Child.available_stars >= item.unlock_stars)
        .values(available_stars=Child.available_stars - item.unlock_stars)
        .execution_options(synchronize_session=False)
    )
    if debited.rowcount != 1:
        raise InsufficientStars

    db.add(ChildAvatarItem(child_id=child.id, item_id=item.id))
    try:
        await db.flush()
    except IntegrityError as e:
        raise AlreadyOwned from e

    balance = await db.scalar(select(Child.available_stars).where(Child.id == child.id))
    logger.info("item_purchased", child_id=child.id, item_id=item.id, cost=item.unlock_stars, balance=balance)
    return balance or 0


async def equip_item(db: AsyncSession, parent_id: str, child_id: str, item_id: str) -> dict[str, Any]:
    """Equip an owned item, unequipping whatever held its slot. Returns avatar state."""
    child = await get_owned_child(db, parent_id, child_id, for_update=True)
    result = await db.execute(
        select(ChildAvatarItem).where(ChildAvatarItem.child_id == child.id, ChildAvatarItem.item_id == item_id)
    )
    owned = result.scalar_one_or_none()
    if owned is None:
        raise NotFound("Item not owned")

    item_type = owned.item.type
    await _unequip_type(db, child.id, item_type, keep_id=owned.id)
    owned.equipped = True
    child.avatar_state = {**(child.avatar_state or {}), item_type: item_id}
    await db.flush()
    logger.info("item_equipped", child_id=child.id, item_id=item_id, item_type=item_type)
    return child.avatar_state


async def unequip_item(db: AsyncSession, parent_id: str, child_id: str, item_type: str) -> dict[str, Any]:
    """Clear an equip slot. Returns avatar state."""
    child = await get_owned_child(db, parent_id, child_id, for_update=True)
    await _unequip_type(db, child.id, item_type)
    state = dict(child.avatar_state or {})
    state.pop(item_type, None)
    child.avatar_state = state
    await db.flush()
    logger.info("item_unequipped", child_id=child.id, item_type=item_type)
    return child.avatar_state


async def _unequip_type(db: AsyncSession, child_id: str, item_type: str, keep_id: str | None = None) -> None:
    conditions = [
        ChildAvatarItem.child_id == child_id,
        ChildAvatarItem.equipped.is_(True),
        ChildAvatarItem.item_id.in_(select(AvatarItem.id).where(AvatarItem.type == item_type)),
    ]
    if keep_id is not None:
        conditions.append(ChildAvatarItem.id != keep_id)
    await db.execute(
        update(ChildAvatarItem)
        .where(*conditions)
        .values(equipped=False)
        .execution_options(synchronize_session=False)
    )
