"""Avatar shop schemas."""

from __future__ import annotations

from typing import Any

from pydantic import Field

from jgp.schemas import CamelModel


class AvatarItemOut(CamelModel):
    id: str
    name: str
    type: str
    image_url: str
    unlock_stars: int
    is_premium: bool
    rarity: str


class ChildAvatarOut(CamelModel):
    child_id: str
    equipped_items: list[AvatarItemOut]
    owned_items: list[AvatarItemOut]
    avatar_state: dict[str, Any]


class ItemRequest(CamelModel):
    """Body for purchase and equip."""

    item_id: str = Field(..., min_length=1)
