"""
Role-based permission gates.

Each role's permission names are loaded once and cached in-process; the
``admin`` role bypasses every check.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Iterable

import structlog
from fastapi import Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from jgp.auth.dependencies import get_current_user
from jgp.database import get_session
from jgp.db.models import Permission, RolePermission, User
from jgp.db.seed import ADMIN_ROLE
from jgp.errors import Forbidden

logger = structlog.get_logger()

_role_permissions: dict[str, frozenset[str]] = {}


def clear_permission_cache() -> None:
    """Forget cached role permissions (after reseeding, in tests)."""
    _role_permissions.clear()


async def get_role_permissions(db: AsyncSession, role_id: str) -> frozenset[str]:
    """Permission names granted to a role."""
    cached = _role_permissions.get(role_id)
    if cached is not None:
        return cached
    result = await db.execute(
        select(Permission.name)
        .join(RolePermission, RolePermission.permission_id == Permission.id)
        .where(RolePermission.role_id == role_id)
    )
    permissions = frozenset(result.scalars())
    _role_permissions[role_id] = permissions
    return permissions


async def has_permissions(db: AsyncSession, user: User, required: Iterable[str], *, require_all: bool = True) -> bool:
    if user.role.name == ADMIN_ROLE:
        return True
    granted = await get_role_permissions(db, user.role_id)
    check = all if require_all else any
    return check(name in granted for name in required)


def _gate(permissions: tuple[str, ...], *, require_all: bool) -> Callable[..., Awaitable[User]]:
    async def dependency(
        user: User = Depends(get_current_user),
        db: AsyncSession = Depends(get_session),
    ) -> User:
        if not await has_permissions(db, user, permissions, require_all=require_all):
            logger.info("permission_denied", user_id=user.id, required=list(permissions))
            raise Forbidden("Insufficient permissions")
        return user

    return dependency


def require_permission(permission: str) -> Callable[..., Awaitable[User]]:
    """Dependency factory: caller must hold ``permission``."""
    return _gate((permission,), require_all=True)


def require_all_permissions(*permissions: str) -> Callable[..., Awaitable[User]]:
    """Dependency factory: caller must hold every listed permission."""
    return _gate(permissions, require_all=True)


def require_any_permission(*permissions: str) -> Callable[..., Awaitable[User]]:
    """Dependency factory: caller must hold at least one listed permission."""
    return _gate(permissions, require_all=False)
