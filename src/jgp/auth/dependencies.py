"""FastAPI authentication dependencies."""

from __future__ import annotations

import jwt
from fastapi import Depends, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from jgp.auth.jwt import verify_token
from jgp.auth.service import get_user_by_id
from jgp.database import get_session
from jgp.db.models import Parent, User
from jgp.errors import NotFound, Unauthenticated

_bearer = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Security(_bearer),
    db: AsyncSession = Depends(get_session),
) -> User:
    """
    Extract and verify the bearer access token, return the User.

    Raises Unauthenticated for a missing, invalid or expired token and for
    unknown or deactivated users.
    """
    if credentials is None:
        raise Unauthenticated("No token provided")
    try:
        payload = verify_token(credentials.credentials, expected_type="access")
    except jwt.InvalidTokenError as e:
        raise Unauthenticated("Invalid or expired token") from e

    user = await get_user_by_id(db, str(payload["sub"]))
    if user is None or not user.is_active:
        raise Unauthenticated("User not found or inactive")
    return user


async def get_current_parent(user: User = Depends(get_current_user)) -> Parent:
    """The caller's Parent profile; every resource is scoped through it."""
    if user.parent is None:
        raise NotFound("Parent profile not found")
    return user.parent
