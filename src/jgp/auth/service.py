"""
Authentication business logic.

Handles account creation, credential checks, and the refresh-token lifecycle.
Functions flush but never commit; the router owns the transaction.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import TYPE_CHECKING

import structlog
from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError

from jgp.auth.jwt import (
    create_access_token,
    generate_refresh_token,
    hash_refresh_token,
    refresh_token_expiry,
)
from jgp.auth.password import (
    PasswordStrengthError,
    check_needs_rehash,
    hash_password,
    validate_password_strength,
    verify_password,
)
from jgp.config import get_settings
from jgp.db.models import Parent, RefreshToken, Role, User
from jgp.db.seed import PARENT_ROLE
from jgp.errors import (
    AlreadyExists,
    IncorrectPassword,
    InvalidCredentials,
    InvalidRefreshToken,
    ValidationFailed,
)

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger()


@dataclass(frozen=True)
class TokenPair:
    access_token: str
    refresh_token: str
    expires_in: int


# ---------------------------------------------------------------------------
# User queries
# ---------------------------------------------------------------------------


async def get_user_by_id(db: AsyncSession, user_id: str) -> User | None:
    """Fetch a user by ID."""
    result = await db.execute(select(User).where(User.id == user_id))
    return result.unique().scalar_one_or_none()


async def get_user_by_email(db: AsyncSession, email: str) -> User | None:
    """Fetch a user by email (case-insensitive)."""
    result = await db.execute(select(User).where(func.lower(User.email) == email.lower().strip()))
    return result.unique().scalar_one_or_none()


async def get_or_create_parent_role(db: AsyncSession) -> Role:
    """Return the default 'parent' role, creating a bare one if it was never seeded."""
    result = await db.execute(select(Role).where(Role.name == PARENT_ROLE))
    role = result.scalar_one_or_none()
    if role is None:
        role = Role(name=PARENT_ROLE, description="Parent account")
        db.add(role)
        await db.flush()
        logger.warning("parent_role_created_on_demand", role_id=role.id)
    return role


# ---------------------------------------------------------------------------
# Registration & login
# ---------------------------------------------------------------------------


async def register_user(db: AsyncSession, email: str, password: str) -> User:
    """
    Create a User and its Parent profile in the caller's transaction.

    Raises:
        ValidationFailed: If the password is too weak.
        AlreadyExists: If the email is already registered.
    """
    try:
        validate_password_strength(password)
    except PasswordStrengthError as e:
        raise ValidationFailed(str(e)) from e

    email = email.lower().strip()
    if await get_user_by_email(db, email) is not None:
        raise AlreadyExists

    role = await get_or_create_parent_role(db)
    user = User(email=email, password_hash=hash_password(password), role_id=role.id)
    db.add(user)
    try:
        await db.flush()
    except IntegrityError as e:
        # Lost a race with a concurrent registration of the same email
        raise AlreadyExists from e

    db.add(Parent(user_id=user.id, settings={}))
    await db.flush()
    await db.refresh(user, ["role", "parent"])
    logger.info("user_registered", user_id=user.id)
    return user


async def authenticate_user(db: AsyncSession, email: str, password: str) -> User:
    """
    Check email + password.

    Unknown email, wrong password and inactive account all raise the same
    InvalidCredentials error.
    """
    user = await get_user_by_email(db, email)
    if user is None or not verify_password(password, user.password_hash) or not user.is_active:
        logger.info("login_failed")
        raise InvalidCredentials

    if check_needs_rehash(user.password_hash):
        user.password_hash = hash_password(password)
        await db.flush()

    logger.info("user_logged_in", user_id=user.id)
    return user


# ---------------------------------------------------------------------------
# Refresh token lifecycle
# ---------------------------------------------------------------------------


async def issue_tokens(db: AsyncSession, user: User) -> TokenPair:
    """Create an access token and persist the hash of a new refresh token."""
    settings = get_settings()
    access_token = create_access_token(user.id, user.email, user.role_id, user.role.name)
    refresh_token = generate_refresh_token()
    now = datetime.now(timezone.utc)
    db.add(
        RefreshToken(
            user_id=user.id,
            token_hash=hash_refresh_token(refresh_token),
            issued_at=now,
            expires_at=refresh_token_expiry(now),
        )
    )
    await db.flush()
    return TokenPair(
        access_token=access_token,
        refresh_token=refresh_token,
        expires_in=settings.jwt_access_token_expire_minutes * 60,
    )


async def rotate_refresh_token(db: AsyncSession, raw_token: str) -> tuple[User, TokenPair]:
    """
    Redeem a refresh token: revoke it and issue a new pair.

    The revocation is a conditional UPDATE, so of two concurrent redemptions
    of the same token only one can win.
    """
    now = datetime.now(timezone.utc)
    token_hash = hash_refresh_token(raw_token)
    result = await db.execute(
        select(RefreshToken.id, RefreshToken.user_id).where(
            RefreshToken.token_hash == token_hash,
            RefreshToken.revoked_at.is_(None),
            RefreshToken.expires_at > now,
        )
    )
    row = result.one_or_none()
    if row is None:
        raise InvalidRefreshToken

    revoked = await db.execute(
        update(RefreshToken)
        .where(RefreshToken.id == row.id, RefreshToken.revoked_at.is_(None))
        .values(revoked_at=now)
        .execution_options(synchronize_session=False)
    )
    if revoked.rowcount != 1:
        raise InvalidRefreshToken

    user = await get_user_by_id(db, row.user_id)
    if user is None or not user.is_active:
        raise InvalidRefreshToken

    tokens = await issue_tokens(db, user)
    logger.info("refresh_token_rotated", user_id=user.id)
    return user, tokens


async def revoke_refresh_token(db: AsyncSession, raw_token: str) -> bool:
    """Revoke one refresh token. Returns True if a live token was revoked."""
    result = await db.execute(
        update(RefreshToken)
        .where(
            RefreshToken.token_hash == hash_refresh_token(raw_token),
            RefreshToken.revoked_at.is_(None),
        )
        .values(revoked_at=datetime.now(timezone.utc))
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1


async def revoke_all_tokens(db: AsyncSession, user_id: str) -> int:
    """Revoke all refresh tokens for a user. Returns count revoked."""
    result = await db.execute(
        update(RefreshToken)
        .where(RefreshToken.user_id == user_id, RefreshToken.revoked_at.is_(None))
        .values(revoked_at=datetime.now(timezone.utc))
        .execution_options(synchronize_session=False)
    )
    return result.rowcount  # type: ignore[return-value]


# ---------------------------------------------------------------------------
# Profile & password
# ---------------------------------------------------------------------------


async def update_profile(db: AsyncSession, user: User, email: str | None = None) -> User:
    """Update the caller's email, rejecting one held by another account."""
    if email is not None:
        email = email.lower().strip()
        if email != user.email:
            existing = await get_user_by_email(db, email)
            if existing is not None and existing.id != user.id:
                raise AlreadyExists("Email already in use")
            user.email = email
    await db.flush()
    return user


async def change_password(db: AsyncSession, user: User, current_password: str, new_password: str) -> None:
    """
    Replace the caller's password and sign out every device.

    Raises:
        IncorrectPassword: If the current password does not match.
        ValidationFailed: If the new password is too weak.
    """
    if not verify_password(current_password, user.password_hash):
        raise IncorrectPassword
    try:
        validate_password_strength(new_password)
    except PasswordStrengthError as e:
        raise ValidationFailed(str(e)) from e

    user.password_hash = hash_password(new_password)
    revoked = await revoke_all_tokens(db, user.id)
    await db.flush()
    logger.info("password_changed", user_id=user.id, tokens_revoked=revoked)
