"""Authentication router — all /api/v1/auth/* endpoints."""

from __future__ import annotations

from typing import Any

import structlog
from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from jgp.auth import pin as pin_service
from jgp.auth.dependencies import get_current_parent, get_current_user
from jgp.auth.schemas import (
    ChangePasswordRequest,
    ChangePinRequest,
    LoginRequest,
    RefreshRequest,
    RegisterRequest,
    SetPinRequest,
    TokensOut,
    UpdateProfileRequest,
    UserOut,
    VerifyPinRequest,
)
from jgp.auth.service import (
    TokenPair,
    authenticate_user,
    change_password,
    issue_tokens,
    register_user,
    revoke_all_tokens,
    revoke_refresh_token,
    rotate_refresh_token,
    update_profile,
)
from jgp.database import get_session
from jgp.db.models import Parent, User
from jgp.schemas import envelope

logger = structlog.get_logger()

router = APIRouter(prefix="/api/v1/auth", tags=["Authentication"])


def _tokens(pair: TokenPair) -> TokensOut:
    return TokensOut(
        access_token=pair.access_token,
        refresh_token=pair.refresh_token,
        expires_in=pair.expires_in,
    )


# ---------------------------------------------------------------------------
# Public
# ---------------------------------------------------------------------------


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(body: RegisterRequest, db: AsyncSession = Depends(get_session)) -> dict[str, Any]:
    """Create an account with its parent profile and sign it in."""
    user = await register_user(db, body.email, body.password)
    tokens = await issue_tokens(db, user)
    await db.commit()
    return envelope({"user": UserOut.from_user(user), "tokens": _tokens(tokens)})


@router.post("/login")
async def login(body: LoginRequest, db: AsyncSession = Depends(get_session)) -> dict[str, Any]:
    """Login with email + password."""
    user = await authenticate_user(db, body.email, body.password)
    tokens = await issue_tokens(db, user)
    await db.commit()
    return envelope({"user": UserOut.from_user(user), "tokens": _tokens(tokens)})


@router.post("/refresh")
async def refresh(body: RefreshRequest, db: AsyncSession = Depends(get_session)) -> dict[str, Any]:
    """Redeem a refresh token for a new token pair (rotation)."""
    _user, tokens = await rotate_refresh_token(db, body.refresh_token)
    await db.commit()
    return envelope({"tokens": _tokens(tokens)})


@router.post("/logout")
async def logout(request: Request, db: AsyncSession = Depends(get_session)) -> dict[str, Any]:
    """Revoke the presented refresh token. Always reports success, whatever the body."""
    try:
        body = await request.json()
    except ValueError:
        body = None
    refresh_token = body.get("refreshToken", body.get("refresh_token")) if isinstance(body, dict) else None

    if isinstance(refresh_token, str) and refresh_token:
        try:
            revoked = await revoke_refresh_token(db, refresh_token)
            await db.commit()
        except SQLAlchemyError as exc:
            await db.rollback()
            logger.warning("logout_revoke_failed", error=str(exc))
        else:
            logger.info("logout", revoked=revoked)
    return envelope({"message": "Logged out successfully"})


# ---------------------------------------------------------------------------
# Current user
# ---------------------------------------------------------------------------


@router.get("/me")
async def me(user: User = Depends(get_current_user)) -> dict[str, Any]:
    return envelope({"user": UserOut.from_user(user)})


@router.patch("/me")
async def update_me(
    body: UpdateProfileRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> dict[str, Any]:
    """Update the caller's profile (email)."""
    await update_profile(db, user, email=body.email)
    await db.commit()
    return envelope({"user": UserOut.from_user(user)})


@router.post("/change-password")
async def change_password_endpoint(
    body: ChangePasswordRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> dict[str, Any]:
    """Change password; every refresh token of the account is revoked."""
    await change_password(db, user, body.current_password, body.new_password)
    await db.commit()
    return envelope({"message": "Password changed successfully. Please log in again."})


@router.post("/logout-all")
async def logout_all(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> dict[str, Any]:
    """Sign out of every device."""
    count = await revoke_all_tokens(db, user.id)
    await db.commit()
    logger.info("logout_all", user_id=user.id, tokens_revoked=count)
    return envelope({"message": "Logged out from all devices", "revokedCount": count})


# ---------------------------------------------------------------------------
# PIN
# ---------------------------------------------------------------------------


@router.post("/set-pin", status_code=status.HTTP_201_CREATED)
async def set_pin(
    body: SetPinRequest,
    parent: Parent = Depends(get_current_parent),
    db: AsyncSession = Depends(get_session),
) -> dict[str, Any]:
    pin_service.set_pin(parent, body.pin)
    await db.commit()
    return envelope({"message": "PIN set successfully"})


@router.post("/verify-pin")
async def verify_pin(body: VerifyPinRequest, parent: Parent = Depends(get_current_parent)) -> dict[str, Any]:
    pin_service.check_pin(parent, body.pin)
    return envelope({"verified": True})


@router.patch("/change-pin")
async def change_pin(
    body: ChangePinRequest,
    parent: Parent = Depends(get_current_parent),
    db: AsyncSession = Depends(get_session),
) -> dict[str, Any]:
    pin_service.change_pin(parent, body.current_pin, body.new_pin)
    await db.commit()
    return envelope({"message": "PIN changed successfully"})


@router.get("/pin-status")
async def pin_status(parent: Parent = Depends(get_current_parent)) -> dict[str, Any]:
    return envelope({"hasPin": pin_service.has_pin(parent)})
