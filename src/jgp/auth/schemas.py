"""Request/response schemas for authentication endpoints."""

from __future__ import annotations

from datetime import datetime

from pydantic import EmailStr, Field, field_validator

from jgp.db.models import User
from jgp.schemas import CamelModel

PIN_PATTERN = r"^[0-9]{4}$"


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------


class RegisterRequest(CamelModel):
    """Email + password registration."""

    email: EmailStr
    password: str = Field(..., min_length=1, max_length=128)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        """Normalize email to lowercase."""
        return v.lower().strip()


class LoginRequest(CamelModel):
    email: EmailStr
    password: str = Field(..., min_length=1, max_length=128)


class RefreshRequest(CamelModel):
    refresh_token: str = Field(..., min_length=1)


class UpdateProfileRequest(CamelModel):
    email: EmailStr | None = None


class ChangePasswordRequest(CamelModel):
    current_password: str = Field(..., min_length=1, max_length=128)
    new_password: str = Field(..., min_length=1, max_length=128)


class SetPinRequest(CamelModel):
    pin: str = Field(..., pattern=PIN_PATTERN)


class VerifyPinRequest(CamelModel):
    pin: str = Field(..., pattern=PIN_PATTERN)


class ChangePinRequest(CamelModel):
    current_pin: str = Field(..., pattern=PIN_PATTERN)
    new_pin: str = Field(..., pattern=PIN_PATTERN)


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------


class RoleOut(CamelModel):
    id: str
    name: str


class ParentOut(CamelModel):
    id: str
    has_pin: bool


class UserOut(CamelModel):
    """Public view of a user account."""

    id: str
    email: str
    is_active: bool
    is_verified: bool
    role: RoleOut
    parent: ParentOut | None = None
    created_at: datetime

    @classmethod
    def from_user(cls, user: User) -> UserOut:
        parent = None
        if user.parent is not None:
            parent = ParentOut(id=user.parent.id, has_pin=user.parent.pin_hash is not None)
        return cls(
            id=user.id,
            email=user.email,
            is_active=user.is_active,
            is_verified=user.is_verified,
            role=RoleOut(id=user.role.id, name=user.role.name),
            parent=parent,
            created_at=user.created_at,
        )


class TokensOut(CamelModel):
    access_token: str
    refresh_token: str
    expires_in: int
