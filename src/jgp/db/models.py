"""ORM models for accounts, children, drills, sessions, streaks and the avatar shop.

Primary keys are UUID strings so the same models run on PostgreSQL and SQLite.
"""

from __future__ import annotations

import enum
import uuid
from datetime import date, datetime, timezone
from typing import Any

from sqlalchemy import (
    Boolean,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from jgp.db.base import Base, JSONDocument


def _uuid() -> str:
    return str(uuid.uuid4())


def _now() -> datetime:
    return datetime.now(timezone.utc)


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------


class AgeBand(str, enum.Enum):
    AGE_4_6 = "AGE_4_6"
    AGE_6_8 = "AGE_6_8"
    AGE_8_10 = "AGE_8_10"


class SkillLevel(str, enum.Enum):
    BEGINNER = "BEGINNER"
    INTERMEDIATE = "INTERMEDIATE"
    ADVANCED = "ADVANCED"


class SessionStatus(str, enum.Enum):
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    ABANDONED = "ABANDONED"


class ItemType(str, enum.Enum):
    HAT = "HAT"
    SHIRT = "SHIRT"
    SHOES = "SHOES"
    ACCESSORY = "ACCESSORY"
    CLUB_SKIN = "CLUB_SKIN"


class Rarity(str, enum.Enum):
    COMMON = "COMMON"
    UNCOMMON = "UNCOMMON"
    RARE = "RARE"
    EPIC = "EPIC"
    LEGENDARY = "LEGENDARY"


# ---------------------------------------------------------------------------
# Roles & permissions
# ---------------------------------------------------------------------------


class Role(Base):
    """Named bundle of permissions."""

    __tablename__ = "roles"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    name: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    description: Mapped[str | None] = mapped_column(String(256), nullable=True)

    permissions: Mapped[list[RolePermission]] = relationship("RolePermission", back_populates="role")


class Permission(Base):
    """Capability key such as 'children:write'."""

    __tablename__ = "permissions"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    name: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    description: Mapped[str | None] = mapped_column(String(256), nullable=True)


class RolePermission(Base):
    """Role <-> permission join row."""

    __tablename__ = "role_permissions"
    __table_args__ = (UniqueConstraint("role_id", "permission_id", name="uq_role_permission"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    role_id: Mapped[str] = mapped_column(String(36), ForeignKey("roles.id", ondelete="CASCADE"), nullable=False)
    permission_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("permissions.id", ondelete="CASCADE"), nullable=False
    )

    role: Mapped[Role] = relationship("Role", back_populates="permissions")
    permission: Mapped[Permission] = relationship("Permission")


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------


class User(Base):
    """Account identity. Owns at most one Parent profile."""

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    email: Mapped[str] = mapped_column(String(320), unique=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String(256), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    is_verified: Mapped[bool] = mapped_column(Boolean, default=False)
    role_id: Mapped[str] = mapped_column(String(36), ForeignKey("roles.id"), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_now, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_now, onupdate=_now)

    role: Mapped[Role] = relationship("Role", lazy="joined")
    parent: Mapped[Parent | None] = relationship("Parent", back_populates="user", uselist=False, lazy="joined")
    refresh_tokens: Mapped[list[RefreshToken]] = relationship("RefreshToken", back_populates="user")


class RefreshToken(Base):
    """Opaque refresh token, stored only as a keyed hash."""

    __tablename__ = "refresh_tokens"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    user_id: Mapped[str] = mapped_column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    token_hash: Mapped[str] = mapped_column(String(128), unique=True, nullable=False)
    issued_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_now, nullable=False)
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    revoked_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    user: Mapped[User] = relationship("User", back_populates="refresh_tokens")


class Parent(Base):
    """1:1 extension of User with the settings blob and the optional PIN."""

    __tablename__ = "parents"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    user_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False
    )
    settings: Mapped[dict[str, Any]] = mapped_column(JSONDocument, default=dict, nullable=False)
    pin_hash: Mapped[str | None] = mapped_column(String(256), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_now, nullable=False)

    user: Mapped[User] = relationship("User", back_populates="parent")
    children: Mapped[list[Child]] = relationship("Child", back_populates="parent")


class UserSettings(Base):
    """Per-user app preferences."""

    __tablename__ = "user_settings"

    user_id: Mapped[str] = mapped_column(String(36), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    notifications_enabled: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    daily_reminder_time: Mapped[str | None] = mapped_column(String(5), nullable=True)
    sound_enabled: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    theme: Mapped[str] = mapped_column(String(16), default="light", nullable=False)
    language: Mapped[str] = mapped_column(String(8), default="en", nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_now, onupdate=_now)


# ---------------------------------------------------------------------------
# Children
# ---------------------------------------------------------------------------


class Child(Base):
    """Child profile owned by exactly one parent."""

    __tablename__ = "children"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    parent_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("parents.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(50), nullable=False)
    age_band: Mapped[str] = mapped_column(String(16), nullable=False)
    skill_level: Mapped[str] = mapped_column(String(16), default=SkillLevel.BEGINNER.value, nullable=False)
    total_stars: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    available_stars: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    avatar_state: Mapped[dict[str, Any]] = mapped_column(JSONDocument, default=dict, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_now, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_now, onupdate=_now)

    parent: Mapped[Parent] = relationship("Parent", back_populates="children")
    sessions: Mapped[list[PracticeSession]] = relationship(
        "PracticeSession", back_populates="child", cascade="all, delete-orphan", passive_deletes=True
    )
    streak: Mapped[Streak | None] = relationship(
        "Streak", back_populates="child", uselist=False, cascade="all, delete-orphan", passive_deletes=True
    )
    unlocked_items: Mapped[list[ChildAvatarItem]] = relationship(
        "ChildAvatarItem", back_populates="child", cascade="all, delete-orphan", passive_deletes=True
    )


# ---------------------------------------------------------------------------
# Drills
# ---------------------------------------------------------------------------


class Drill(Base):
    """Catalogue entry. Reference content, administered outside the API."""

    __tablename__ = "drills"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=_uuid)
    title: Mapped[str] = mapped_column(String(128), nullable=False)
    age_band: Mapped[str] = mapped_column(String(16), nullable=False, index=True)
    skill_category: Mapped[str] = mapped_column(String(32), nullable=False, index=True)
    duration_minutes: Mapped[int] = mapped_column(Integer, nullable=False)
    setup: Mapped[str] = mapped_column(Text, nullable=False, default="")
    child_action: Mapped[str] = mapped_column(Text, nullable=False, default="")
    parent_cue: Mapped[str] = mapped_column(Text, nullable=False, default="")
    common_mistakes: Mapped[str] = mapped_column(Text, nullable=False, default="")
    success_criteria: Mapped[str] = mapped_column(Text, nullable=False, default="")
    image_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    video_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_premium: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)


# ---------------------------------------------------------------------------
# Sessions
# ---------------------------------------------------------------------------


class PracticeSession(Base):
    """One practice attempt by one child."""

    __tablename__ = "sessions"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    child_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("children.id", ondelete="CASCADE"), nullable=False, index=True
    )
    status: Mapped[str] = mapped_column(String(16), default=SessionStatus.IN_PROGRESS.value, nullable=False)
    total_stars_earned: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    started_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_now, nullable=False)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    child: Mapped[Child] = relationship("Child", back_populates="sessions")
    drills: Mapped[list[SessionDrill]] = relationship(
        "SessionDrill",
        back_populates="session",
        order_by="SessionDrill.order",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


class SessionDrill(Base):
    """One drill instance within one session."""

    __tablename__ = "session_drills"
    __table_args__ = (UniqueConstraint("session_id", "order", name="uq_session_drill_order"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    session_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("sessions.id", ondelete="CASCADE"), nullable=False, index=True
    )
    drill_id: Mapped[str] = mapped_column(String(64), ForeignKey("drills.id"), nullable=False)
    order: Mapped[int] = mapped_column(Integer, nullable=False)
    completed: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    stars_earned: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    verified_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    session: Mapped[PracticeSession] = relationship("PracticeSession", back_populates="drills")
    drill: Mapped[Drill] = relationship("Drill", lazy="joined")


# ---------------------------------------------------------------------------
# Streaks
# ---------------------------------------------------------------------------


class Streak(Base):
    """Rolling weekly-goal streak, one per child."""

    __tablename__ = "streaks"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    child_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("children.id", ondelete="CASCADE"), unique=True, nullable=False
    )
    current_streak: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    longest_streak: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    weekly_session_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    week_start_date: Mapped[date] = mapped_column(Date, nullable=False)
    last_session_date: Mapped[date | None] = mapped_column(Date, nullable=True)

    child: Mapped[Child] = relationship("Child", back_populates="streak")


# ---------------------------------------------------------------------------
# Avatar shop
# ---------------------------------------------------------------------------


class AvatarItem(Base):
    """Purchasable avatar item."""

    __tablename__ = "avatar_items"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=_uuid)
    name: Mapped[str] = mapped_column(String(64), nullable=False)
    type: Mapped[str] = mapped_column(String(16), nullable=False, index=True)
    image_url: Mapped[str] = mapped_column(Text, nullable=False, default="")
    unlock_stars: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    is_premium: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    rarity: Mapped[str] = mapped_column(String(16), default=Rarity.COMMON.value, nullable=False)


class ChildAvatarItem(Base):
    """Ownership of an avatar item by a child, with its equip flag."""

    __tablename__ = "child_avatar_items"
    __table_args__ = (UniqueConstraint("child_id", "item_id", name="uq_child_avatar_item"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    child_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("children.id", ondelete="CASCADE"), nullable=False, index=True
    )
    item_id: Mapped[str] = mapped_column(String(64), ForeignKey("avatar_items.id"), nullable=False)
    equipped: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    unlocked_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_now, nullable=False)

    child: Mapped[Child] = relationship("Child", back_populates="unlocked_items")
    item: Mapped[AvatarItem] = relationship("AvatarItem", lazy="joined")
