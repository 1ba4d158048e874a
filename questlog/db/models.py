"""
SQLAlchemy 2.0 Models for Questlog.

Uses modern declarative syntax with Mapped[] type annotations.
Column types are portable between SQLite (default) and PostgreSQL.

Subject ids are opaque, user-chosen strings ("japanese", "math"), so
subjects are keyed by (user_id, id) and children reference that pair.
"""

from datetime import date, datetime
from enum import Enum as PyEnum
from typing import Any, Optional
from uuid import UUID, uuid4

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    Date,
    DateTime,
    Float,
    ForeignKey,
    ForeignKeyConstraint,
    Index,
    Integer,
    String,
    Text,
    Uuid,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from questlog.db.base import Base


# =============================================================================
# ENUMS
# =============================================================================


class GoalType(str, PyEnum):
    """What a goal counts."""

    MINUTES = "minutes"
    SESSIONS = "sessions"


class Priority(str, PyEnum):
    """High / medium / low, shared by goals and resources."""

    HIGH = "H"
    MEDIUM = "M"
    LOW = "L"


# =============================================================================
# MODELS
# =============================================================================


class User(Base):
    """
    Core user account.

    Credentials are a bcrypt password hash; login sessions live in
    user_sessions so a token can be revoked before it expires.
    """

    __tablename__ = "users"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True, nullable=False)
    display_name: Mapped[str] = mapped_column(String(255), nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    avatar_url: Mapped[Optional[str]] = mapped_column(String(1024), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    preferences: Mapped[dict[str, Any]] = mapped_column(
        JSON, nullable=False, default=lambda: {"dark": False}
    )
    last_login_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )

    # Relationships
    login_sessions: Mapped[list["LoginSession"]] = relationship(
        "LoginSession", back_populates="user", passive_deletes=True
    )
    subjects: Mapped[list["Subject"]] = relationship(
        "Subject", back_populates="user", passive_deletes=True
    )
    settings: Mapped[Optional["UserSettings"]] = relationship(
        "UserSettings", back_populates="user", uselist=False, passive_deletes=True
    )


class LoginSession(Base):
    """
    A bearer-token login.

    The JWT's jti claim is this row's id. Logout and refresh flip
    is_active instead of deleting so the audit trail survives.
    """

    __tablename__ = "user_sessions"
    __table_args__ = (Index("idx_user_sessions_user_active", "user_id", "is_active"),)

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    user_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    user_agent: Mapped[str] = mapped_column(String(512), nullable=False, default="")
    ip_address: Mapped[str] = mapped_column(String(64), nullable=False, default="unknown")
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    last_used_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    user: Mapped["User"] = relationship("User", back_populates="login_sessions")


class Subject(Base):
    """
    A tracked subject: its editable config plus its progress counters.

    Config lists (quest types, achievements, resources) are stored as JSON.
    Progress columns are only written by the session ledger or by a data import.
    """

    __tablename__ = "subjects"
    __table_args__ = (
        CheckConstraint("longest_streak >= current_streak", name="longest_ge_current"),
        CheckConstraint("current_streak >= 0", name="current_streak_non_negative"),
    )

    user_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True
    )
    id: Mapped[str] = mapped_column(String(64), primary_key=True)

    # Config
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    emoji: Mapped[str] = mapped_column(String(32), nullable=False, default="📚")
    color: Mapped[str] = mapped_column(String(7), nullable=False, default="#3B82F6")
    quest_types: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)
    achievements: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)
    pip_amount: Mapped[int] = mapped_column(Integer, nullable=False, default=5)
    target_hours: Mapped[float] = mapped_column(Float, nullable=False, default=8.0)
    resources: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)
    custom_fields: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)

    # Progress
    total_minutes: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    current_streak: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    longest_streak: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    achievement_level: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    last_study_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    total_xp: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )

    user: Mapped["User"] = relationship("User", back_populates="subjects")


class StudySession(Base):
    """
    One recorded study session. Append-only.

    xp_earned is captured when the session is created and never recomputed,
    even if the subject's quest types change later.
    """

    __tablename__ = "sessions"
    __table_args__ = (
        ForeignKeyConstraint(
            ["user_id", "subject_id"],
            ["subjects.user_id", "subjects.id"],
            ondelete="CASCADE",
        ),
        Index("idx_sessions_user_date", "user_id", "date"),
        Index("idx_sessions_user_subject", "user_id", "subject_id"),
    )

    user_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True
    )
    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    subject_id: Mapped[str] = mapped_column(String(64), nullable=False)
    duration: Mapped[int] = mapped_column(Integer, nullable=False)
    date: Mapped[date] = mapped_column(Date, nullable=False)
    notes: Mapped[str] = mapped_column(Text, nullable=False, default="")
    quest_type: Mapped[str] = mapped_column(String(64), nullable=False)
    xp_earned: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )


class Goal(Base):
    """A user goal, optionally tied to a subject."""

    __tablename__ = "goals"
    __table_args__ = (
        ForeignKeyConstraint(
            ["user_id", "subject_id"],
            ["subjects.user_id", "subjects.id"],
            ondelete="CASCADE",
        ),
        Index("idx_goals_user_id", "user_id"),
    )

    user_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True
    )
    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    subject_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    type: Mapped[str] = mapped_column(String(16), nullable=False, default=GoalType.MINUTES.value)
    target: Mapped[int] = mapped_column(Integer, nullable=False)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    due_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    priority: Mapped[str] = mapped_column(String(1), nullable=False, default=Priority.MEDIUM.value)
    done: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )


class PipCount(Base):
    """How many quick pips were tapped for a subject on a given day."""

    __tablename__ = "pips"
    __table_args__ = (
        ForeignKeyConstraint(
            ["user_id", "subject_id"],
            ["subjects.user_id", "subjects.id"],
            ondelete="CASCADE",
        ),
    )

    user_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True
    )
    date: Mapped[date] = mapped_column(Date, primary_key=True)
    subject_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )


class UserTemplate(Base):
    """A saved bundle of subject configs and default goals."""

    __tablename__ = "user_templates"

    user_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True
    )
    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    category: Mapped[str] = mapped_column(String(64), nullable=False, default="custom")
    author: Mapped[str] = mapped_column(String(255), nullable=False, default="User")
    version: Mapped[str] = mapped_column(String(32), nullable=False, default="1.0.0")
    subjects: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)
    default_goals: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )


class UserSettings(Base):
    """Per-user app settings (one row per user)."""

    __tablename__ = "user_settings"

    user_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True
    )
    theme_preference: Mapped[str] = mapped_column(String(16), nullable=False, default="light")
    language: Mapped[str] = mapped_column(String(16), nullable=False, default="en")
    study_reminders: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    reminder_times: Mapped[list[str]] = mapped_column(
        JSON, nullable=False, default=lambda: ["09:00", "14:00", "19:00"]
    )
    break_reminders: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    achievement_notifications: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    weekly_reports: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    pip_notification_sound: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    quest_complete_sound: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    daily_goal_minutes: Mapped[int] = mapped_column(Integer, nullable=False, default=60)
    weekly_goal_minutes: Mapped[int] = mapped_column(Integer, nullable=False, default=420)
    auto_save_interval: Mapped[int] = mapped_column(Integer, nullable=False, default=300)
    dashboard_layout: Mapped[str] = mapped_column(String(16), nullable=False, default="grid")
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )

    user: Mapped["User"] = relationship("User", back_populates="settings")


class KeyValueEntry(Base):
    """
    Namespaced key-value blob with optional expiry.

    Backs ad-hoc session blobs and the rate limiter's window counters.
    """

    __tablename__ = "kv_entries"
    __table_args__ = (Index("idx_kv_entries_expires_at", "expires_at"),)

    namespace: Mapped[str] = mapped_column(String(64), primary_key=True)
    key: Mapped[str] = mapped_column(String(512), primary_key=True)
    value: Mapped[Any] = mapped_column(JSON, nullable=True)
    expires_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )
