"""User schemas."""

from datetime import date, datetime
from typing import Any
from uuid import UUID

from pydantic import Field

from questlog.schemas.base import BaseSchema
from questlog.services.leveling import LevelInfo


class UserRead(BaseSchema):
    """Schema for reading user data."""

    id: UUID
    email: str
    display_name: str
    avatar_url: str | None
    preferences: dict[str, Any]
    created_at: datetime
    last_login_at: datetime | None


class UserProfile(UserRead):
    """The current user with study totals across all subjects."""

    total_minutes: int
    total_sessions: int
    total_xp: int
    current_streak: int = Field(..., description="Best current streak across subjects")
    longest_streak: int
    last_study_date: date | None
    level: LevelInfo


class UserUpdate(BaseSchema):
    """Schema for updating user profile."""

    display_name: str | None = Field(None, min_length=1, max_length=255)
    avatar_url: str | None = Field(None, max_length=1024)
    preferences: dict[str, Any] | None = None


class PublicUser(BaseSchema):
    """What the user switcher shows about other accounts."""

    id: UUID
    display_name: str
    avatar_url: str | None
    last_login_at: datetime | None
