"""Subject CRUD schemas."""

from typing import Any

from pydantic import Field, field_validator

from questlog.schemas.base import BaseSchema
from questlog.schemas.progress import AchievementTier, QuestType, Resource, SubjectConfig


class SubjectCreate(BaseSchema):
    """
    Schema for creating a subject.

    id is optional (generated from the name when omitted); empty quest type
    and achievement lists fall back to the defaults.
    """

    id: str | None = Field(None, min_length=1, max_length=64, pattern=r"^[A-Za-z0-9_-]+$")
    name: str = Field(..., min_length=1, max_length=255)
    emoji: str = "📚"
    color: str = Field("#3B82F6", pattern=r"^#[0-9A-Fa-f]{6}$")
    quest_types: list[QuestType] = Field(default_factory=list)
    achievements: list[AchievementTier] = Field(default_factory=list)
    pip_amount: int = Field(5, gt=0)
    target_hours: float = Field(8.0, gt=0)
    resources: list[Resource] = Field(default_factory=list)
    custom_fields: dict[str, Any] = Field(default_factory=dict)


class SubjectUpdate(BaseSchema):
    """
    Schema for editing a subject's config. All fields optional.

    Progress counters are not editable here; they only move through the
    session ledger or a data import.
    """

    name: str | None = Field(None, min_length=1, max_length=255)
    emoji: str | None = None
    color: str | None = Field(None, pattern=r"^#[0-9A-Fa-f]{6}$")
    quest_types: list[QuestType] | None = None
    achievements: list[AchievementTier] | None = None
    pip_amount: int | None = Field(None, gt=0)
    target_hours: float | None = Field(None, gt=0)
    resources: list[Resource] | None = None
    custom_fields: dict[str, Any] | None = None

    @field_validator("achievements")
    @classmethod
    def sort_achievements(cls, v: list[AchievementTier] | None) -> list[AchievementTier] | None:
        if v is None:
            return v
        return sorted(v, key=lambda tier: tier.streak_required)


__all__ = ["SubjectConfig", "SubjectCreate", "SubjectUpdate"]
