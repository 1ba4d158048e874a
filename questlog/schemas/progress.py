"""Subject config, progress and session schemas shared by the ledger, API and client."""

from datetime import date
from typing import Any, Literal

from pydantic import Field, field_validator

from questlog.schemas.base import BaseSchema

PriorityType = Literal["H", "M", "L"]


class QuestType(BaseSchema):
    """A named session category with an expected duration and XP reward."""

    id: str = Field(..., min_length=1, max_length=64)
    name: str = Field(..., min_length=1, max_length=100)
    duration: int = Field(..., ge=0, description="Expected minutes")
    xp: int = Field(..., ge=0)
    emoji: str = ""


class AchievementTier(BaseSchema):
    """A milestone unlocked once the current streak reaches streak_required days."""

    id: str = Field(..., min_length=1, max_length=64)
    name: str = Field(..., min_length=1, max_length=100)
    emoji: str = ""
    streak_required: int = Field(..., ge=0)


class Resource(BaseSchema):
    """A study link attached to a subject."""

    id: str = Field(..., min_length=1, max_length=64)
    title: str = Field(..., min_length=1, max_length=255)
    url: str = Field(..., min_length=1, max_length=2048)
    priority: PriorityType = "M"


class SubjectConfig(BaseSchema):
    """User-editable subject template."""

    id: str = Field(..., min_length=1, max_length=64)
    name: str = Field(..., min_length=1, max_length=255)
    emoji: str = "📚"
    color: str = Field("#3B82F6", pattern=r"^#[0-9A-Fa-f]{6}$")
    quest_types: list[QuestType] = Field(default_factory=list)
    achievements: list[AchievementTier] = Field(default_factory=list)
    pip_amount: int = Field(5, gt=0)
    target_hours: float = Field(8.0, gt=0)
    resources: list[Resource] = Field(default_factory=list)
    custom_fields: dict[str, Any] = Field(default_factory=dict)

    @field_validator("achievements")
    @classmethod
    def sort_achievements(cls, v: list[AchievementTier]) -> list[AchievementTier]:
        """Keep tiers ascending by streak_required; tier lookup depends on it."""
        return sorted(v, key=lambda tier: tier.streak_required)


class SubjectProgress(BaseSchema):
    """Per-user progress on one subject."""

    config: SubjectConfig
    total_minutes: int = 0
    current_streak: int = Field(0, ge=0)
    longest_streak: int = Field(0, ge=0)
    achievement_level: int = Field(0, ge=0)
    last_study_date: date | None = None
    total_xp: int = 0


class SessionDraft(BaseSchema):
    """
    A session about to be recorded.

    duration is deliberately unconstrained here; request schemas reject
    non-positive values before a draft is built.
    """

    subject_id: str
    duration: int
    date: date
    notes: str = ""
    quest_type: str


class Session(SessionDraft):
    """A recorded session. xp_earned is fixed at creation time."""

    id: str
    xp_earned: int = 0


class LedgerResult(BaseSchema):
    """Outcome of applying one session to a subject."""

    after: SubjectProgress
    session: Session


class ProgressEvent(BaseSchema):
    """A notification-worthy change between two progress snapshots."""

    kind: Literal["achievement_unlocked", "milestone_reached"]
    subject_id: str
    message: str
    achievement: AchievementTier | None = None
    minutes: int | None = None
