"""User template schemas."""

from datetime import date, datetime

from pydantic import Field

from questlog.schemas.base import BaseSchema
from questlog.schemas.goals import GoalTypeType, PriorityType
from questlog.schemas.progress import SubjectConfig


class TemplateGoal(BaseSchema):
    """A goal shipped with a template (no id or subject yet)."""

    title: str = Field(..., min_length=1, max_length=255)
    type: GoalTypeType = "minutes"
    target: int = Field(..., gt=0)
    start_date: date | None = None
    due_date: date | None = None
    priority: PriorityType = "M"
    done: bool = False


class TemplateBase(BaseSchema):
    """Base template schema."""

    name: str = Field(..., min_length=1, max_length=255)
    description: str = ""
    category: str = Field("custom", max_length=64)
    author: str = Field("User", max_length=255)
    version: str = Field("1.0.0", max_length=32)
    subjects: list[SubjectConfig] = Field(default_factory=list)
    default_goals: list[TemplateGoal] = Field(default_factory=list)


class TemplateUpsert(TemplateBase):
    """Schema for creating or replacing a template."""

    pass


class TemplateRead(TemplateBase):
    """Schema for reading template data."""

    id: str
    created_at: datetime
    updated_at: datetime


class TemplateApplied(BaseSchema):
    """Result of applying a template: subject ids created or already present, goal ids created."""

    created: list[str]
    skipped: list[str]
    goals: list[str] = Field(default_factory=list)
