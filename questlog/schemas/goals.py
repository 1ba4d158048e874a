"""Goal schemas."""

from datetime import date, datetime
from typing import Literal

from pydantic import Field, model_validator

from questlog.schemas.base import BaseSchema

GoalTypeType = Literal["minutes", "sessions"]
PriorityType = Literal["H", "M", "L"]


class GoalBase(BaseSchema):
    """Base goal schema."""

    title: str = Field(..., min_length=1, max_length=255)
    subject_id: str | None = Field(None, max_length=64)
    type: GoalTypeType = "minutes"
    target: int = Field(..., gt=0)
    start_date: date
    due_date: date | None = None
    priority: PriorityType = "M"
    done: bool = False

    @model_validator(mode="after")
    def validate_dates(self) -> "GoalBase":
        """Ensure start_date <= due_date if both are set."""
        if self.due_date and self.start_date > self.due_date:
            raise ValueError("start_date must be on or before due_date")
        return self


class GoalCreate(GoalBase):
    """Schema for creating a goal."""

    id: str | None = Field(None, min_length=1, max_length=64)


class GoalRead(GoalBase):
    """Schema for reading goal data."""

    id: str
    created_at: datetime
    updated_at: datetime


class GoalUpdate(BaseSchema):
    """Schema for updating a goal. All fields optional."""

    title: str | None = Field(None, min_length=1, max_length=255)
    subject_id: str | None = Field(None, max_length=64)
    type: GoalTypeType | None = None
    target: int | None = Field(None, gt=0)
    start_date: date | None = None
    due_date: date | None = None
    priority: PriorityType | None = None
    done: bool | None = None


class GoalProgress(BaseSchema):
    """How far a goal has come, computed from recorded sessions."""

    goal_id: str
    type: GoalTypeType
    target: int
    achieved: int
    percent: float
    complete: bool
