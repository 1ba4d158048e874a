"""Whole-account export/import schemas."""

from datetime import date
from typing import Any

from pydantic import Field, model_validator

from questlog.schemas.base import BaseSchema
from questlog.schemas.goals import GoalBase
from questlog.schemas.pips import PipMap
from questlog.schemas.progress import Session, SubjectProgress
from questlog.schemas.templates import TemplateBase

EXPORT_VERSION = "4.0.0"


class GoalSnapshot(GoalBase):
    id: str = Field(..., min_length=1, max_length=64)


class TemplateSnapshot(TemplateBase):
    id: str = Field(..., min_length=1, max_length=64)


class AppSnapshot(BaseSchema):
    """Everything a user owns, keyed the way the app keeps it in memory."""

    subjects: dict[str, SubjectProgress] = Field(default_factory=dict)
    sessions: list[Session] = Field(default_factory=list)
    goals: list[GoalSnapshot] = Field(default_factory=list)
    pips: PipMap = Field(default_factory=dict)
    templates: list[TemplateSnapshot] = Field(default_factory=list)
    preferences: dict[str, Any] = Field(default_factory=lambda: {"dark": False})
    version: str = EXPORT_VERSION

    @model_validator(mode="after")
    def validate_references(self) -> "AppSnapshot":
        """Subject keys match config ids; sessions, goals and pips point at known subjects."""
        for key, subject in self.subjects.items():
            if subject.config.id != key:
                raise ValueError(f"subject key {key!r} does not match config id {subject.config.id!r}")
            if subject.longest_streak < subject.current_streak:
                raise ValueError(f"subject {key!r}: longest_streak is below current_streak")
        known = set(self.subjects)
        for session in self.sessions:
            if session.subject_id not in known:
                raise ValueError(f"session {session.id!r} references unknown subject {session.subject_id!r}")
        for goal in self.goals:
            if goal.subject_id and goal.subject_id not in known:
                raise ValueError(f"goal {goal.id!r} references unknown subject {goal.subject_id!r}")
        for day, counts in self.pips.items():
            date.fromisoformat(day)
            for subject_id in counts:
                if subject_id not in known:
                    raise ValueError(f"pips on {day} reference unknown subject {subject_id!r}")
        return self


class ImportSummary(BaseSchema):
    success: bool = True
    subjects: int
    sessions: int
    goals: int
    pips: int
    templates: int
