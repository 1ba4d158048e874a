"""Mapping between Subject rows and the config/progress schemas."""

import logging
from typing import Any
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from questlog.db.models import Goal, PipCount, StudySession, Subject
from questlog.schemas.progress import SubjectConfig, SubjectProgress
from questlog.services.defaults import default_subjects

logger = logging.getLogger(__name__)

PROGRESS_FIELDS = (
    "total_minutes",
    "current_streak",
    "longest_streak",
    "achievement_level",
    "last_study_date",
    "total_xp",
)


def config_columns(config: SubjectConfig) -> dict[str, Any]:
    """Column values for a config (everything except the id)."""
    return config.model_dump(mode="json", exclude={"id"})


def subject_to_config(row: Subject) -> SubjectConfig:
    return SubjectConfig(
        id=row.id,
        name=row.name,
        emoji=row.emoji,
        color=row.color,
        quest_types=row.quest_types or [],
        achievements=row.achievements or [],
        pip_amount=row.pip_amount,
        target_hours=row.target_hours,
        resources=row.resources or [],
        custom_fields=row.custom_fields or {},
    )


def subject_to_progress(row: Subject) -> SubjectProgress:
    return SubjectProgress(
        config=subject_to_config(row),
        **{field: getattr(row, field) for field in PROGRESS_FIELDS},
    )


def write_progress(row: Subject, progress: SubjectProgress) -> None:
    """Copy progress counters onto a row. Config columns are left alone."""
    for field in PROGRESS_FIELDS:
        setattr(row, field, getattr(progress, field))


def new_subject_row(
    user_id: UUID,
    config: SubjectConfig,
    progress: SubjectProgress | None = None,
) -> Subject:
    """Build a Subject row; counters start at zero unless progress is given."""
    row = Subject(
        user_id=user_id,
        id=config.id,
        **config_columns(config),
        total_minutes=0,
        current_streak=0,
        longest_streak=0,
        achievement_level=0,
        last_study_date=None,
        total_xp=0,
    )
    if progress is not None:
        write_progress(row, progress)
    return row


async def list_subject_rows(db: AsyncSession, user_id: UUID) -> list[Subject]:
    result = await db.execute(
        select(Subject).where(Subject.user_id == user_id).order_by(Subject.created_at, Subject.id)
    )
    return list(result.scalars())


async def existing_subject_ids(db: AsyncSession, user_id: UUID) -> set[str]:
    result = await db.execute(select(Subject.id).where(Subject.user_id == user_id))
    return set(result.scalars())


async def seed_default_subjects(db: AsyncSession, user_id: UUID) -> int:
    """Insert the starter subjects a user doesn't already have."""
    existing = await existing_subject_ids(db, user_id)
    added = 0
    for config in default_subjects():
        if config.id in existing:
            continue
        db.add(new_subject_row(user_id, config))
        added += 1
    await db.flush()
    logger.info("Seeded %d default subjects for user %s", added, user_id)
    return added


async def delete_subject_cascade(db: AsyncSession, row: Subject) -> None:
    """Delete a subject with its sessions, goals and pip counters."""
    for model in (StudySession, Goal, PipCount):
        await db.execute(
            delete(model).where(model.user_id == row.user_id, model.subject_id == row.id)
        )
    await db.delete(row)
