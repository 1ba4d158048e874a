"""Subject CRUD routes."""

import re
from uuid import uuid4

from fastapi import APIRouter, HTTPException, status

from questlog.api.deps import CurrentUser, DbSession, get_user_resource_or_404
from questlog.db.models import Subject
from questlog.schemas.progress import SubjectConfig, SubjectProgress
from questlog.schemas.subjects import SubjectCreate, SubjectUpdate
from questlog.services.defaults import default_achievements, default_quest_types
from questlog.services.ledger import achievement_level_for
from questlog.services.subjects import (
    config_columns,
    delete_subject_cascade,
    existing_subject_ids,
    list_subject_rows,
    new_subject_row,
    subject_to_config,
    subject_to_progress,
)

router = APIRouter(prefix="/subjects", tags=["subjects"])


def _slugify(name: str) -> str:
    slug = re.sub(r"[^a-z0-9]+", "-", name.lower()).strip("-")
    return slug[:48] or "subject"


@router.get("/", response_model=list[SubjectProgress])
async def list_subjects(current_user: CurrentUser, db: DbSession) -> list[SubjectProgress]:
    """List all subjects with their progress."""
    rows = await list_subject_rows(db, current_user.id)
    return [subject_to_progress(row) for row in rows]


@router.post("/", response_model=SubjectProgress, status_code=status.HTTP_201_CREATED)
async def create_subject(
    data: SubjectCreate,
    current_user: CurrentUser,
    db: DbSession,
) -> SubjectProgress:
    """
    Create a subject with zeroed progress.

    Without an explicit id, one is derived from the name (suffixed if taken).
    """
    taken = await existing_subject_ids(db, current_user.id)
    subject_id = data.id
    if subject_id is None:
        subject_id = _slugify(data.name)
        if subject_id in taken:
            subject_id = f"{subject_id}-{uuid4().hex[:6]}"
    elif subject_id in taken:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Subject '{subject_id}' already exists",
        )

    config = SubjectConfig(
        **data.model_dump(exclude={"id", "quest_types", "achievements"}),
        id=subject_id,
        quest_types=data.quest_types or default_quest_types(),
        achievements=data.achievements or default_achievements(),
    )
    row = new_subject_row(current_user.id, config)
    db.add(row)
    await db.commit()
    return subject_to_progress(row)


@router.get("/{subject_id}", response_model=SubjectProgress)
async def get_subject(
    subject_id: str,
    current_user: CurrentUser,
    db: DbSession,
) -> SubjectProgress:
    """Get a specific subject by ID."""
    row = await get_user_resource_or_404(db, Subject, subject_id, current_user.id)
    return subject_to_progress(row)


@router.patch("/{subject_id}", response_model=SubjectProgress)
async def update_subject(
    subject_id: str,
    data: SubjectUpdate,
    current_user: CurrentUser,
    db: DbSession,
) -> SubjectProgress:
    """
    Edit a subject's config. Progress counters are untouched, except that a
    new achievement ladder re-derives the tier index from the current streak.
    """
    row = await get_user_resource_or_404(db, Subject, subject_id, current_user.id)
    updates = data.model_dump(exclude_unset=True, exclude_none=True)
    merged = subject_to_config(row).model_dump()
    merged.update(updates)
    config = SubjectConfig.model_validate(merged)
    for key, value in config_columns(config).items():
        setattr(row, key, value)
    if "achievements" in updates:
        row.achievement_level = achievement_level_for(config.achievements, row.current_streak, 0)
    await db.commit()
    return subject_to_progress(row)


@router.delete("/{subject_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_subject(
    subject_id: str,
    current_user: CurrentUser,
    db: DbSession,
) -> None:
    """Delete a subject along with its sessions, goals and pip counters."""
    row = await get_user_resource_or_404(db, Subject, subject_id, current_user.id)
    await delete_subject_cascade(db, row)
    await db.commit()
