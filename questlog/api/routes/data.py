"""
Whole-account export and import.

Endpoints:
- GET /data/export - Everything the user owns as one JSON document
- POST /data/import - Replace everything the user owns with a document

Import is all-or-nothing: it runs in the request's single transaction and
is rolled back if any part fails.
"""

import logging
from datetime import date
from typing import Any

from fastapi import APIRouter, Body, HTTPException, status
from pydantic import ValidationError
from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError

from questlog.api.deps import CurrentUser, DbSession
from questlog.config import sanitize_error
from questlog.db.models import Goal, PipCount, StudySession, Subject, UserTemplate
from questlog.schemas.data import AppSnapshot, GoalSnapshot, ImportSummary, TemplateSnapshot
from questlog.schemas.pips import PipMap
from questlog.schemas.progress import Session
from questlog.services.subjects import list_subject_rows, new_subject_row, subject_to_progress

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/data", tags=["data"])


@router.get("/export", response_model=AppSnapshot)
async def export_data(current_user: CurrentUser, db: DbSession) -> AppSnapshot:
    """Export subjects, sessions, goals, pips, templates and preferences."""
    uid = current_user.id
    subjects = {row.id: subject_to_progress(row) for row in await list_subject_rows(db, uid)}

    sessions = await db.execute(
        select(StudySession)
        .where(StudySession.user_id == uid)
        .order_by(StudySession.date, StudySession.created_at, StudySession.id)
    )
    goals = await db.execute(select(Goal).where(Goal.user_id == uid).order_by(Goal.created_at))
    pip_rows = await db.execute(
        select(PipCount).where(PipCount.user_id == uid).order_by(PipCount.date)
    )
    templates = await db.execute(
        select(UserTemplate).where(UserTemplate.user_id == uid).order_by(UserTemplate.name)
    )

    pips: PipMap = {}
    for pip in pip_rows.scalars():
        pips.setdefault(pip.date.isoformat(), {})[pip.subject_id] = pip.count

    return AppSnapshot(
        subjects=subjects,
        sessions=[Session.model_validate(s) for s in sessions.scalars()],
        goals=[GoalSnapshot.model_validate(g) for g in goals.scalars()],
        pips=pips,
        templates=[TemplateSnapshot.model_validate(t) for t in templates.scalars()],
        preferences=current_user.preferences or {},
    )


@router.post("/import", response_model=ImportSummary)
async def import_data(
    current_user: CurrentUser,
    db: DbSession,
    payload: dict[str, Any] = Body(...),
) -> ImportSummary:
    """
    Replace all of the user's data with an exported document.

    Progress counters and each session's xp_earned are taken as given, not
    recomputed. A session, goal or pip naming a subject missing from the
    document is a 400.
    """
    try:
        snapshot = AppSnapshot.model_validate(payload)
    except ValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=[error["msg"] for error in e.errors()],
        )

    uid = current_user.id
    for model in (StudySession, Goal, PipCount, UserTemplate, Subject):
        await db.execute(delete(model).where(model.user_id == uid))

    for progress in snapshot.subjects.values():
        db.add(new_subject_row(uid, progress.config, progress))
    await db.flush()

    db.add_all(StudySession(user_id=uid, **s.model_dump()) for s in snapshot.sessions)
    db.add_all(Goal(user_id=uid, **g.model_dump()) for g in snapshot.goals)
    pip_count = 0
    for day, counts in snapshot.pips.items():
        for subject_id, count in counts.items():
            db.add(
                PipCount(
                    user_id=uid,
                    date=date.fromisoformat(day),
                    subject_id=subject_id,
                    count=count,
                )
            )
            pip_count += 1
    db.add_all(
        UserTemplate(user_id=uid, **t.model_dump(mode="json", exclude={"id"}), id=t.id)
        for t in snapshot.templates
    )
    current_user.preferences = snapshot.preferences

    try:
        await db.flush()
    except IntegrityError as e:
        await db.rollback()
        logger.warning("Import for user %s conflicted: %s", uid, e.orig)
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Import conflicts with existing data: {sanitize_error(e.orig)}",
        )
    await db.commit()

    summary = ImportSummary(
        subjects=len(snapshot.subjects),
        sessions=len(snapshot.sessions),
        goals=len(snapshot.goals),
        pips=pip_count,
        templates=len(snapshot.templates),
    )
    logger.info("Imported data for user %s: %s", uid, summary.model_dump(exclude={"success"}))
    return summary
