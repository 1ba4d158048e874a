"""
Study session routes.

Endpoints:
- POST /sessions - Record a session (runs the ledger rule on stored progress)
- POST /sessions/pip - One-tap quick add of the subject's pip amount
- GET /sessions - List sessions, newest first
- GET /sessions/{id} - Get one session

Sessions are append-only: there is no update or delete. Concurrent writes
to the same subject are last-writer-wins.
"""

import logging
from datetime import date

from fastapi import APIRouter, HTTPException, Query, status
from sqlalchemy import select

from questlog.api.deps import CurrentUser, DbSession, get_user_resource_or_404
from questlog.config import get_settings
from questlog.db.models import PipCount, StudySession, Subject
from questlog.schemas.progress import LedgerResult, SubjectProgress
from questlog.schemas.sessions import PipCreate, SessionCreate, SessionRead, SessionRecorded
from questlog.services.ledger import apply_session, quick_pip
from questlog.services.progress_events import diff_progress
from questlog.services.subjects import subject_to_progress, write_progress

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/sessions", tags=["sessions"])
settings = get_settings()


def _persist(db: DbSession, row: Subject, user_id, result: LedgerResult) -> None:
    write_progress(row, result.after)
    db.add(StudySession(user_id=user_id, **result.session.model_dump()))


def _recorded(
    before: SubjectProgress, result: LedgerResult, pip_count: int | None = None
) -> SessionRecorded:
    return SessionRecorded(
        session=result.session,
        subject=result.after,
        events=diff_progress(before, result.after, settings.minute_milestones),
        pip_count=pip_count,
    )


@router.post("/", response_model=SessionRecorded, status_code=status.HTTP_201_CREATED)
async def record_session(
    data: SessionCreate,
    current_user: CurrentUser,
    db: DbSession,
) -> SessionRecorded:
    """
    Record a study session against a subject.

    The stored progress is the "before" snapshot; the updated snapshot and
    the finalized session (with its captured xp_earned) are saved together.
    """
    row = await get_user_resource_or_404(db, Subject, data.subject_id, current_user.id)
    before = subject_to_progress(row)
    result = apply_session(before, data.to_draft())

    _persist(db, row, current_user.id, result)
    await db.commit()
    logger.debug(
        "Recorded %s (%d min, %d xp) on %s",
        result.session.id,
        result.session.duration,
        result.session.xp_earned,
        row.id,
    )
    return _recorded(before, result)


@router.post("/pip", response_model=SessionRecorded, status_code=status.HTTP_201_CREATED)
async def record_pip(
    data: PipCreate,
    current_user: CurrentUser,
    db: DbSession,
) -> SessionRecorded:
    """
    Quick-add the subject's pip amount as a session of the lowest-effort quest.

    Returns 409 once the day's pip cap for the subject is reached.
    """
    row = await get_user_resource_or_404(db, Subject, data.subject_id, current_user.id)
    pip = await db.get(PipCount, (current_user.id, data.date, data.subject_id))
    if pip is not None and pip.count >= settings.max_pips_per_day:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Pip limit of {settings.max_pips_per_day} reached for {data.date.isoformat()}",
        )

    before = subject_to_progress(row)
    result = quick_pip(before, data.date)
    _persist(db, row, current_user.id, result)

    if pip is None:
        pip = PipCount(user_id=current_user.id, date=data.date, subject_id=data.subject_id, count=0)
        db.add(pip)
    pip.count += 1
    pip_count = pip.count

    await db.commit()
    return _recorded(before, result, pip_count=pip_count)


@router.get("/", response_model=list[SessionRead])
async def list_sessions(
    current_user: CurrentUser,
    db: DbSession,
    subject_id: str | None = None,
    date_from: date | None = None,
    date_to: date | None = None,
    limit: int = Query(100, ge=1, le=1000),
) -> list[SessionRead]:
    """
    List sessions for the current user, newest first.

    Filters:
    - subject_id: Only this subject
    - date_from/date_to: Inclusive date range
    """
    query = select(StudySession).where(StudySession.user_id == current_user.id)

    if subject_id:
        query = query.where(StudySession.subject_id == subject_id)
    if date_from:
        query = query.where(StudySession.date >= date_from)
    if date_to:
        query = query.where(StudySession.date <= date_to)

    query = query.order_by(StudySession.date.desc(), StudySession.created_at.desc()).limit(limit)

    result = await db.execute(query)
    return [SessionRead.model_validate(s) for s in result.scalars()]


@router.get("/{session_id}", response_model=SessionRead)
async def get_session(
    session_id: str,
    current_user: CurrentUser,
    db: DbSession,
) -> SessionRead:
    """Get a specific session by ID."""
    session = await get_user_resource_or_404(db, StudySession, session_id, current_user.id)
    return SessionRead.model_validate(session)
