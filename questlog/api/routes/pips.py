"""Pip counter routes."""

from datetime import date

from fastapi import APIRouter, status
from sqlalchemy import select

from questlog.api.deps import CurrentUser, DbSession, get_user_resource_or_404
from questlog.db.models import PipCount, Subject
from questlog.schemas.pips import PipCountSet, PipMap

router = APIRouter(prefix="/pips", tags=["pips"])


@router.get("/", response_model=PipMap)
async def list_pips(
    current_user: CurrentUser,
    db: DbSession,
    date_from: date | None = None,
    date_to: date | None = None,
) -> PipMap:
    """Pip counts keyed by ISO date, then subject id."""
    query = select(PipCount).where(PipCount.user_id == current_user.id)
    if date_from:
        query = query.where(PipCount.date >= date_from)
    if date_to:
        query = query.where(PipCount.date <= date_to)
    query = query.order_by(PipCount.date, PipCount.subject_id)

    pips: PipMap = {}
    for pip in (await db.execute(query)).scalars():
        pips.setdefault(pip.date.isoformat(), {})[pip.subject_id] = pip.count
    return pips


@router.put("/", response_model=PipCountSet, status_code=status.HTTP_200_OK)
async def set_pip_count(
    data: PipCountSet,
    current_user: CurrentUser,
    db: DbSession,
) -> PipCountSet:
    """Set a subject's pip counter for a day. Does not touch progress."""
    await get_user_resource_or_404(db, Subject, data.subject_id, current_user.id)
    pip = await db.get(PipCount, (current_user.id, data.date, data.subject_id))
    if pip is None:
        pip = PipCount(user_id=current_user.id, date=data.date, subject_id=data.subject_id)
        db.add(pip)
    pip.count = data.count
    await db.commit()
    return data
