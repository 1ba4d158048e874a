"""Goal CRUD routes."""

from uuid import uuid4

from fastapi import APIRouter, HTTPException, status
from sqlalchemy import func, select

from questlog.api.deps import CurrentUser, DbSession, get_user_resource_or_404
from questlog.db.models import Goal, GoalType, StudySession, Subject
from questlog.schemas.goals import GoalCreate, GoalProgress, GoalRead, GoalUpdate

router = APIRouter(prefix="/goals", tags=["goals"])


async def _ensure_subject(db: DbSession, subject_id: str | None, user_id) -> None:
    if subject_id is None:
        return
    exists = await db.scalar(
        select(Subject.id).where(Subject.user_id == user_id, Subject.id == subject_id)
    )
    if exists is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Unknown subject '{subject_id}'",
        )


@router.get("/", response_model=list[GoalRead])
async def list_goals(
    current_user: CurrentUser,
    db: DbSession,
    subject_id: str | None = None,
    done: bool | None = None,
) -> list[GoalRead]:
    """
    List goals for the current user.

    Filters:
    - subject_id: Filter by subject
    - done: Filter by completion flag
    """
    query = select(Goal).where(Goal.user_id == current_user.id)

    if subject_id:
        query = query.where(Goal.subject_id == subject_id)
    if done is not None:
        query = query.where(Goal.done.is_(done))

    query = query.order_by(Goal.due_date.asc().nullslast(), Goal.created_at.desc())

    result = await db.execute(query)
    return [GoalRead.model_validate(g) for g in result.scalars()]


@router.post("/", response_model=GoalRead, status_code=status.HTTP_201_CREATED)
async def create_goal(
    data: GoalCreate,
    current_user: CurrentUser,
    db: DbSession,
) -> GoalRead:
    """Create a new goal."""
    await _ensure_subject(db, data.subject_id, current_user.id)
    goal_id = data.id or f"goal-{uuid4().hex}"
    if await db.get(Goal, (current_user.id, goal_id)) is not None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Goal '{goal_id}' already exists",
        )

    goal = Goal(
        id=goal_id,
        user_id=current_user.id,
        **data.model_dump(exclude={"id"}),
    )
    db.add(goal)
    await db.commit()
    await db.refresh(goal)
    return GoalRead.model_validate(goal)


@router.get("/{goal_id}", response_model=GoalRead)
async def get_goal(
    goal_id: str,
    current_user: CurrentUser,
    db: DbSession,
) -> GoalRead:
    """Get a specific goal by ID."""
    goal = await get_user_resource_or_404(db, Goal, goal_id, current_user.id)
    return GoalRead.model_validate(goal)


@router.patch("/{goal_id}", response_model=GoalRead)
async def update_goal(
    goal_id: str,
    data: GoalUpdate,
    current_user: CurrentUser,
    db: DbSession,
) -> GoalRead:
    """Update a goal."""
    goal = await get_user_resource_or_404(db, Goal, goal_id, current_user.id)
    updates = data.model_dump(exclude_unset=True)
    if "subject_id" in updates:
        await _ensure_subject(db, updates["subject_id"], current_user.id)

    start_date = updates.get("start_date", goal.start_date)
    due_date = updates.get("due_date", goal.due_date)
    if due_date is not None and start_date > due_date:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="start_date must be on or before due_date",
        )

    for key, value in updates.items():
        setattr(goal, key, value)
    await db.commit()
    await db.refresh(goal)
    return GoalRead.model_validate(goal)


@router.delete("/{goal_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_goal(
    goal_id: str,
    current_user: CurrentUser,
    db: DbSession,
) -> None:
    """Delete a goal."""
    goal = await get_user_resource_or_404(db, Goal, goal_id, current_user.id)
    await db.delete(goal)
    await db.commit()


@router.get("/{goal_id}/progress", response_model=GoalProgress)
async def get_goal_progress(
    goal_id: str,
    current_user: CurrentUser,
    db: DbSession,
) -> GoalProgress:
    """
    Minutes (or sessions) recorded toward a goal.

    Counts sessions dated from start_date through due_date (open-ended if
    unset), limited to the goal's subject when it has one.
    """
    goal = await get_user_resource_or_404(db, Goal, goal_id, current_user.id)

    if goal.type == GoalType.SESSIONS.value:
        measure = func.count(StudySession.id)
    else:
        measure = func.coalesce(func.sum(StudySession.duration), 0)

    query = select(measure).where(
        StudySession.user_id == current_user.id,
        StudySession.date >= goal.start_date,
    )
    if goal.due_date is not None:
        query = query.where(StudySession.date <= goal.due_date)
    if goal.subject_id is not None:
        query = query.where(StudySession.subject_id == goal.subject_id)

    achieved = int(await db.scalar(query) or 0)
    return GoalProgress(
        goal_id=goal.id,
        type=goal.type,
        target=goal.target,
        achieved=achieved,
        percent=round(min(100.0, achieved * 100 / goal.target), 1),
        complete=achieved >= goal.target,
    )
