"""
User template routes.

A template bundles subject configs and default goals so a study setup can
be saved and re-applied. Applying never overwrites an existing subject.
"""

import logging
from datetime import date
from uuid import uuid4

from fastapi import APIRouter, Query, status
from sqlalchemy import select

from questlog.api.deps import CurrentUser, DbSession, get_user_resource_or_404
from questlog.db.models import Goal, UserTemplate
from questlog.schemas.templates import TemplateApplied, TemplateRead, TemplateUpsert
from questlog.services.defaults import default_achievements, default_quest_types
from questlog.services.subjects import existing_subject_ids, new_subject_row

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/templates", tags=["templates"])


@router.get("/", response_model=list[TemplateRead])
async def list_templates(
    current_user: CurrentUser,
    db: DbSession,
    category: str | None = None,
) -> list[TemplateRead]:
    """List saved templates, optionally for one category."""
    query = select(UserTemplate).where(UserTemplate.user_id == current_user.id)
    if category:
        query = query.where(UserTemplate.category == category)
    query = query.order_by(UserTemplate.name)

    result = await db.execute(query)
    return [TemplateRead.model_validate(t) for t in result.scalars()]


@router.get("/{template_id}", response_model=TemplateRead)
async def get_template(
    template_id: str,
    current_user: CurrentUser,
    db: DbSession,
) -> TemplateRead:
    """Get a specific template by ID."""
    template = await get_user_resource_or_404(db, UserTemplate, template_id, current_user.id)
    return TemplateRead.model_validate(template)


@router.put("/{template_id}", response_model=TemplateRead)
async def upsert_template(
    template_id: str,
    data: TemplateUpsert,
    current_user: CurrentUser,
    db: DbSession,
) -> TemplateRead:
    """Create the template, or replace it wholesale if it exists."""
    template = await db.get(UserTemplate, (current_user.id, template_id))
    if template is None:
        template = UserTemplate(user_id=current_user.id, id=template_id)
        db.add(template)
    for key, value in data.model_dump(mode="json").items():
        setattr(template, key, value)
    await db.commit()
    await db.refresh(template)
    return TemplateRead.model_validate(template)


@router.delete("/{template_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_template(
    template_id: str,
    current_user: CurrentUser,
    db: DbSession,
) -> None:
    """Delete a template. Subjects created from it are kept."""
    template = await get_user_resource_or_404(db, UserTemplate, template_id, current_user.id)
    await db.delete(template)
    await db.commit()


@router.post("/{template_id}/apply", response_model=TemplateApplied)
async def apply_template(
    template_id: str,
    current_user: CurrentUser,
    db: DbSession,
    start_date: date | None = Query(None, description="Start date for the template's goals"),
) -> TemplateApplied:
    """
    Create the template's subjects the user doesn't have yet (zero progress)
    and add its default goals.

    Goals without their own start_date start on start_date, else today.
    """
    template = await get_user_resource_or_404(db, UserTemplate, template_id, current_user.id)
    data = TemplateRead.model_validate(template)
    existing = await existing_subject_ids(db, current_user.id)

    created: list[str] = []
    skipped: list[str] = []
    for config in data.subjects:
        if config.id in existing:
            skipped.append(config.id)
            continue
        config = config.model_copy(
            update={
                "quest_types": config.quest_types or default_quest_types(),
                "achievements": config.achievements or default_achievements(),
            }
        )
        db.add(new_subject_row(current_user.id, config))
        existing.add(config.id)
        created.append(config.id)

    goal_ids: list[str] = []
    for template_goal in data.default_goals:
        goal = Goal(
            id=f"goal-{uuid4().hex}",
            user_id=current_user.id,
            **template_goal.model_dump(exclude={"start_date"}),
            start_date=template_goal.start_date or start_date or date.today(),
        )
        db.add(goal)
        goal_ids.append(goal.id)

    await db.commit()
    logger.info(
        "Applied template %s for user %s: %d subjects created, %d skipped, %d goals",
        template_id,
        current_user.id,
        len(created),
        len(skipped),
        len(goal_ids),
    )
    return TemplateApplied(created=created, skipped=skipped, goals=goal_ids)
