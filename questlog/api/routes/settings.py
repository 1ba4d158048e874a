"""User settings routes (one settings document per user)."""

from typing import Any

from fastapi import APIRouter, status

from questlog.api.deps import CurrentUser, DbSession
from questlog.db.models import UserSettings
from questlog.schemas.settings import (
    DashboardSettings,
    NotificationSettings,
    StudySettings,
    UserSettingsPayload,
    UserSettingsRead,
)

router = APIRouter(prefix="/settings", tags=["settings"])


def settings_columns(payload: UserSettingsPayload) -> dict[str, Any]:
    """Flatten the nested settings document into UserSettings columns."""
    notifications = payload.notifications
    return {
        "theme_preference": payload.theme,
        "language": payload.language,
        "study_reminders": notifications.study_reminders,
        "reminder_times": list(notifications.reminder_times),
        "break_reminders": notifications.break_reminders,
        "achievement_notifications": notifications.achievement_alerts,
        "weekly_reports": notifications.email_digest,
        "pip_notification_sound": notifications.pip_notification_sound,
        "quest_complete_sound": notifications.quest_complete_sound,
        "dashboard_layout": payload.dashboard.layout,
        "daily_goal_minutes": payload.study.daily_goal_minutes,
        "weekly_goal_minutes": payload.study.weekly_goal_minutes,
        "auto_save_interval": payload.study.auto_save_interval,
    }


def settings_to_read(row: UserSettings) -> UserSettingsRead:
    return UserSettingsRead(
        theme=row.theme_preference,
        language=row.language,
        notifications=NotificationSettings(
            study_reminders=row.study_reminders,
            achievement_alerts=row.achievement_notifications,
            email_digest=row.weekly_reports,
            reminder_times=row.reminder_times,
            break_reminders=row.break_reminders,
            pip_notification_sound=row.pip_notification_sound,
            quest_complete_sound=row.quest_complete_sound,
        ),
        dashboard=DashboardSettings(layout=row.dashboard_layout),
        study=StudySettings(
            daily_goal_minutes=row.daily_goal_minutes,
            weekly_goal_minutes=row.weekly_goal_minutes,
            auto_save_interval=row.auto_save_interval,
        ),
        updated_at=row.updated_at,
    )


async def _write(db: DbSession, user_id, payload: UserSettingsPayload) -> UserSettings:
    row = await db.get(UserSettings, user_id)
    if row is None:
        row = UserSettings(user_id=user_id)
        db.add(row)
    for key, value in settings_columns(payload).items():
        setattr(row, key, value)
    await db.commit()
    await db.refresh(row)
    return row


@router.get("/", response_model=UserSettingsRead)
async def get_settings_document(current_user: CurrentUser, db: DbSession) -> UserSettingsRead:
    """Get settings, creating the defaults on first access."""
    row = await db.get(UserSettings, current_user.id)
    if row is None:
        row = await _write(db, current_user.id, UserSettingsPayload())
    return settings_to_read(row)


@router.put("/", response_model=UserSettingsRead)
async def replace_settings(
    data: UserSettingsPayload,
    current_user: CurrentUser,
    db: DbSession,
) -> UserSettingsRead:
    """Replace the whole settings document. Omitted sections revert to defaults."""
    row = await _write(db, current_user.id, data)
    return settings_to_read(row)


@router.delete("/", response_model=UserSettingsRead, status_code=status.HTTP_200_OK)
async def reset_settings(current_user: CurrentUser, db: DbSession) -> UserSettingsRead:
    """Reset settings to defaults."""
    row = await _write(db, current_user.id, UserSettingsPayload())
    return settings_to_read(row)
