"""User settings schemas (nested the way the app reads them)."""

from datetime import datetime
from typing import Literal

from pydantic import Field

from questlog.schemas.base import BaseSchema


class NotificationSettings(BaseSchema):
    study_reminders: bool = True
    achievement_alerts: bool = True
    email_digest: bool = False
    reminder_times: list[str] = Field(default_factory=lambda: ["09:00", "14:00", "19:00"])
    break_reminders: bool = True
    pip_notification_sound: bool = True
    quest_complete_sound: bool = True


class DashboardSettings(BaseSchema):
    layout: Literal["grid", "list", "compact"] = "grid"


class StudySettings(BaseSchema):
    daily_goal_minutes: int = Field(60, gt=0)
    weekly_goal_minutes: int = Field(420, gt=0)
    auto_save_interval: int = Field(300, gt=0)


class UserSettingsPayload(BaseSchema):
    """Full settings document."""

    theme: Literal["light", "dark", "system"] = "light"
    language: str = Field("en", min_length=2, max_length=16)
    notifications: NotificationSettings = Field(default_factory=NotificationSettings)
    dashboard: DashboardSettings = Field(default_factory=DashboardSettings)
    study: StudySettings = Field(default_factory=StudySettings)


class UserSettingsRead(UserSettingsPayload):
    """Settings plus when they last changed."""

    updated_at: datetime
