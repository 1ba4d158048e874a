"""Pydantic schemas for API request/response validation."""

from questlog.schemas.auth import LoginRequest, RegisterRequest, RegisterResponse, TokenResponse
from questlog.schemas.data import AppSnapshot, ImportSummary
from questlog.schemas.goals import GoalCreate, GoalProgress, GoalRead, GoalUpdate
from questlog.schemas.kv import KVKeyList, KVPut, KVRead
from questlog.schemas.pips import PipCountSet, PipMap
from questlog.schemas.progress import (
    AchievementTier,
    LedgerResult,
    ProgressEvent,
    QuestType,
    Resource,
    Session,
    SessionDraft,
    SubjectConfig,
    SubjectProgress,
)
from questlog.schemas.sessions import PipCreate, SessionCreate, SessionRead, SessionRecorded
from questlog.schemas.settings import UserSettingsPayload, UserSettingsRead
from questlog.schemas.subjects import SubjectCreate, SubjectUpdate
from questlog.schemas.templates import TemplateApplied, TemplateRead, TemplateUpsert
from questlog.schemas.user import PublicUser, UserProfile, UserRead, UserUpdate

__all__ = [
    # Auth
    "LoginRequest",
    "RegisterRequest",
    "RegisterResponse",
    "TokenResponse",
    # User
    "PublicUser",
    "UserProfile",
    "UserRead",
    "UserUpdate",
    # Subjects / progress
    "AchievementTier",
    "QuestType",
    "Resource",
    "SubjectConfig",
    "SubjectProgress",
    "SubjectCreate",
    "SubjectUpdate",
    # Sessions
    "LedgerResult",
    "PipCreate",
    "ProgressEvent",
    "Session",
    "SessionCreate",
    "SessionDraft",
    "SessionRead",
    "SessionRecorded",
    # Goals
    "GoalCreate",
    "GoalProgress",
    "GoalRead",
    "GoalUpdate",
    # Pips
    "PipCountSet",
    "PipMap",
    # Templates
    "TemplateApplied",
    "TemplateRead",
    "TemplateUpsert",
    # Settings
    "UserSettingsPayload",
    "UserSettingsRead",
    # Data
    "AppSnapshot",
    "ImportSummary",
    # KV
    "KVKeyList",
    "KVPut",
    "KVRead",
]
