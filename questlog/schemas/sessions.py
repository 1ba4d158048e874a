"""Study session request/response schemas."""

from datetime import date, datetime

from pydantic import Field

from questlog.schemas.base import BaseSchema
from questlog.schemas.progress import ProgressEvent, Session, SessionDraft, SubjectProgress

MAX_SESSION_MINUTES = 24 * 60


class SessionCreate(BaseSchema):
    """The "record session" request. Date is the caller's local today."""

    subject_id: str = Field(..., min_length=1, max_length=64)
    duration: int = Field(..., gt=0, le=MAX_SESSION_MINUTES)
    date: date
    notes: str = Field("", max_length=2000)
    quest_type: str = Field(..., min_length=1, max_length=64)

    def to_draft(self) -> SessionDraft:
        return SessionDraft(**self.model_dump())


class PipCreate(BaseSchema):
    """The "quick pip" request."""

    subject_id: str = Field(..., min_length=1, max_length=64)
    date: date


class SessionRead(Session):
    """A stored session."""

    created_at: datetime | None = None


class SessionRecorded(BaseSchema):
    """Result of recording a session or a pip."""

    success: bool = True
    session: Session
    subject: SubjectProgress
    events: list[ProgressEvent] = Field(default_factory=list)
    pip_count: int | None = None
