"""Pip counter schemas."""

from datetime import date

from pydantic import Field

from questlog.schemas.base import BaseSchema

# {"2024-01-11": {"japanese": 2}}
PipMap = dict[str, dict[str, int]]


class PipCountSet(BaseSchema):
    """Set a subject's pip counter for one day."""

    subject_id: str = Field(..., min_length=1, max_length=64)
    date: date
    count: int = Field(..., ge=0)
