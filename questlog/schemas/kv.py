"""KV session blob schemas."""

from typing import Any

from pydantic import Field

from questlog.schemas.base import BaseSchema


class KVPut(BaseSchema):
    """Store a JSON blob under a key."""

    data: Any = Field(...)
    expiration_ttl: int | None = Field(None, gt=0, description="Seconds until the blob expires")


class KVRead(BaseSchema):
    key: str
    data: Any


class KVKeyList(BaseSchema):
    keys: list[str]
