"""Namespaced key-value store on top of the kv_entries table."""

from datetime import datetime, timedelta, timezone
from typing import Any

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from questlog.db.models import KeyValueEntry


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """SQLite hands back naive datetimes; treat them as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class KeyValueStore:
    """
    Blob store with optional per-key TTL.

    Expired entries are treated as absent on read and removed lazily.
    One instance is bound to one namespace and one DB session.
    """

    def __init__(self, db: AsyncSession, namespace: str):
        self.db = db
        self.namespace = namespace

    async def _entry(self, key: str, now: datetime | None = None) -> KeyValueEntry | None:
        entry = await self.db.get(KeyValueEntry, (self.namespace, key))
        if entry is None:
            return None
        if entry.expires_at is not None and as_utc(entry.expires_at) <= (now or utcnow()):
            await self.db.delete(entry)
            await self.db.flush()
            return None
        return entry

    async def get(self, key: str) -> Any | None:
        entry = await self._entry(key)
        return None if entry is None else entry.value

    async def put(self, key: str, value: Any, *, ttl_seconds: int | None = None) -> None:
        expires_at = utcnow() + timedelta(seconds=ttl_seconds) if ttl_seconds else None
        entry = await self.db.get(KeyValueEntry, (self.namespace, key))
        if entry is None:
            entry = KeyValueEntry(namespace=self.namespace, key=key)
            self.db.add(entry)
        entry.value = value
        entry.expires_at = expires_at
        await self.db.flush()

    async def delete(self, key: str) -> bool:
        result = await self.db.execute(
            delete(KeyValueEntry).where(
                KeyValueEntry.namespace == self.namespace,
                KeyValueEntry.key == key,
            )
        )
        return result.rowcount > 0

    async def list_keys(self, prefix: str = "", limit: int = 100) -> list[str]:
        now = utcnow()
        query = (
            select(KeyValueEntry)
            .where(KeyValueEntry.namespace == self.namespace)
            .order_by(KeyValueEntry.key)
        )
        if prefix:
            query = query.where(KeyValueEntry.key.startswith(prefix, autoescape=True))
        result = await self.db.execute(query)
        keys = []
        for entry in result.scalars():
            if entry.expires_at is not None and as_utc(entry.expires_at) <= now:
                continue
            keys.append(entry.key)
            if len(keys) >= limit:
                break
        return keys

    async def purge_expired(self) -> int:
        """Delete every expired entry in this namespace."""
        result = await self.db.execute(
            delete(KeyValueEntry)
            .where(
                KeyValueEntry.namespace == self.namespace,
                KeyValueEntry.expires_at.is_not(None),
                KeyValueEntry.expires_at <= utcnow(),
            )
            .execution_options(synchronize_session="fetch")
        )
        return result.rowcount

    async def increment(self, key: str, *, ttl_seconds: int | None = None) -> int:
        """
        Add one to an integer counter, creating it (with ttl) if absent.

        The TTL is set only when the counter is created, so a window's
        expiry does not slide forward on every hit. Creating a counter also
        purges the namespace's expired entries, since old window keys are
        never read again.
        """
        entry = await self._entry(key)
        if entry is None:
            await self.purge_expired()
            await self.put(key, 1, ttl_seconds=ttl_seconds)
            return 1
        entry.value = int(entry.value or 0) + 1
        await self.db.flush()
        return entry.value
