"""
Two-tier subject progress storage for clients.

LocalCache (a JSON file) and RemoteStore (the API) implement the same
SubjectProgressStore capability. TieredProgressStore combines them under an
explicit StorePolicy that decides read order, cache refresh and what to do
when the remote tier fails. Writes made while offline are queued in the
cache and replayed by sync_pending().

"Today" is never read from the clock here; callers pass dates in.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Literal, Protocol

import httpx
from pydantic import Field

from questlog.client.api import QuestlogClient, StoreUnavailable
from questlog.schemas.base import BaseSchema
from questlog.schemas.progress import LedgerResult, SessionDraft, SubjectProgress
from questlog.services.ledger import apply_session, pip_draft, quick_pip

logger = logging.getLogger(__name__)


class UnknownSubject(KeyError):
    """The subject is not in the local cache."""


class SubjectProgressStore(Protocol):
    async def load_subjects(self) -> dict[str, SubjectProgress]: ...

    async def record_session(self, draft: SessionDraft) -> LedgerResult: ...

    async def quick_pip(self, subject_id: str, on: date) -> LedgerResult: ...


# =============================================================================
# LOCAL TIER
# =============================================================================


class PendingWrite(BaseSchema):
    """A write accepted locally that the server has not seen yet."""

    kind: Literal["session", "pip"]
    draft: SessionDraft


class CacheState(BaseSchema):
    subjects: dict[str, SubjectProgress] = Field(default_factory=dict)
    pending: list[PendingWrite] = Field(default_factory=list)


class LocalCache:
    """
    Subject progress kept in a JSON file.

    Writes run the ledger rule against the cached progress, so the cache
    stays usable with no server at all.
    """

    def __init__(self, path: Path | str):
        self.path = Path(path)

    def _read(self) -> CacheState:
        if not self.path.exists():
            return CacheState()
        return CacheState.model_validate_json(self.path.read_text(encoding="utf-8"))

    def _write(self, state: CacheState) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp.write_text(state.model_dump_json(indent=2), encoding="utf-8")
        tmp.replace(self.path)

    async def load_subjects(self) -> dict[str, SubjectProgress]:
        return self._read().subjects

    async def replace_subjects(self, subjects: dict[str, SubjectProgress]) -> None:
        state = self._read()
        state.subjects = dict(subjects)
        self._write(state)

    async def put_subject(self, progress: SubjectProgress) -> None:
        state = self._read()
        state.subjects[progress.config.id] = progress
        self._write(state)

    async def drop_subject(self, subject_id: str) -> None:
        state = self._read()
        state.subjects.pop(subject_id, None)
        self._write(state)

    def _apply(self, subject_id: str, update: Callable[[SubjectProgress], LedgerResult]) -> LedgerResult:
        state = self._read()
        before = state.subjects.get(subject_id)
        if before is None:
            raise UnknownSubject(subject_id)
        result = update(before)
        state.subjects[subject_id] = result.after
        self._write(state)
        return result

    async def record_session(self, draft: SessionDraft) -> LedgerResult:
        return self._apply(draft.subject_id, lambda before: apply_session(before, draft))

    async def quick_pip(self, subject_id: str, on: date) -> LedgerResult:
        return self._apply(subject_id, lambda before: quick_pip(before, on))

    async def enqueue(self, write: PendingWrite) -> None:
        state = self._read()
        state.pending.append(write)
        self._write(state)

    async def pending(self) -> list[PendingWrite]:
        return self._read().pending

    async def drop_pending(self, count: int) -> None:
        """Remove the oldest count queued writes."""
        state = self._read()
        state.pending = state.pending[count:]
        self._write(state)


# =============================================================================
# REMOTE TIER
# =============================================================================


class RemoteStore:
    """The API as a SubjectProgressStore. The server's answer is authoritative."""

    def __init__(self, client: QuestlogClient):
        self.client = client

    async def load_subjects(self) -> dict[str, SubjectProgress]:
        return {s.config.id: s for s in await self.client.list_subjects()}

    async def load_subject(self, subject_id: str) -> SubjectProgress:
        return await self.client.get_subject(subject_id)

    async def record_session(self, draft: SessionDraft) -> LedgerResult:
        recorded = await self.client.record_session(draft)
        return LedgerResult(after=recorded.subject, session=recorded.session)

    async def quick_pip(self, subject_id: str, on: date) -> LedgerResult:
        recorded = await self.client.quick_pip(subject_id, on)
        return LedgerResult(after=recorded.subject, session=recorded.session)


# =============================================================================
# POLICY
# =============================================================================


@dataclass(frozen=True)
class StorePolicy:
    """
    How the two tiers are combined.

    read_order: which tier answers load_subjects first. With "local_first",
        the remote is only asked when the cache is empty.
    refresh_cache: copy remote reads and write results into the cache.
    fallback_on_failure: when the remote is unavailable, serve reads from the
        cache and apply writes locally instead of raising.
    queue_offline_writes: remember locally applied writes for sync_pending().
    """

    read_order: Literal["remote_first", "local_first"] = "remote_first"
    refresh_cache: bool = True
    fallback_on_failure: bool = True
    queue_offline_writes: bool = True


@dataclass(frozen=True)
class SyncResult:
    synced: int
    rejected: int
    remaining: int


class TieredProgressStore:
    def __init__(self, local: LocalCache, remote: RemoteStore, policy: StorePolicy | None = None):
        self.local = local
        self.remote = remote
        self.policy = policy or StorePolicy()

    async def load_subjects(self) -> dict[str, SubjectProgress]:
        if self.policy.read_order == "local_first":
            cached = await self.local.load_subjects()
            if cached:
                return cached

        try:
            subjects = await self.remote.load_subjects()
        except StoreUnavailable as e:
            if not self.policy.fallback_on_failure:
                raise
            logger.warning("Remote store unavailable, reading from cache: %s", e)
            return await self.local.load_subjects()

        if self.policy.refresh_cache:
            await self.local.replace_subjects(subjects)
        return subjects

    async def _write(self, kind: Literal["session", "pip"], draft: SessionDraft) -> LedgerResult:
        try:
            if kind == "pip":
                result = await self.remote.quick_pip(draft.subject_id, draft.date)
            else:
                result = await self.remote.record_session(draft)
        except StoreUnavailable as e:
            if not self.policy.fallback_on_failure:
                raise
            logger.warning("Remote store unavailable, applying %s locally: %s", kind, e)
            if kind == "pip":
                result = await self.local.quick_pip(draft.subject_id, draft.date)
            else:
                result = await self.local.record_session(draft)
            if self.policy.queue_offline_writes:
                await self.local.enqueue(PendingWrite(kind=kind, draft=draft))
            return result

        if self.policy.refresh_cache:
            await self.local.put_subject(result.after)
        return result

    async def record_session(self, draft: SessionDraft) -> LedgerResult:
        return await self._write("session", draft)

    async def quick_pip(self, subject_id: str, on: date) -> LedgerResult:
        draft = SessionDraft(subject_id=subject_id, duration=0, date=on, quest_type="")
        cached = (await self.local.load_subjects()).get(subject_id)
        if cached is not None:
            draft = pip_draft(cached.config, on)
        return await self._write("pip", draft)

    async def _refresh_subject(self, subject_id: str) -> None:
        """Replace a cached subject with the server's copy, or drop it if the server has none."""
        try:
            progress = await self.remote.load_subject(subject_id)
        except StoreUnavailable as e:
            logger.warning("Could not refresh %s from the server: %s", subject_id, e)
            return
        except httpx.HTTPStatusError as e:
            if e.response.status_code == 404:
                await self.local.drop_subject(subject_id)
            else:
                logger.warning("Could not refresh %s from the server: %s", subject_id, e.response.status_code)
            return
        await self.local.put_subject(progress)

    async def sync_pending(self) -> SyncResult:
        """
        Replay queued writes against the remote, oldest first.

        Stops at the first StoreUnavailable and leaves the rest queued. A write
        the server rejects (e.g. the subject was deleted) is dropped and logged,
        and that subject is re-read from the server to undo the local update.
        """
        pending = await self.local.pending()
        done = synced = rejected = 0
        for write in pending:
            try:
                if write.kind == "pip":
                    result = await self.remote.quick_pip(write.draft.subject_id, write.draft.date)
                else:
                    result = await self.remote.record_session(write.draft)
            except StoreUnavailable as e:
                logger.warning("Sync paused with %d writes left: %s", len(pending) - done, e)
                break
            except httpx.HTTPStatusError as e:
                logger.warning(
                    "Server rejected queued %s for %s: %s",
                    write.kind, write.draft.subject_id, e.response.status_code,
                )
                rejected += 1
                await self._refresh_subject(write.draft.subject_id)
            else:
                await self.local.put_subject(result.after)
                synced += 1
            done += 1

        if done:
            await self.local.drop_pending(done)
        return SyncResult(synced=synced, rejected=rejected, remaining=len(pending) - done)
