"""Ad-hoc JSON blobs for the current user, backed by the KV store."""

from fastapi import APIRouter, HTTPException, Query, status

from questlog.api.deps import CurrentUser, DbSession
from questlog.config import get_settings
from questlog.schemas.kv import KVKeyList, KVPut, KVRead
from questlog.services.kv_store import KeyValueStore

router = APIRouter(prefix="/kv-sessions", tags=["kv-sessions"])
settings = get_settings()


def _store(db: DbSession, user) -> KeyValueStore:
    return KeyValueStore(db, f"sessions:{user.id}")


@router.get("/", response_model=KVKeyList)
async def list_blobs(
    current_user: CurrentUser,
    db: DbSession,
    prefix: str = "",
    limit: int | None = Query(None, ge=1),
) -> KVKeyList:
    """List live keys, optionally under a prefix."""
    limit = min(limit or settings.kv_list_limit, settings.kv_list_limit)
    keys = await _store(db, current_user).list_keys(prefix, limit=limit)
    await db.commit()
    return KVKeyList(keys=keys)


@router.put("/{key}", response_model=KVRead)
async def put_blob(
    key: str,
    data: KVPut,
    current_user: CurrentUser,
    db: DbSession,
) -> KVRead:
    """Store a blob. expiration_ttl falls back to the configured default."""
    ttl = data.expiration_ttl or settings.kv_default_ttl_seconds
    await _store(db, current_user).put(key, data.data, ttl_seconds=ttl)
    await db.commit()
    return KVRead(key=key, data=data.data)


@router.get("/{key}", response_model=KVRead)
async def get_blob(key: str, current_user: CurrentUser, db: DbSession) -> KVRead:
    """Get a blob; expired blobs are gone."""
    store = _store(db, current_user)
    entry = await store.get(key)
    await db.commit()
    if entry is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Session not found")
    return KVRead(key=key, data=entry)


@router.delete("/{key}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_blob(key: str, current_user: CurrentUser, db: DbSession) -> None:
    """Delete a blob."""
    deleted = await _store(db, current_user).delete(key)
    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Session not found")
    await db.commit()
