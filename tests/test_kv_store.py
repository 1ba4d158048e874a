"""Tests for the namespaced key-value store."""

from datetime import timedelta

from sqlalchemy import select

from questlog.db.models import KeyValueEntry
from questlog.services.kv_store import KeyValueStore, utcnow


async def test_put_get_delete(db):
    store = KeyValueStore(db, "blobs")
    await store.put("a", {"x": 1})
    assert await store.get("a") == {"x": 1}

    await store.put("a", [1, 2])
    assert await store.get("a") == [1, 2]

    assert await store.delete("a") is True
    assert await store.get("a") is None
    assert await store.delete("a") is False


async def test_namespaces_are_isolated(db):
    await KeyValueStore(db, "one").put("k", "first")
    await KeyValueStore(db, "two").put("k", "second")
    assert await KeyValueStore(db, "one").get("k") == "first"
    assert await KeyValueStore(db, "two").get("k") == "second"


async def test_expired_entries_read_as_absent(db):
    store = KeyValueStore(db, "blobs")
    await store.put("old", "gone", ttl_seconds=60)
    await store.put("new", "here", ttl_seconds=60)

    entry = await db.get(KeyValueEntry, ("blobs", "old"))
    entry.expires_at = utcnow() - timedelta(seconds=1)
    await db.flush()

    assert await store.get("old") is None
    assert await store.list_keys() == ["new"]
    assert await db.get(KeyValueEntry, ("blobs", "old")) is None


async def test_list_keys_prefix_and_limit(db):
    store = KeyValueStore(db, "blobs")
    for key in ["b:2", "a:1", "b:1", "b_3", "c"]:
        await store.put(key, key)

    assert await store.list_keys() == ["a:1", "b:1", "b:2", "b_3", "c"]
    assert await store.list_keys(prefix="b:") == ["b:1", "b:2"]
    assert await store.list_keys(limit=2) == ["a:1", "b:1"]


async def test_increment_creates_then_counts(db):
    store = KeyValueStore(db, "counters")
    assert await store.increment("hits", ttl_seconds=60) == 1
    first_expiry = (await db.get(KeyValueEntry, ("counters", "hits"))).expires_at

    assert await store.increment("hits", ttl_seconds=60) == 2
    assert await store.increment("hits", ttl_seconds=60) == 3
    assert (await db.get(KeyValueEntry, ("counters", "hits"))).expires_at == first_expiry


async def test_increment_restarts_after_expiry(db):
    store = KeyValueStore(db, "counters")
    await store.increment("hits", ttl_seconds=60)
    await store.increment("hits", ttl_seconds=60)

    entry = await db.get(KeyValueEntry, ("counters", "hits"))
    entry.expires_at = utcnow() - timedelta(seconds=1)
    await db.flush()

    assert await store.increment("hits", ttl_seconds=60) == 1


async def test_purge_expired_only_touches_expired_entries_in_namespace(db):
    store = KeyValueStore(db, "counters")
    await store.put("stale", 1, ttl_seconds=60)
    await store.put("fresh", 1, ttl_seconds=60)
    await store.put("forever", 1)
    await KeyValueStore(db, "other").put("stale", 1, ttl_seconds=60)

    for namespace in ["counters", "other"]:
        entry = await db.get(KeyValueEntry, (namespace, "stale"))
        entry.expires_at = utcnow() - timedelta(seconds=1)
    await db.flush()

    assert await store.purge_expired() == 1
    remaining = (
        await db.execute(select(KeyValueEntry.namespace, KeyValueEntry.key).order_by(KeyValueEntry.key))
    ).all()
    assert [tuple(r) for r in remaining] == [
        ("counters", "forever"),
        ("counters", "fresh"),
        ("other", "stale"),
    ]


async def test_new_counter_purges_old_windows(db):
    store = KeyValueStore(db, "counters")
    await store.increment("client:0", ttl_seconds=60)
    entry = await db.get(KeyValueEntry, ("counters", "client:0"))
    entry.expires_at = utcnow() - timedelta(seconds=1)
    await db.flush()

    assert await store.increment("client:60", ttl_seconds=60) == 1
    keys = (await db.execute(select(KeyValueEntry.key))).scalars().all()
    assert keys == ["client:60"]
