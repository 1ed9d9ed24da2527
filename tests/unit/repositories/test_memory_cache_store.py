"""
Unit tests for the in-memory cache store
"""

import pytest

from src.adapter.repositories.memory_cache_store import InMemoryCacheStore
from src.domain.errors import StoreUnavailableError


@pytest.mark.asyncio
async def test_set_and_get_json_value(store):
    await store.set("doc:1", {"title": "Scan", "pages": [1, 2]})

    assert await store.get("doc:1") == {"title": "Scan", "pages": [1, 2]}
    assert await store.get("doc:missing") is None


@pytest.mark.asyncio
async def test_value_expires_after_ttl(store, clock):
    await store.set("k", "v", ttl=10)

    clock.advance(9)
    assert await store.get("k") == "v"

    clock.advance(1)
    assert await store.get("k") is None
    assert await store.exists("k") is False


@pytest.mark.asyncio
async def test_delete_and_expire(store, clock):
    await store.set("k", 1)

    assert await store.expire("k", 5) is True
    assert await store.expire("missing", 5) is False

    clock.advance(5)
    assert await store.delete("k") == 0

    await store.set("k2", 2)
    assert await store.delete("k2") == 1


@pytest.mark.asyncio
async def test_operations_fail_when_not_connected(clock):
    store = InMemoryCacheStore(clock=clock)

    with pytest.raises(StoreUnavailableError):
        await store.get("k")

    with pytest.raises(StoreUnavailableError):
        await store.lpush("queue:notification", {"id": "1"})


@pytest.mark.asyncio
async def test_list_push_head_pop_tail(store):
    for item in ("a", "b", "c"):
        await store.lpush("list", item)

    assert await store.lrange("list", 0, -1) == ["c", "b", "a"]
    assert await store.llen("list") == 3
    assert await store.rpop("list") == "a"
    assert await store.lrange("list", 0, 0) == ["c"]


@pytest.mark.asyncio
async def test_ltrim_keeps_inclusive_range(store):
    for i in range(5):
        await store.lpush("list", i)

    await store.ltrim("list", 0, 2)

    assert await store.lrange("list", 0, -1) == [4, 3, 2]


@pytest.mark.asyncio
async def test_empty_list_is_removed(store):
    await store.lpush("list", "only")
    await store.rpop("list")

    assert await store.exists("list") is False
    assert await store.rpop("list") is None


@pytest.mark.asyncio
async def test_increment_if_below_stops_at_limit(store):
    assert await store.increment_if_below("counter", 2, 60) == 1
    assert await store.increment_if_below("counter", 2, 60) == 2
    assert await store.increment_if_below("counter", 2, 60) is None
    assert await store.get("counter") == 2


@pytest.mark.asyncio
async def test_increment_if_below_renews_ttl_on_accept(store, clock):
    await store.increment_if_below("counter", 3, 10)
    clock.advance(6)
    await store.increment_if_below("counter", 3, 10)
    clock.advance(6)

    assert await store.increment_if_below("counter", 3, 10) == 3


@pytest.mark.asyncio
async def test_hash_operations(store):
    assert await store.hset("h", "a", 1) == 1
    assert await store.hset("h", "a", 2) == 0
    await store.hset("h", "b", {"x": True})

    assert await store.hget("h", "a") == 2
    assert await store.hgetall("h") == {"a": 2, "b": {"x": True}}
    assert await store.hdel("h", "a") == 1
    assert await store.hdel("h", "a") == 0


@pytest.mark.asyncio
async def test_set_operations(store):
    assert await store.sadd("s", "b") == 1
    assert await store.sadd("s", "a") == 1
    assert await store.sadd("s", "a") == 0

    assert await store.smembers("s") == ["a", "b"]

    await store.srem("s", "a")
    await store.srem("s", "b")
    assert await store.exists("s") is False


@pytest.mark.asyncio
async def test_wrong_type_raises(store):
    await store.set("k", 1)

    with pytest.raises(TypeError):
        await store.lpush("k", 2)


@pytest.mark.asyncio
async def test_keys_matches_glob_and_skips_expired(store, clock):
    await store.set("session:a", 1)
    await store.set("session:b", 1, ttl=5)
    await store.set("rate_limit:x", 1)

    assert sorted(await store.keys("session:*")) == ["session:a", "session:b"]

    clock.advance(5)
    assert await store.keys("session:*") == ["session:a"]


@pytest.mark.asyncio
async def test_health_check_reflects_connection(store):
    assert (await store.health_check())["status"] == "healthy"

    await store.disconnect()

    health = await store.health_check()
    assert health["status"] == "unhealthy"
    assert health["is_connected"] is False


@pytest.mark.asyncio
async def test_memory_usage_counts_stored_bytes(store):
    empty = await store.memory_usage()
    await store.set("k", "value")

    assert (await store.memory_usage())["used_memory"] > empty["used_memory"]
