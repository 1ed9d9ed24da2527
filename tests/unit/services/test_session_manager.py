"""
Unit tests for SessionManager
"""

import pytest

from src.app.services.session_manager import (
    SessionManager,
    require_admin_role,
    require_session,
    require_user,
    session_key,
    user_sessions_key,
)
from src.domain.errors import (
    ForbiddenError,
    SessionExpiredError,
    SessionNotFoundError,
    UnauthorizedError,
)
from tests.fixtures.sessions import make_session, store_idle_session


@pytest.mark.asyncio
async def test_create_session_registers_in_user_set(session_manager, store, clock):
    session_id = await session_manager.create_session(
        "u1", role="user", ip_address="10.0.0.1", user_agent="pytest", attributes={"device": "web"}
    )

    session = await session_manager.get_session(session_id)
    assert session.user_id == "u1"
    assert session.ip_address == "10.0.0.1"
    assert session.attributes == {"device": "web"}
    assert session.created_at == clock()
    assert session.last_activity == clock()
    assert await store.smembers(user_sessions_key("u1")) == [session_id]


@pytest.mark.asyncio
async def test_create_session_evicts_least_recently_active(session_manager, clock):
    session_ids = []
    for _ in range(5):
        session_ids.append(await session_manager.create_session("u1"))
        clock.advance(1)

    newest = await session_manager.create_session("u1")

    sessions = await session_manager.get_user_sessions("u1")
    assert len(sessions) == 5
    assert await session_manager.get_session(session_ids[0]) is None
    assert newest in {s.session_id for s in sessions}


@pytest.mark.asyncio
async def test_eviction_follows_activity_not_creation(session_manager, clock):
    session_ids = []
    for _ in range(5):
        session_ids.append(await session_manager.create_session("u1"))
        clock.advance(1)

    await session_manager.refresh_session(session_ids[0])
    clock.advance(1)
    await session_manager.create_session("u1")

    assert await session_manager.get_session(session_ids[0]) is not None
    assert await session_manager.get_session(session_ids[1]) is None


@pytest.mark.asyncio
async def test_session_limit_is_per_user(session_manager):
    for _ in range(5):
        await session_manager.create_session("u1")
    await session_manager.create_session("u2")

    assert len(await session_manager.get_user_sessions("u1")) == 5
    assert len(await session_manager.get_user_sessions("u2")) == 1


@pytest.mark.asyncio
async def test_session_disappears_after_ttl(session_manager, clock):
    session_id = await session_manager.create_session("u1")

    clock.advance(3601)

    assert await session_manager.get_session(session_id) is None
    with pytest.raises(SessionNotFoundError):
        await session_manager.refresh_session(session_id)


@pytest.mark.asyncio
async def test_refresh_updates_last_activity(session_manager, clock):
    session_id = await session_manager.create_session("u1")
    clock.advance(1800)

    refreshed = await session_manager.refresh_session(session_id)

    assert refreshed.last_activity == clock()
    clock.advance(1800)
    assert await session_manager.get_session(session_id) is not None


@pytest.mark.asyncio
async def test_refresh_idle_session_raises_expired_and_deletes(session_manager, store, clock):
    idle = await store_idle_session(store, clock())

    with pytest.raises(SessionExpiredError):
        await session_manager.refresh_session(idle.session_id)

    assert await store.get(session_key(idle.session_id)) is None
    assert await store.smembers(user_sessions_key("u1")) == []


@pytest.mark.asyncio
async def test_destroy_session(session_manager, store):
    session_id = await session_manager.create_session("u1")

    assert await session_manager.destroy_session(session_id) == 1
    assert await session_manager.destroy_session(session_id) == 0
    assert await store.smembers(user_sessions_key("u1")) == []


@pytest.mark.asyncio
async def test_destroy_all_sessions_for_user(session_manager, store):
    for _ in range(3):
        await session_manager.create_session("u1")
    other = await session_manager.create_session("u2")

    assert await session_manager.destroy_all_sessions_for_user("u1") == 3
    assert await session_manager.get_user_sessions("u1") == []
    assert await store.exists(user_sessions_key("u1")) is False
    assert await session_manager.get_session(other) is not None


@pytest.mark.asyncio
async def test_get_user_sessions_prunes_dangling_members(session_manager, store):
    session_id = await session_manager.create_session("u1")
    await store.sadd(user_sessions_key("u1"), "ghost")

    sessions = await session_manager.get_user_sessions("u1")

    assert [s.session_id for s in sessions] == [session_id]
    assert await store.smembers(user_sessions_key("u1")) == [session_id]


def test_resolve_session_id_precedence(store):
    def verify(token):
        return {"session_id": "from-token"} if token == "valid" else None

    manager = SessionManager(store, token_verifier=verify)
    headers = {"authorization": "Bearer valid", "x-session-id": "from-header"}
    cookies = {"sessionId": "from-cookie"}

    assert manager.resolve_session_id(headers, cookies) == "from-token"

    headers["authorization"] = "Bearer forged"
    assert manager.resolve_session_id(headers, cookies) == "from-cookie"
    assert manager.resolve_session_id(headers, {}) == "from-header"
    assert manager.resolve_session_id({}, {}) is None


def test_resolve_ignores_token_without_session_claim(store):
    manager = SessionManager(store, token_verifier=lambda token: {"user_id": "u1"})

    assert manager.resolve_session_id({"authorization": "Bearer access"}, {}) is None


@pytest.mark.asyncio
async def test_load_context_touches_session(session_manager, clock):
    session_id = await session_manager.create_session("u1")
    clock.advance(120)

    session = await session_manager.load_context({"x-session-id": session_id}, {})

    assert session.session_id == session_id
    assert session.last_activity == clock()
    stored = await session_manager.get_session(session_id)
    assert stored.last_activity == clock()


@pytest.mark.asyncio
async def test_load_context_deletes_idle_session(session_manager, store, clock):
    idle = await store_idle_session(store, clock())

    assert await session_manager.load_context({}, {"sessionId": idle.session_id}) is None
    assert await store.get(session_key(idle.session_id)) is None


@pytest.mark.asyncio
async def test_load_context_never_raises(session_manager, store):
    await store.set(session_key("corrupt"), {"unexpected": True})
    assert await session_manager.load_context({"x-session-id": "corrupt"}, {}) is None

    session_id = await session_manager.create_session("u1")
    await store.disconnect()
    assert await session_manager.load_context({"x-session-id": session_id}, {}) is None


@pytest.mark.asyncio
async def test_cleanup_expired_sessions(session_manager, store, clock):
    await store_idle_session(store, clock(), user_id="u1")
    await store_idle_session(store, clock(), user_id="u2")
    live = await session_manager.create_session("u3")

    stats = await session_manager.get_session_stats()
    assert stats["total_sessions"] == 3
    assert stats["active_sessions"] == 1
    assert stats["expired_sessions"] == 2

    assert await session_manager.cleanup_expired_sessions() == 2
    assert await session_manager.get_session(live) is not None
    assert (await session_manager.get_session_stats())["total_sessions"] == 1


def test_require_session():
    session = make_session()
    assert require_session(session) is session

    with pytest.raises(UnauthorizedError) as exc_info:
        require_session(None)
    assert exc_info.value.error.code == "SESSION_REQUIRED"


def test_require_user():
    with pytest.raises(UnauthorizedError) as exc_info:
        require_user(None)
    assert exc_info.value.error.code == "USER_SESSION_REQUIRED"


def test_require_admin_role():
    admin = make_session("admin-1", role="admin")
    assert require_admin_role(admin) is admin

    with pytest.raises(ForbiddenError) as exc_info:
        require_admin_role(make_session("u1", role="user"))
    assert exc_info.value.error.code == "ADMIN_REQUIRED"

    with pytest.raises(UnauthorizedError) as exc_info:
        require_admin_role(None)
    assert exc_info.value.error.code == "ADMIN_SESSION_REQUIRED"


@pytest.mark.asyncio
async def test_load_context_survives_wrong_type_entry(session_manager, store):
    await store.hset(session_key("abc"), "user_id", "u1")

    assert await session_manager.load_context({"x-session-id": "abc"}, {}) is None


@pytest.mark.asyncio
async def test_load_context_survives_failing_token_verifier(store):
    def verify(token):
        raise ValueError("malformed token")

    manager = SessionManager(store, token_verifier=verify)

    assert await manager.load_context({"authorization": "Bearer garbage"}, {}) is None


@pytest.mark.asyncio
async def test_scans_skip_corrupt_entries(session_manager, store, clock):
    await store.set(session_key("corrupt"), {"unexpected": True})
    await store_idle_session(store, clock())
    live = await session_manager.create_session("u2")

    stats = await session_manager.get_session_stats()
    assert stats["total_sessions"] == 2
    assert stats["active_sessions"] == 1

    assert await session_manager.cleanup_expired_sessions() == 1
    assert await session_manager.get_session(live) is not None
    assert await store.exists(session_key("corrupt")) is True
