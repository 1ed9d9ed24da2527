"""
Integration tests for the Admin API
"""

import pytest
from httpx import AsyncClient

from tests.fixtures.api import open_session, session_headers
from tests.fixtures.sessions import store_idle_session


@pytest.mark.asyncio
async def test_admin_requires_session(client: AsyncClient):
    response = await client.get("/admin/stats")

    assert response.status_code == 401
    assert response.json()["error"]["code"] == "ADMIN_SESSION_REQUIRED"


@pytest.mark.asyncio
async def test_admin_requires_admin_role(client: AsyncClient):
    session = await open_session(client)

    response = await client.get("/admin/stats", headers=session_headers(session["session_id"]))

    assert response.status_code == 403
    assert response.json()["error"]["code"] == "ADMIN_REQUIRED"


@pytest.mark.asyncio
async def test_system_stats(client: AsyncClient):
    admin = await open_session(client, user_id="admin-1", role="admin")

    response = await client.get("/admin/stats", headers=session_headers(admin["session_id"]))

    assert response.status_code == 200
    data = response.json()
    assert set(data["queues"]) == {"document_processing", "ai_processing", "notification", "cleanup"}
    assert data["sessions"]["active_sessions"] == 1
    assert data["active_jobs"] == 0
    assert "used_memory" in data["memory"]


@pytest.mark.asyncio
async def test_cleanup_sessions(client: AsyncClient, container):
    admin = await open_session(client, user_id="admin-1", role="admin")
    await store_idle_session(container.store, container.session_manager.clock(), user_id="u2")

    response = await client.post(
        "/admin/sessions/cleanup", headers=session_headers(admin["session_id"])
    )

    assert response.status_code == 200
    assert response.json() == {"cleaned_count": 1}


@pytest.mark.asyncio
async def test_rate_limit_status_and_reset(client: AsyncClient):
    admin = await open_session(client, user_id="admin-1", role="admin")
    headers = session_headers(admin["session_id"])

    response = await client.get(
        "/admin/rate-limits/ip:127.0.0.1", params={"category": "auth"}, headers=headers
    )
    assert response.status_code == 200
    assert response.json()["remaining"] == 4

    response = await client.delete(
        "/admin/rate-limits/ip:127.0.0.1", params={"category": "auth"}, headers=headers
    )
    assert response.json()["reset"] is True

    response = await client.get(
        "/admin/rate-limits/ip:127.0.0.1", params={"category": "auth"}, headers=headers
    )
    assert response.json()["remaining"] == 5


@pytest.mark.asyncio
async def test_rate_limit_status_unknown_category(client: AsyncClient):
    admin = await open_session(client, user_id="admin-1", role="admin")

    response = await client.get(
        "/admin/rate-limits/user:u1",
        params={"category": "custom"},
        headers=session_headers(admin["session_id"]),
    )

    assert response.status_code == 404
    assert response.json()["error"]["code"] == "RATE_LIMIT_CATEGORY_NOT_FOUND"
