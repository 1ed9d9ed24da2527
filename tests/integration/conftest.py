import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from config import ApplicationConfig
from src.adapter.repositories.memory_cache_store import InMemoryCacheStore
from src.adapter.services.service_container import build_container


@pytest_asyncio.fixture
async def container():
    store = InMemoryCacheStore()
    container = build_container(ApplicationConfig, store=store)
    await store.connect()
    yield container
    await store.disconnect()


@pytest_asyncio.fixture
async def client(container):
    from src.api.app import create_app

    app = create_app(ApplicationConfig, container)

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
