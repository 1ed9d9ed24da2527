import pytest
import pytest_asyncio

from src.adapter.repositories.memory_cache_store import InMemoryCacheStore
from src.app.services.job_processor import JobProcessor
from src.app.services.job_queue import JobQueue
from src.app.services.notification_service import NotificationService
from src.app.services.rate_limiter import RateLimiter
from src.app.services.session_manager import SessionManager
from tests.utils.clock import FakeClock


@pytest.fixture
def clock():
    return FakeClock()


@pytest_asyncio.fixture
async def store(clock):
    store = InMemoryCacheStore(clock=clock)
    await store.connect()
    yield store
    await store.disconnect()


@pytest.fixture
def session_manager(store, clock):
    return SessionManager(store, ttl=3600, max_sessions=5, clock=clock)


@pytest.fixture
def rate_limiter(store, clock):
    return RateLimiter(store, clock=clock)


@pytest.fixture
def job_queue(store, clock):
    return JobQueue(store, max_attempts=3, result_ttl=3600, clock=clock)


@pytest.fixture
def job_processor(job_queue, clock):
    return JobProcessor(job_queue, poll_interval=0.01, max_concurrent_jobs=5, clock=clock)


@pytest.fixture
def notifications(store, clock):
    return NotificationService(store, history_limit=100, clock=clock)
