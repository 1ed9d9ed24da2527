"""
Service Container

Composition root: builds the cache store adapter and the core services that
share it, from application config.
"""

from dataclasses import dataclass
from typing import Optional

from src.adapter.repositories.memory_cache_store import InMemoryCacheStore
from src.adapter.repositories.redis_cache_store import RedisCacheStore
from src.api.utils.jwt import verify_jwt
from src.app.repositories.cache_store import ICacheStore
from src.app.services.job_handlers import register_default_handlers
from src.app.services.job_processor import JobProcessor
from src.app.services.job_queue import JobQueue
from src.app.services.notification_service import NotificationService
from src.app.services.rate_limiter import RateLimiter
from src.app.services.session_manager import SessionManager
from src.domain.base import Clock, utcnow


@dataclass
class ServiceContainer:
    store: ICacheStore
    session_manager: SessionManager
    rate_limiter: RateLimiter
    job_queue: JobQueue
    job_processor: JobProcessor
    notifications: NotificationService


def create_cache_store(config, clock: Clock = utcnow) -> ICacheStore:
    backend = config.CACHE_BACKEND
    if backend == "redis":
        return RedisCacheStore(config.REDIS_URL)
    if backend == "memory":
        return InMemoryCacheStore(clock=clock)
    raise ValueError(f"Unsupported CACHE_BACKEND: {backend}")


def build_container(config, store: Optional[ICacheStore] = None, clock: Clock = utcnow) -> ServiceContainer:
    store = store or create_cache_store(config, clock)

    session_manager = SessionManager(
        store,
        ttl=config.SESSION_TTL,
        max_sessions=config.MAX_SESSIONS_PER_USER,
        token_verifier=verify_jwt,
        cookie_name=config.SESSION_COOKIE_NAME,
        header_name=config.SESSION_HEADER_NAME,
        clock=clock,
    )
    rate_limiter = RateLimiter(store, limits=config.RATE_LIMITS, clock=clock)
    job_queue = JobQueue(
        store,
        max_attempts=config.JOB_MAX_ATTEMPTS,
        result_ttl=config.JOB_RESULT_TTL,
        clock=clock,
    )
    job_processor = JobProcessor(
        job_queue,
        poll_interval=config.JOB_POLL_INTERVAL,
        max_concurrent_jobs=config.MAX_CONCURRENT_JOBS,
        clock=clock,
    )
    notifications = NotificationService(
        store, history_limit=config.NOTIFICATION_HISTORY_LIMIT, clock=clock
    )
    register_default_handlers(job_processor, notifications, session_manager)

    return ServiceContainer(
        store=store,
        session_manager=session_manager,
        rate_limiter=rate_limiter,
        job_queue=job_queue,
        job_processor=job_processor,
        notifications=notifications,
    )
