"""
Use Case: Get System Stats

Operational snapshot for administrators: queue backlog per job type,
in-flight jobs, session counts and cache memory usage.
"""

from typing import Any, Dict

from pydantic import BaseModel

from src.app.repositories.cache_store import ICacheStore
from src.app.services.job_processor import JobProcessor
from src.app.services.session_manager import SessionManager


class GetSystemStatsResponse(BaseModel):
    """Response DTO for GetSystemStatsUseCase"""

    queues: Dict[str, Dict[str, Any]]
    active_jobs: int
    max_concurrent_jobs: int
    is_processing: bool
    sessions: Dict[str, Any]
    memory: Dict[str, Any]


class GetSystemStatsUseCase:
    def __init__(
        self,
        store: ICacheStore,
        session_manager: SessionManager,
        job_processor: JobProcessor,
    ):
        self.store = store
        self.session_manager = session_manager
        self.job_processor = job_processor

    async def execute(self) -> GetSystemStatsResponse:
        """
        Raises:
            StoreUnavailableError: cache store unreachable
        """
        queue_stats = await self.job_processor.get_queue_stats()
        return GetSystemStatsResponse(
            **queue_stats,
            sessions=await self.session_manager.get_session_stats(),
            memory=await self.store.memory_usage(),
        )
