"""
Job Queue

One FIFO list per job type under queue:{type}: enqueue pushes to the head,
dequeue pops from the tail. Terminal results are kept under
job_result:{id} for result_ttl seconds.
"""

import logging
from typing import Any, Dict, Optional, Union

from pydantic import ValidationError

from src.app.repositories.cache_store import JOB_RESULT_PREFIX, QUEUE_PREFIX, ICacheStore
from src.domain.base import Clock, generate_uuid, utcnow
from src.domain.entities import Job, JobResult, JobType, validate_job_payload

logger = logging.getLogger(__name__)


def queue_key(job_type: Union[JobType, str]) -> str:
    return f"{QUEUE_PREFIX}{JobType(job_type).value}"


def job_result_key(job_id: str) -> str:
    return f"{JOB_RESULT_PREFIX}{job_id}"


class JobQueue:
    def __init__(
        self,
        store: ICacheStore,
        max_attempts: int = 3,
        result_ttl: int = 3600,
        clock: Clock = utcnow,
    ):
        self.store = store
        self.max_attempts = max_attempts
        self.result_ttl = result_ttl
        self.clock = clock

    async def enqueue_job(
        self,
        job_type: Union[JobType, str],
        payload: Dict[str, Any],
        priority: int = 0,
    ) -> str:
        """
        Validate and enqueue a job.

        Priority is recorded on the job but does not reorder the queue.

        Raises:
            InvalidJobPayloadError: payload does not match the job type

        Returns:
            Job identifier
        """
        job_type = JobType(job_type)
        job = Job(
            id=generate_uuid(),
            type=job_type,
            payload=validate_job_payload(job_type, payload),
            priority=priority,
            created_at=self.clock(),
            max_attempts=self.max_attempts,
        )
        await self.store.lpush(queue_key(job_type), job.model_dump(mode="json"))
        logger.info(f"Job enqueued: {job.key}")
        return job.id

    async def requeue_job(self, job: Job) -> None:
        """Push an existing job back onto its queue, keeping its id and attempts."""
        await self.store.lpush(queue_key(job.type), job.model_dump(mode="json"))

    async def dequeue_job(self, job_type: Union[JobType, str]) -> Optional[Job]:
        """Pop the oldest job of a type. Malformed records are logged and dropped."""
        data = await self.store.rpop(queue_key(job_type))
        if data is None:
            return None
        try:
            return Job.model_validate(data)
        except ValidationError as e:
            logger.error(f"Dropped malformed record from {queue_key(job_type)}: {e}")
            return None

    async def get_queue_length(self, job_type: Union[JobType, str]) -> int:
        return await self.store.llen(queue_key(job_type))

    async def get_queue_stats(self) -> Dict[str, Dict[str, Any]]:
        timestamp = self.clock().isoformat()
        stats = {}
        for job_type in JobType:
            stats[job_type.value] = {
                "queue_name": job_type.value,
                "length": await self.get_queue_length(job_type),
                "timestamp": timestamp,
            }
        return stats

    async def save_result(self, result: JobResult) -> None:
        await self.store.set(
            job_result_key(result.job_id),
            result.model_dump(mode="json", exclude_none=True),
            self.result_ttl,
        )

    async def get_job_status(self, job_id: str) -> Optional[Dict[str, Any]]:
        return await self.store.get(job_result_key(job_id))
