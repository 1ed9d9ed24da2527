"""
Job Processor

Polls the per-type queues on a fixed interval and dispatches jobs to
registered handlers as asyncio tasks, with at most max_concurrent_jobs in
flight. Failed jobs are re-enqueued until they reach max_attempts, then
recorded as failed.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional, Set, Union

from src.app.services.job_queue import JobQueue
from src.domain.base import Clock, utcnow
from src.domain.entities import Job, JobResult, JobStatus, JobType
from src.domain.errors import (
    HandlerNotRegisteredError,
    MaxRetriesExceededError,
    StoreUnavailableError,
)

logger = logging.getLogger(__name__)

JobHandler = Callable[[Dict[str, Any]], Awaitable[Any]]


class JobProcessor:
    """
    Background job processor.

    Business Rules:
    - One poll loop per processor; each tick dequeues at most one job per
      type while under the concurrency cap
    - Handlers are looked up by exact job type; a job without a handler
      fails immediately and is not retried
    - Shutdown stops polling at once and waits for in-flight jobs
    """

    def __init__(
        self,
        queue: JobQueue,
        poll_interval: float = 5.0,
        max_concurrent_jobs: int = 5,
        clock: Clock = utcnow,
    ):
        self.queue = queue
        self.poll_interval = poll_interval
        self.max_concurrent_jobs = max_concurrent_jobs
        self.clock = clock

        self.handlers: Dict[JobType, JobHandler] = {}
        self.active_jobs: Set[asyncio.Task] = set()
        self.is_processing = False

        self._stop_event: Optional[asyncio.Event] = None
        self._poll_task: Optional[asyncio.Task] = None
        self._recurring: List[tuple] = []
        self._recurring_tasks: List[asyncio.Task] = []

    def register_handler(self, job_type: Union[JobType, str], handler: JobHandler) -> None:
        job_type = JobType(job_type)
        self.handlers[job_type] = handler
        logger.info(f"Registered handler for job type: {job_type.value}")

    def schedule_recurring(
        self, job_type: Union[JobType, str], payload: Dict[str, Any], interval: float
    ) -> None:
        """Enqueue a job every interval seconds while the processor runs."""
        entry = (JobType(job_type), payload, interval)
        self._recurring.append(entry)
        if self.is_processing:
            self._recurring_tasks.append(asyncio.create_task(self._recurring_loop(*entry)))

    async def start(self) -> None:
        if self.is_processing:
            logger.warning("Job processor already running")
            return

        self.is_processing = True
        self._stop_event = asyncio.Event()
        self._poll_task = asyncio.create_task(self._poll_loop())
        self._recurring_tasks = [
            asyncio.create_task(self._recurring_loop(*entry)) for entry in self._recurring
        ]
        logger.info("Job processor started")

    async def stop(self) -> None:
        if not self.is_processing:
            return

        self.is_processing = False
        self._stop_event.set()
        await asyncio.gather(self._poll_task, *self._recurring_tasks)
        self._poll_task = None
        self._recurring_tasks = []

        await self.wait_for_active_jobs()
        logger.info("Job processor stopped")

    async def wait_for_active_jobs(self) -> None:
        while self.active_jobs:
            logger.info(f"Waiting for {len(self.active_jobs)} active jobs to complete...")
            await asyncio.gather(*list(self.active_jobs), return_exceptions=True)

    async def _sleep_or_stop(self, seconds: float) -> bool:
        """Sleep up to seconds. Returns True if stop was requested."""
        try:
            await asyncio.wait_for(self._stop_event.wait(), timeout=seconds)
            return True
        except asyncio.TimeoutError:
            return False

    async def _poll_loop(self) -> None:
        while not self._stop_event.is_set():
            await self.process_jobs()
            if await self._sleep_or_stop(self.poll_interval):
                break

    async def _recurring_loop(self, job_type: JobType, payload: Dict[str, Any], interval: float) -> None:
        while not await self._sleep_or_stop(interval):
            try:
                await self.queue.enqueue_job(job_type, payload)
            except StoreUnavailableError as e:
                logger.error(f"Recurring {job_type.value} job not enqueued: {e}")
            except Exception:
                logger.exception(f"Recurring {job_type.value} job not enqueued")

    async def process_jobs(self) -> List[asyncio.Task]:
        """
        Run one poll tick.

        Returns:
            Tasks dispatched during this tick
        """
        dispatched: List[asyncio.Task] = []
        try:
            for job_type in JobType:
                if len(self.active_jobs) >= self.max_concurrent_jobs:
                    break
                job = await self.queue.dequeue_job(job_type)
                if job is not None:
                    dispatched.append(self._dispatch(job))
        except StoreUnavailableError as e:
            logger.error(f"Job poll skipped, cache store unavailable: {e}")
        except Exception:
            logger.exception("Job poll tick failed")
        return dispatched

    def _dispatch(self, job: Job) -> asyncio.Task:
        task = asyncio.create_task(self._process_job(job), name=job.key)
        self.active_jobs.add(task)
        task.add_done_callback(self.active_jobs.discard)
        return task

    async def _process_job(self, job: Job) -> None:
        logger.info(f"Processing job: {job.key}")
        try:
            handler = self.handlers.get(job.type)
            if handler is None:
                raise HandlerNotRegisteredError(
                    f"No handler registered for job type: {job.type.value}"
                )
            result = await handler(job.payload)
        except HandlerNotRegisteredError as e:
            logger.error(f"Job {job.key} dropped: {e}")
            job.attempts += 1
            await self._record(self._failed_result(job, e, e.error.code))
        except Exception as e:
            await self._handle_failure(job, e)
        else:
            logger.info(f"Job completed: {job.key}")
            job.attempts += 1
            await self._record(
                JobResult(
                    job_id=job.id,
                    type=job.type,
                    status=JobStatus.completed,
                    attempts=job.attempts,
                    result=result,
                    completed_at=self.clock(),
                )
            )

    async def _handle_failure(self, job: Job, exc: Exception) -> None:
        job.attempts += 1
        if job.attempts < job.max_attempts:
            logger.warning(f"Job failed: {job.key} (attempt {job.attempts}), retrying: {exc}")
            try:
                await self.queue.requeue_job(job)
            except StoreUnavailableError as e:
                logger.error(f"Job {job.key} lost, could not requeue: {e}")
            return

        final = MaxRetriesExceededError(f"Job {job.key} failed after {job.attempts} attempts: {exc}")
        logger.error(str(final))
        await self._record(self._failed_result(job, exc, final.error.code))

    def _failed_result(self, job: Job, exc: Exception, code: str) -> JobResult:
        return JobResult(
            job_id=job.id,
            type=job.type,
            status=JobStatus.failed,
            attempts=job.attempts,
            error=str(exc),
            error_code=code,
            failed_at=self.clock(),
        )

    async def _record(self, result: JobResult) -> None:
        try:
            await self.queue.save_result(result)
        except StoreUnavailableError as e:
            logger.error(f"Result of job {result.type.value}:{result.job_id} not stored: {e}")

    async def get_job_status(self, job_id: str) -> Optional[Dict[str, Any]]:
        return await self.queue.get_job_status(job_id)

    async def get_queue_stats(self) -> Dict[str, Any]:
        return {
            "queues": await self.queue.get_queue_stats(),
            "active_jobs": len(self.active_jobs),
            "max_concurrent_jobs": self.max_concurrent_jobs,
            "is_processing": self.is_processing,
        }

    def health_check(self) -> Dict[str, Any]:
        return {
            "status": "healthy",
            "is_processing": self.is_processing,
            "active_jobs": len(self.active_jobs),
            "max_concurrent_jobs": self.max_concurrent_jobs,
            "processors": [job_type.value for job_type in self.handlers],
        }
