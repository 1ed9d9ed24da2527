"""
Unit tests for JobQueue
"""

import pytest

from src.app.services.job_queue import queue_key
from src.domain.entities import JobResult, JobStatus, JobType
from src.domain.errors import InvalidJobPayloadError


@pytest.mark.asyncio
async def test_dequeue_is_fifo(job_queue):
    job_ids = [
        await job_queue.enqueue_job(JobType.notification, {"user_id": "u1", "message": f"m{i}"})
        for i in range(3)
    ]

    dequeued = [(await job_queue.dequeue_job(JobType.notification)).id for _ in range(3)]

    assert dequeued == job_ids
    assert await job_queue.dequeue_job(JobType.notification) is None


@pytest.mark.asyncio
async def test_enqueue_records_job_fields(job_queue, clock):
    await job_queue.enqueue_job(
        "document_processing",
        {"document_id": "d1", "file_path": "/uploads/d1.pdf", "file_type": "pdf"},
        priority=5,
    )

    job = await job_queue.dequeue_job(JobType.document_processing)
    assert job.type == JobType.document_processing
    assert job.priority == 5
    assert job.attempts == 0
    assert job.max_attempts == 3
    assert job.created_at == clock()
    assert job.payload["file_type"] == "pdf"


@pytest.mark.asyncio
async def test_enqueue_rejects_invalid_payload(job_queue):
    with pytest.raises(InvalidJobPayloadError) as exc_info:
        await job_queue.enqueue_job(JobType.notification, {"user_id": "u1"})

    assert exc_info.value.error.code == "INVALID_JOB_PAYLOAD"
    assert await job_queue.get_queue_length(JobType.notification) == 0


@pytest.mark.asyncio
async def test_enqueue_fills_payload_defaults(job_queue):
    await job_queue.enqueue_job(JobType.cleanup, {})

    job = await job_queue.dequeue_job(JobType.cleanup)
    assert job.payload == {"type": "sessions"}


@pytest.mark.asyncio
async def test_requeue_keeps_identity(job_queue, store):
    job_id = await job_queue.enqueue_job(JobType.notification, {"user_id": "u1", "message": "hi"})
    job = await job_queue.dequeue_job(JobType.notification)
    job.attempts = 2

    await job_queue.requeue_job(job)

    again = await job_queue.dequeue_job(JobType.notification)
    assert again.id == job_id
    assert again.attempts == 2
    assert await store.llen(queue_key(JobType.notification)) == 0


@pytest.mark.asyncio
async def test_queue_stats_cover_every_job_type(job_queue):
    await job_queue.enqueue_job(JobType.notification, {"user_id": "u1", "message": "hi"})

    stats = await job_queue.get_queue_stats()

    assert set(stats) == {t.value for t in JobType}
    assert stats["notification"]["length"] == 1
    assert stats["cleanup"]["length"] == 0


@pytest.mark.asyncio
async def test_results_expire_after_result_ttl(job_queue, clock):
    await job_queue.save_result(
        JobResult(
            job_id="job-1",
            type=JobType.cleanup,
            status=JobStatus.completed,
            attempts=1,
            result={"cleaned_count": 0},
            completed_at=clock(),
        )
    )

    status = await job_queue.get_job_status("job-1")
    assert status["status"] == "completed"
    assert "error" not in status

    clock.advance(3600)
    assert await job_queue.get_job_status("job-1") is None


@pytest.mark.asyncio
async def test_dequeue_drops_malformed_record(job_queue, store):
    await store.lpush(queue_key(JobType.notification), {"bogus": 1})
    job_id = await job_queue.enqueue_job(JobType.notification, {"user_id": "u1", "message": "hi"})

    assert await job_queue.dequeue_job(JobType.notification) is None
    assert (await job_queue.dequeue_job(JobType.notification)).id == job_id
