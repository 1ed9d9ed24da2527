from src.app.services.job_queue import JobQueue
from src.domain.errors import JobNotFoundError
from .dtos import JobStatusResponse


class GetJobStatusUseCase:
    """Look up a job's terminal result. Jobs still queued or running have none yet."""

    def __init__(self, job_queue: JobQueue):
        self.job_queue = job_queue

    async def execute(self, job_id: str) -> JobStatusResponse:
        status = await self.job_queue.get_job_status(job_id)
        if status is None:
            raise JobNotFoundError("Job result not found")
        return JobStatusResponse.model_validate(status)
