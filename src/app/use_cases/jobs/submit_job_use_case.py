"""
Submit Job Use Case

Enqueues background work on behalf of an authenticated user.
"""

from src.app.services.job_queue import JobQueue
from src.domain.entities import JobType, Session, SessionRole
from src.domain.errors import ForbiddenError
from .dtos import SubmitJobCommand, SubmitJobResponse


class SubmitJobUseCase:
    """
    Use case for submitting a background job.

    Business Rules:
    - Payload must match the job type's payload shape
    - Cleanup jobs are admin-only
    - Non-admins may only send notifications to themselves
    """

    def __init__(self, job_queue: JobQueue):
        self.job_queue = job_queue

    async def execute(self, command: SubmitJobCommand, requester: Session) -> SubmitJobResponse:
        """
        Execute submit job use case.

        Raises:
            ForbiddenError: requester may not submit this job
            InvalidJobPayloadError: payload does not match the job type

        Returns:
            SubmitJobResponse with the new job id
        """
        is_admin = requester.role == SessionRole.admin.value

        if command.type == JobType.cleanup and not is_admin:
            raise ForbiddenError("Cleanup jobs require admin privileges")

        if (
            command.type == JobType.notification
            and not is_admin
            and command.payload.get("user_id") != requester.user_id
        ):
            raise ForbiddenError("Notifications can only be sent to yourself")

        job_id = await self.job_queue.enqueue_job(
            command.type, command.payload, priority=command.priority
        )
        queue_length = await self.job_queue.get_queue_length(command.type)

        return SubmitJobResponse(job_id=job_id, type=command.type, queue_length=queue_length)
