"""Background job use cases."""

from .dtos import JobStatusResponse, SubmitJobCommand, SubmitJobResponse
from .get_job_status_use_case import GetJobStatusUseCase
from .submit_job_use_case import SubmitJobUseCase

__all__ = [
    "SubmitJobUseCase",
    "SubmitJobCommand",
    "SubmitJobResponse",
    "GetJobStatusUseCase",
    "JobStatusResponse",
]
