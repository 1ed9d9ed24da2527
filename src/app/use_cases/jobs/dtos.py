"""
Job Use Case DTOs (Data Transfer Objects)

Command and Response classes for the jobs domain.
"""

from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field

from src.domain.entities import JobStatus, JobType


class SubmitJobCommand(BaseModel):
    """Command to enqueue background work"""

    type: JobType
    payload: Dict[str, Any] = Field(default_factory=dict)
    priority: int = 0


class SubmitJobResponse(BaseModel):
    job_id: str
    type: JobType
    queue_length: int


class JobStatusResponse(BaseModel):
    """Terminal job result as stored under job_result:{id}"""

    job_id: str
    type: JobType
    status: JobStatus
    attempts: int
    result: Optional[Any] = None
    error: Optional[str] = None
    error_code: Optional[str] = None
    completed_at: Optional[datetime] = None
    failed_at: Optional[datetime] = None
