"""
Job Entities

A Job is the record pushed onto queue:{type}; a JobResult is the terminal
outcome persisted under job_result:{id} for later polling.
"""

from datetime import datetime
from typing import Any, Dict, Literal, Optional, Type

from pydantic import BaseModel, Field, ValidationError

from src.domain.errors import InvalidJobPayloadError
from .enums import JobStatus, JobType


class Job(BaseModel):
    id: str
    type: JobType
    payload: Dict[str, Any] = Field(default_factory=dict)
    priority: int = 0
    created_at: datetime
    attempts: int = 0
    max_attempts: int = 3

    @property
    def key(self) -> str:
        return f"{self.type.value}:{self.id}"


class JobResult(BaseModel):
    job_id: str
    type: JobType
    status: JobStatus
    attempts: int
    result: Optional[Any] = None
    error: Optional[str] = None
    error_code: Optional[str] = None
    completed_at: Optional[datetime] = None
    failed_at: Optional[datetime] = None


# ============================================================================
# Payload shapes per job type
# ============================================================================


class DocumentProcessingPayload(BaseModel):
    document_id: str
    file_path: str
    file_type: str


class AIProcessingPayload(BaseModel):
    document_id: str
    text: str
    metadata: Dict[str, Any] = Field(default_factory=dict)


class NotificationPayload(BaseModel):
    user_id: str
    message: str
    type: str = "info"
    data: Dict[str, Any] = Field(default_factory=dict)


class CleanupPayload(BaseModel):
    type: Literal["sessions"] = "sessions"


JOB_PAYLOAD_MODELS: Dict[JobType, Type[BaseModel]] = {
    JobType.document_processing: DocumentProcessingPayload,
    JobType.ai_processing: AIProcessingPayload,
    JobType.notification: NotificationPayload,
    JobType.cleanup: CleanupPayload,
}


def validate_job_payload(job_type: JobType, payload: Dict[str, Any]) -> Dict[str, Any]:
    """Validate a payload against its job type's model and return it normalized."""
    model = JOB_PAYLOAD_MODELS[job_type]
    try:
        return model.model_validate(payload).model_dump(mode="json")
    except ValidationError as e:
        raise InvalidJobPayloadError(
            f"Invalid payload for job type {job_type.value}: {e.errors()[0]['msg']}"
        ) from e
