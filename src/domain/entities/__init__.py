"""
Core Domain Entities

All domain entities organized by model.
Each entity in its own file for better maintainability.
"""

# Export all enums
from .enums import (
    SessionRole,
    LimitCategory,
    JobType,
    JobStatus,
)

# Export all entities
from .session import Session
from .job import (
    Job,
    JobResult,
    JOB_PAYLOAD_MODELS,
    validate_job_payload,
)
from .notification import Notification
from .rate_limit import (
    RateLimitRule,
    RateLimitResult,
    DEFAULT_RATE_LIMITS,
    BURST_WINDOW_SECONDS,
)

__all__ = [
    # Enums
    "SessionRole",
    "LimitCategory",
    "JobType",
    "JobStatus",
    # Entities
    "Session",
    "Job",
    "JobResult",
    "JOB_PAYLOAD_MODELS",
    "validate_job_payload",
    "Notification",
    "RateLimitRule",
    "RateLimitResult",
    "DEFAULT_RATE_LIMITS",
    "BURST_WINDOW_SECONDS",
]
