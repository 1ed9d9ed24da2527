"""
Core Domain Enums

All enumeration types used across domain entities.
"""

from enum import Enum


class SessionRole(str, Enum):
    """Role recorded on a session at login"""

    admin = "admin"
    user = "user"


class LimitCategory(str, Enum):
    """Rate-limit budget categories"""

    auth = "auth"
    upload = "upload"
    download = "download"
    chat = "chat"
    admin = "admin"
    api = "api"
    ip = "ip"
    custom = "custom"
    burst = "burst"
    sliding = "sliding"


class JobType(str, Enum):
    """Background job types, one queue each"""

    document_processing = "document_processing"
    ai_processing = "ai_processing"
    notification = "notification"
    cleanup = "cleanup"


class JobStatus(str, Enum):
    """Terminal job outcome"""

    completed = "completed"
    failed = "failed"
