"""
Domain Error Taxonomy

Every failure the core can signal, each carrying an Error(code, message)
that the API layer maps onto an HTTP response.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Error:
    code: str
    message: str


class DomainError(Exception):
    """Base class for all core errors"""

    code = "INTERNAL_ERROR"

    def __init__(self, message: str, code: Optional[str] = None):
        self.error = Error(code or self.code, message)
        super().__init__(message)


class StoreUnavailableError(DomainError):
    """Cache store is not connected or unreachable"""

    code = "STORE_UNAVAILABLE"


class NotFoundError(DomainError):
    code = "NOT_FOUND"


class SessionNotFoundError(NotFoundError):
    code = "SESSION_NOT_FOUND"


class JobNotFoundError(NotFoundError):
    code = "JOB_NOT_FOUND"


class SessionExpiredError(DomainError):
    """Session idle time exceeded its TTL"""

    code = "SESSION_EXPIRED"


class UnauthorizedError(DomainError):
    code = "UNAUTHORIZED"


class ForbiddenError(DomainError):
    code = "FORBIDDEN"


class MaxRetriesExceededError(DomainError):
    """Job failed on its last allowed attempt"""

    code = "MAX_RETRIES_EXCEEDED"


class HandlerNotRegisteredError(DomainError):
    """No handler is registered for a dequeued job's type"""

    code = "HANDLER_NOT_REGISTERED"


class InvalidJobPayloadError(DomainError):
    code = "INVALID_JOB_PAYLOAD"
