"""
Session Management Use Cases

All session-related business logic.
"""

from .dtos import (
    CreateSessionResponse,
    RevokeSessionsResponse,
    RevokeSpecificSessionResponse,
    SessionInfo,
    SessionListResponse,
)
from .revoke_sessions_use_case import RevokeSessionsUseCase

__all__ = [
    "RevokeSessionsUseCase",
    "CreateSessionResponse",
    "RevokeSessionsResponse",
    "RevokeSpecificSessionResponse",
    "SessionInfo",
    "SessionListResponse",
]
