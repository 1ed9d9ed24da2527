"""
Session Use Case DTOs (Data Transfer Objects)

Response classes for the sessions domain.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel

from src.domain.entities import Session


class SessionInfo(BaseModel):
    """Public view of a session"""

    session_id: str
    user_id: str
    role: Optional[str] = None
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    attributes: Dict[str, Any] = {}
    created_at: datetime
    last_activity: datetime
    expires_at: datetime

    @classmethod
    def from_session(cls, session: Session) -> "SessionInfo":
        return cls(
            **session.model_dump(exclude={"ttl_seconds"}),
            expires_at=session.expires_at(),
        )


class CreateSessionResponse(BaseModel):
    session_id: str
    session_token: str
    expires_in: int


class SessionListResponse(BaseModel):
    sessions: List[SessionInfo]


class RevokeSessionsResponse(BaseModel):
    """Response for bulk session revocation"""

    revoked_count: int
    target_user_id: str


class RevokeSpecificSessionResponse(BaseModel):
    """Response for specific session revocation"""

    session_id: str
    revoked: bool
