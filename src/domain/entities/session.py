"""
Session Entity

Tracks an authenticated user's activity in the cache store.
"""

from datetime import datetime, timedelta
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


class Session(BaseModel):
    """
    Session entity - stored under session:{session_id}.

    Business Rules:
    - Registered in the owner's user_sessions:{user_id} set
    - Expires after ttl_seconds without activity
    - last_activity refreshed on every authenticated request
    """

    session_id: str
    user_id: str
    role: Optional[str] = None
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    attributes: Dict[str, Any] = Field(default_factory=dict)

    ttl_seconds: int = 3600
    created_at: datetime
    last_activity: datetime

    def idle_seconds(self, now: datetime) -> float:
        return (now - self.last_activity).total_seconds()

    def is_expired(self, now: datetime) -> bool:
        return self.idle_seconds(now) > self.ttl_seconds

    def expires_at(self) -> datetime:
        return self.last_activity + timedelta(seconds=self.ttl_seconds)
