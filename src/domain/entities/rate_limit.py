"""
Rate Limit Entities

Budgets per category and the outcome of a single admission check.
"""

import math
from datetime import datetime, timedelta
from typing import Dict, Optional

from pydantic import BaseModel

from .enums import LimitCategory


class RateLimitRule(BaseModel):
    """limit requests per window seconds"""

    limit: int
    window: int


DEFAULT_RATE_LIMITS: Dict[LimitCategory, RateLimitRule] = {
    LimitCategory.auth: RateLimitRule(limit=5, window=300),
    LimitCategory.upload: RateLimitRule(limit=10, window=3600),
    LimitCategory.download: RateLimitRule(limit=50, window=3600),
    LimitCategory.chat: RateLimitRule(limit=100, window=3600),
    LimitCategory.admin: RateLimitRule(limit=1000, window=3600),
    LimitCategory.api: RateLimitRule(limit=100, window=900),
    LimitCategory.ip: RateLimitRule(limit=1000, window=3600),
}

BURST_WINDOW_SECONDS = 60


class RateLimitResult(BaseModel):
    allowed: bool
    limit: int
    remaining: int
    reset_time: datetime
    retry_after: Optional[int] = None
    burst_limit: Optional[int] = None

    @classmethod
    def fail_open(cls, limit: int, window: int, now: datetime) -> "RateLimitResult":
        """Permissive result used when the store cannot be consulted."""
        return cls(
            allowed=True,
            limit=limit,
            remaining=limit,
            reset_time=now + timedelta(seconds=window),
        )


def seconds_until(reset_time: datetime, now: datetime) -> int:
    return max(0, math.ceil((reset_time - now).total_seconds()))
