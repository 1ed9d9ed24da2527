"""
Rate Limiter

Fixed-window, sliding-window and burst-aware request throttling over the
shared cache store. Counters live under rate_limit:{identifier}.

The check_* methods raise StoreUnavailableError; callers on the request
path fail open (see RateLimitResult.fail_open).
"""

import logging
from datetime import UTC, datetime, timedelta
from typing import Dict, Optional, Union

from src.app.repositories.cache_store import RATE_LIMIT_PREFIX, ICacheStore
from src.domain.base import Clock, utcnow
from src.domain.entities import (
    BURST_WINDOW_SECONDS,
    DEFAULT_RATE_LIMITS,
    LimitCategory,
    RateLimitResult,
    RateLimitRule,
)
from src.domain.entities.rate_limit import seconds_until

logger = logging.getLogger(__name__)


class RateLimiter:
    """
    Rate limiter keyed by actor identity and limit category.

    Business Rules:
    - Authenticated actors are limited per user id, anonymous ones per
      source address; the ip category is always per source address
    - Fixed-window counters re-set their TTL on every accepted request
    - Burst checks pass only if both the base and the 60s burst window pass
    """

    def __init__(
        self,
        store: ICacheStore,
        limits: Optional[Dict[Union[LimitCategory, str], Dict[str, int]]] = None,
        clock: Clock = utcnow,
    ):
        self.store = store
        self.clock = clock
        self.limits: Dict[LimitCategory, RateLimitRule] = dict(DEFAULT_RATE_LIMITS)
        for category, rule in (limits or {}).items():
            self.limits[LimitCategory(category)] = RateLimitRule.model_validate(rule)

    def get_rule(self, category: Union[LimitCategory, str]) -> Optional[RateLimitRule]:
        return self.limits.get(LimitCategory(category))

    @staticmethod
    def get_identifier(
        category: Union[LimitCategory, str],
        user_id: Optional[str] = None,
        client_ip: Optional[str] = None,
    ) -> str:
        category = LimitCategory(category)
        if user_id and category != LimitCategory.ip:
            return f"user:{user_id}:{category.value}"
        return f"ip:{client_ip or 'unknown'}:{category.value}"

    async def check_rate_limit(self, identifier: str, limit: int, window: int) -> RateLimitResult:
        """Fixed-window check against rate_limit:{identifier}."""
        count = await self.store.increment_if_below(f"{RATE_LIMIT_PREFIX}{identifier}", limit, window)
        now = self.clock()
        reset_time = now + timedelta(seconds=window)

        if count is None:
            return RateLimitResult(
                allowed=False,
                limit=limit,
                remaining=0,
                reset_time=reset_time,
                retry_after=seconds_until(reset_time, now),
            )

        return RateLimitResult(
            allowed=True, limit=limit, remaining=limit - count, reset_time=reset_time
        )

    async def check_sliding_window(self, identifier: str, limit: int, window: int) -> RateLimitResult:
        """Sliding-window check over the request timestamps of the trailing window."""
        key = f"{RATE_LIMIT_PREFIX}{identifier}:requests"
        now = self.clock()
        now_ts = now.timestamp()
        window_start = now_ts - window

        requests = await self.store.get(key) or []
        valid = [ts for ts in requests if ts > window_start]

        if len(valid) >= limit:
            reset_time = datetime.fromtimestamp(valid[0] + window, UTC)
            return RateLimitResult(
                allowed=False,
                limit=limit,
                remaining=0,
                reset_time=reset_time,
                retry_after=seconds_until(reset_time, now),
            )

        valid.append(now_ts)
        await self.store.set(key, valid, window)

        return RateLimitResult(
            allowed=True,
            limit=limit,
            remaining=limit - len(valid),
            reset_time=now + timedelta(seconds=window),
        )

    async def check_burst(
        self, identifier: str, base_limit: int, burst_limit: int, window: int
    ) -> RateLimitResult:
        """Base window and 60s burst window; admitted only if both admit."""
        base = await self.check_rate_limit(identifier, base_limit, window)
        burst = await self.check_rate_limit(f"{identifier}:burst", burst_limit, BURST_WINDOW_SECONDS)

        allowed = base.allowed and burst.allowed
        retry_after = None
        if not allowed:
            retry_after = max(r.retry_after for r in (base, burst) if not r.allowed)

        return RateLimitResult(
            allowed=allowed,
            limit=base_limit,
            remaining=min(base.remaining, burst.remaining),
            reset_time=base.reset_time,
            retry_after=retry_after,
            burst_limit=burst_limit,
        )

    async def check_category(
        self,
        category: Union[LimitCategory, str],
        user_id: Optional[str] = None,
        client_ip: Optional[str] = None,
    ) -> Optional[RateLimitResult]:
        """Fixed-window check with the category's budget. None if the category has no budget."""
        rule = self.get_rule(category)
        if rule is None:
            return None
        identifier = self.get_identifier(category, user_id, client_ip)
        return await self.check_rate_limit(identifier, rule.limit, rule.window)

    async def reset_rate_limit(self, identifier: str, category: Union[LimitCategory, str] = LimitCategory.api) -> int:
        full_identifier = f"{identifier}:{LimitCategory(category).value}"
        removed = await self.store.delete(f"{RATE_LIMIT_PREFIX}{full_identifier}")
        logger.info(f"Rate limit reset for {full_identifier}")
        return removed

    async def get_rate_limit_status(
        self, identifier: str, category: Union[LimitCategory, str] = LimitCategory.api
    ) -> Optional[RateLimitResult]:
        rule = self.get_rule(category)
        if rule is None:
            return None

        full_identifier = f"{identifier}:{LimitCategory(category).value}"
        current = await self.store.get(f"{RATE_LIMIT_PREFIX}{full_identifier}") or 0
        remaining = max(0, rule.limit - int(current))
        return RateLimitResult(
            allowed=remaining > 0,
            limit=rule.limit,
            remaining=remaining,
            reset_time=self.clock() + timedelta(seconds=rule.window),
        )
