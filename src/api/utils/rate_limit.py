"""
Rate Limit Dependencies

FastAPI dependencies wrapping the RateLimiter. Each sets the X-RateLimit-*
headers, rejects with 429 when the limit is exceeded, and lets the request
through when the cache store is unavailable.
"""

import logging
from typing import Awaitable, Callable, Dict, Optional, Union

from fastapi import Request, Response, status

from src.api.error import ClientError
from src.app.services.rate_limiter import RateLimiter
from src.domain.entities import LimitCategory, RateLimitResult
from src.domain.errors import Error, StoreUnavailableError

logger = logging.getLogger(__name__)

IdentifierFn = Callable[[Request], str]


def _limiter(request: Request) -> RateLimiter:
    return request.app.state.container.rate_limiter


def _user_id(request: Request) -> Optional[str]:
    session = getattr(request.state, "session", None)
    return session.user_id if session else None


def _client_ip(request: Request) -> Optional[str]:
    return request.client.host if request.client else None


def rate_limit_headers(result: RateLimitResult) -> Dict[str, str]:
    headers = {
        "X-RateLimit-Limit": str(result.limit),
        "X-RateLimit-Remaining": str(result.remaining),
        "X-RateLimit-Reset": result.reset_time.isoformat(),
    }
    if result.burst_limit is not None:
        headers["X-RateLimit-Burst"] = str(result.burst_limit)
    if not result.allowed and result.retry_after is not None:
        headers["Retry-After"] = str(result.retry_after)
    return headers


async def _evaluate(
    limiter: RateLimiter,
    check: Awaitable[RateLimitResult],
    limit: int,
    window: int,
    label: str,
) -> RateLimitResult:
    try:
        return await check
    except StoreUnavailableError as e:
        logger.warning(f"Rate limiter ({label}) failing open: {e}")
        return RateLimitResult.fail_open(limit, window, limiter.clock())


def _enforce(response: Response, result: RateLimitResult, message: str) -> None:
    headers = rate_limit_headers(result)
    if not result.allowed:
        raise ClientError(
            Error("RATE_LIMIT_EXCEEDED", message),
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            headers=headers,
            extra={"retry_after": result.retry_after},
        )
    response.headers.update(headers)


def create_limiter(category: Union[LimitCategory, str] = LimitCategory.api):
    """Fixed-window limiter with the category's configured budget."""
    category = LimitCategory(category)

    async def limit_by_category(request: Request, response: Response) -> None:
        limiter = _limiter(request)
        rule = limiter.get_rule(category)
        if rule is None:
            return

        identifier = limiter.get_identifier(category, _user_id(request), _client_ip(request))
        result = await _evaluate(
            limiter,
            limiter.check_rate_limit(identifier, rule.limit, rule.window),
            rule.limit,
            rule.window,
            category.value,
        )
        _enforce(response, result, "Rate limit exceeded")

    return limit_by_category


def create_custom_limiter(limit: int, window: int, identifier_fn: Optional[IdentifierFn] = None):
    async def limit_custom(request: Request, response: Response) -> None:
        limiter = _limiter(request)
        if identifier_fn is not None:
            identifier = identifier_fn(request)
        else:
            identifier = limiter.get_identifier(LimitCategory.custom, _user_id(request), _client_ip(request))
        result = await _evaluate(
            limiter, limiter.check_rate_limit(identifier, limit, window), limit, window, "custom"
        )
        _enforce(response, result, "Rate limit exceeded")

    return limit_custom


def create_burst_limiter(base_limit: int, burst_limit: int, window: int):
    async def limit_burst(request: Request, response: Response) -> None:
        limiter = _limiter(request)
        identifier = limiter.get_identifier(LimitCategory.burst, _user_id(request), _client_ip(request))
        result = await _evaluate(
            limiter,
            limiter.check_burst(identifier, base_limit, burst_limit, window),
            base_limit,
            window,
            "burst",
        )
        _enforce(response, result, "Rate limit exceeded (base or burst)")

    return limit_burst


def create_sliding_window_limiter(limit: int, window: int):
    async def limit_sliding(request: Request, response: Response) -> None:
        limiter = _limiter(request)
        identifier = limiter.get_identifier(LimitCategory.sliding, _user_id(request), _client_ip(request))
        result = await _evaluate(
            limiter,
            limiter.check_sliding_window(identifier, limit, window),
            limit,
            window,
            "sliding",
        )
        _enforce(response, result, "Rate limit exceeded (sliding window)")

    return limit_sliding
