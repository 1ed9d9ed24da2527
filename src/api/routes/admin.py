"""
Admin API Routes - System Administration Endpoints

Operational endpoints for administrators. Authentication is via a session
with the admin role.
"""

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel

from src.adapter.services.service_container import ServiceContainer
from src.api.error import ClientError
from src.api.utils.rate_limit import create_limiter
from src.app.use_cases.admin import GetSystemStatsResponse, GetSystemStatsUseCase
from src.depends import get_container, require_admin
from src.domain.entities import LimitCategory
from src.domain.errors import Error

router = APIRouter(
    prefix="/admin",
    tags=["Admin"],
    dependencies=[Depends(require_admin), Depends(create_limiter(LimitCategory.admin))],
)


class CleanupSessionsResponse(BaseModel):
    cleaned_count: int


class RateLimitStatusResponse(BaseModel):
    identifier: str
    category: LimitCategory
    limit: int
    remaining: int
    reset_time: str


class ResetRateLimitResponse(BaseModel):
    identifier: str
    category: LimitCategory
    reset: bool


@router.get("/stats", response_model=GetSystemStatsResponse)
async def get_system_stats(container: ServiceContainer = Depends(get_container)):
    """
    System Stats

    Queue length per job type, active job count, session statistics and
    cache memory usage.
    """
    use_case = GetSystemStatsUseCase(
        container.store, container.session_manager, container.job_processor
    )
    return await use_case.execute()


@router.post("/sessions/cleanup", response_model=CleanupSessionsResponse)
async def cleanup_sessions(container: ServiceContainer = Depends(get_container)):
    """Run the expired-session sweep now."""
    cleaned = await container.session_manager.cleanup_expired_sessions()
    return CleanupSessionsResponse(cleaned_count=cleaned)


@router.get("/rate-limits/{identifier}", response_model=RateLimitStatusResponse)
async def get_rate_limit_status(
    identifier: str,
    category: LimitCategory = Query(LimitCategory.api),
    container: ServiceContainer = Depends(get_container),
):
    """
    Rate Limit Status

    identifier is the actor part of a counter, e.g. user:{id} or ip:{address}.

    Raises:
        - 404 Not Found: Category has no configured budget
    """
    result = await container.rate_limiter.get_rate_limit_status(identifier, category)
    if result is None:
        raise ClientError(
            Error("RATE_LIMIT_CATEGORY_NOT_FOUND", f"No budget for category {category.value}"),
            status_code=status.HTTP_404_NOT_FOUND,
        )
    return RateLimitStatusResponse(
        identifier=identifier,
        category=category,
        limit=result.limit,
        remaining=result.remaining,
        reset_time=result.reset_time.isoformat(),
    )


@router.delete("/rate-limits/{identifier}", response_model=ResetRateLimitResponse)
async def reset_rate_limit(
    identifier: str,
    category: LimitCategory = Query(LimitCategory.api),
    container: ServiceContainer = Depends(get_container),
):
    removed = await container.rate_limiter.reset_rate_limit(identifier, category)
    return ResetRateLimitResponse(identifier=identifier, category=category, reset=removed > 0)
