from typing import List

from fastapi import APIRouter, Depends, Query

from src.adapter.services.service_container import ServiceContainer
from src.api.utils.rate_limit import create_sliding_window_limiter
from src.depends import get_container, require_user
from src.domain.entities import DEFAULT_RATE_LIMITS, LimitCategory, Notification, Session

router = APIRouter(prefix="/notifications", tags=["Notifications"])

_chat_rule = DEFAULT_RATE_LIMITS[LimitCategory.chat]


@router.get(
    "",
    response_model=List[Notification],
    dependencies=[Depends(create_sliding_window_limiter(_chat_rule.limit, _chat_rule.window))],
)
async def list_notifications(
    limit: int = Query(50, ge=1, le=100),
    session: Session = Depends(require_user),
    container: ServiceContainer = Depends(get_container),
):
    """Most recent notifications of the current user, newest first."""
    return await container.notifications.list_notifications(session.user_id, limit)
