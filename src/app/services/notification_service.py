import logging
from typing import Any, Dict, List, Optional

from src.app.repositories.cache_store import USER_NOTIFICATIONS_PREFIX, ICacheStore
from src.domain.base import Clock, generate_uuid, utcnow
from src.domain.entities import Notification

logger = logging.getLogger(__name__)


def user_notifications_key(user_id: str) -> str:
    return f"{USER_NOTIFICATIONS_PREFIX}{user_id}"


class NotificationService:
    """Per-user bounded notification log, newest first."""

    def __init__(self, store: ICacheStore, history_limit: int = 100, clock: Clock = utcnow):
        self.store = store
        self.history_limit = history_limit
        self.clock = clock

    async def publish(
        self,
        user_id: str,
        message: str,
        type: str = "info",
        data: Optional[Dict[str, Any]] = None,
    ) -> str:
        notification = Notification(
            id=generate_uuid(),
            user_id=user_id,
            type=type,
            message=message,
            data=data or {},
            timestamp=self.clock(),
        )
        key = user_notifications_key(user_id)
        await self.store.lpush(key, notification.model_dump(mode="json"))
        await self.store.ltrim(key, 0, self.history_limit - 1)
        return notification.id

    async def list_notifications(self, user_id: str, limit: int = 50) -> List[Notification]:
        if limit <= 0:
            return []
        items = await self.store.lrange(user_notifications_key(user_id), 0, limit - 1)
        return [Notification.model_validate(item) for item in items]
