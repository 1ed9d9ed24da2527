"""
Built-in Job Handlers

Handlers for the job types served inside this service. Document and AI
processing stages are registered by their own collaborators.
"""

from typing import Any, Dict

from src.app.services.job_processor import JobHandler, JobProcessor
from src.app.services.notification_service import NotificationService
from src.app.services.session_manager import SessionManager
from src.domain.entities import JobType
from src.domain.entities.job import CleanupPayload, NotificationPayload


def create_notification_handler(notifications: NotificationService) -> JobHandler:
    async def handle_notification(payload: Dict[str, Any]) -> Dict[str, Any]:
        command = NotificationPayload.model_validate(payload)
        notification_id = await notifications.publish(
            command.user_id,
            command.message,
            type=command.type,
            data=command.data,
        )
        return {
            "user_id": command.user_id,
            "type": command.type,
            "notification_id": notification_id,
            "sent": True,
        }

    return handle_notification


def create_cleanup_handler(session_manager: SessionManager) -> JobHandler:
    async def handle_cleanup(payload: Dict[str, Any]) -> Dict[str, Any]:
        command = CleanupPayload.model_validate(payload)
        cleaned_count = await session_manager.cleanup_expired_sessions()
        return {"type": command.type, "cleaned_count": cleaned_count}

    return handle_cleanup


def register_default_handlers(
    processor: JobProcessor,
    notifications: NotificationService,
    session_manager: SessionManager,
) -> None:
    processor.register_handler(JobType.notification, create_notification_handler(notifications))
    processor.register_handler(JobType.cleanup, create_cleanup_handler(session_manager))
