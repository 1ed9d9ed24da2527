"""
Revoke Sessions Use Case

Handles session revocation for security and session management.
"""

import logging

from src.app.services.session_manager import SessionManager
from src.domain.entities import Session, SessionRole
from src.domain.errors import ForbiddenError, SessionNotFoundError
from .dtos import RevokeSessionsResponse, RevokeSpecificSessionResponse

logger = logging.getLogger(__name__)


class RevokeSessionsUseCase:
    """
    Use case for revoking user sessions.

    Business Rules:
    - Users can revoke their own sessions
    - Admins can revoke any user's sessions
    - Revocation is logged for security compliance
    - Three revocation modes: all, specific, all-except-current
    """

    def __init__(self, session_manager: SessionManager):
        self.session_manager = session_manager

    @staticmethod
    def _authorize(target_user_id: str, requester: Session) -> bool:
        is_self = target_user_id == requester.user_id
        is_admin = requester.role == SessionRole.admin.value

        if not is_self and not is_admin:
            raise ForbiddenError("Only admins can revoke other users' sessions")
        return is_self

    async def revoke_all_sessions(
        self, target_user_id: str, requester: Session
    ) -> RevokeSessionsResponse:
        """
        Revoke all sessions for a user.

        Args:
            target_user_id: User whose sessions will be revoked
            requester: Session of the requesting user

        Raises:
            ForbiddenError: requester is neither the target nor an admin

        Returns:
            Count of revoked sessions
        """
        is_self = self._authorize(target_user_id, requester)

        count = await self.session_manager.destroy_all_sessions_for_user(target_user_id)

        logger.info(
            f"revoke_all_sessions by {requester.user_id}: "
            f"target={target_user_id} revoked={count} is_self={is_self}"
        )
        return RevokeSessionsResponse(revoked_count=count, target_user_id=target_user_id)

    async def revoke_specific_session(
        self, session_id: str, requester: Session
    ) -> RevokeSpecificSessionResponse:
        """
        Revoke a specific session by ID.

        Raises:
            SessionNotFoundError: session does not exist
            ForbiddenError: session belongs to another user and requester is not an admin
        """
        session = await self.session_manager.get_session(session_id)
        if session is None:
            raise SessionNotFoundError("Session not found")

        is_self = self._authorize(session.user_id, requester)

        removed = await self.session_manager.destroy_session(session_id)

        logger.info(
            f"revoke_session by {requester.user_id}: "
            f"session={session_id} target={session.user_id} is_self={is_self}"
        )
        return RevokeSpecificSessionResponse(session_id=session_id, revoked=removed > 0)

    async def revoke_all_except_current(self, current: Session) -> RevokeSessionsResponse:
        """
        Revoke all sessions for the user except the current session.

        This is a self-service operation (logout other devices).
        """
        count = 0
        for session in await self.session_manager.get_user_sessions(current.user_id):
            if session.session_id != current.session_id:
                count += await self.session_manager.destroy_session(session.session_id)

        logger.info(f"revoke_other_sessions by {current.user_id}: revoked={count}")
        return RevokeSessionsResponse(revoked_count=count, target_user_id=current.user_id)
