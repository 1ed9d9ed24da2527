"""
Session Manager

Per-user session lifecycle in the cache store:

    ACTIVE -(idle > ttl)-> EXPIRED -(lazy deletion)-> GONE
    ACTIVE -(logout)-> GONE
    ACTIVE -(evicted, session count exceeded)-> GONE

Each session lives under session:{id} and is registered in the owner's
user_sessions:{user_id} set.
"""

import logging
from typing import Any, Callable, Dict, List, Mapping, Optional

from pydantic import ValidationError

from src.app.repositories.cache_store import (
    SESSION_PREFIX,
    USER_SESSIONS_PREFIX,
    ICacheStore,
)
from src.domain.base import Clock, generate_uuid, utcnow
from src.domain.entities import Session, SessionRole
from src.domain.errors import (
    ForbiddenError,
    SessionExpiredError,
    SessionNotFoundError,
    UnauthorizedError,
)

logger = logging.getLogger(__name__)

TokenVerifier = Callable[[str], Optional[Dict[str, Any]]]


def session_key(session_id: str) -> str:
    return f"{SESSION_PREFIX}{session_id}"


def user_sessions_key(user_id: str) -> str:
    return f"{USER_SESSIONS_PREFIX}{user_id}"


class SessionManager:
    """
    Session manager over the shared cache store.

    Business Rules:
    - A user holds at most max_sessions live sessions; creating one more
      evicts the least recently active
    - Sessions idle longer than their TTL are treated as absent and deleted
      when encountered
    - Resolution and middleware paths never raise: failures yield no session
    """

    def __init__(
        self,
        store: ICacheStore,
        ttl: int = 3600,
        max_sessions: int = 5,
        token_verifier: Optional[TokenVerifier] = None,
        cookie_name: str = "sessionId",
        header_name: str = "X-Session-ID",
        clock: Clock = utcnow,
    ):
        self.store = store
        self.ttl = ttl
        self.max_sessions = max_sessions
        self.token_verifier = token_verifier
        self.cookie_name = cookie_name
        self.header_name = header_name.lower()
        self.clock = clock

    async def _save(self, session: Session) -> None:
        await self.store.set(
            session_key(session.session_id),
            session.model_dump(mode="json"),
            session.ttl_seconds,
        )

    async def create_session(
        self,
        user_id: str,
        role: Optional[str] = None,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
        attributes: Optional[Dict[str, Any]] = None,
        ttl: Optional[int] = None,
    ) -> str:
        """
        Create a session for a user, evicting the oldest ones over the limit.

        Returns:
            New session identifier
        """
        sessions = await self.get_user_sessions(user_id)

        if len(sessions) >= self.max_sessions:
            sessions.sort(key=lambda s: s.last_activity)
            to_evict = sessions[: len(sessions) - self.max_sessions + 1]
            for old in to_evict:
                await self.destroy_session(old.session_id)
            logger.info(f"Evicted {len(to_evict)} session(s) for user {user_id}")

        now = self.clock()
        session = Session(
            session_id=generate_uuid(),
            user_id=user_id,
            role=role,
            ip_address=ip_address,
            user_agent=user_agent,
            attributes=attributes or {},
            ttl_seconds=ttl or self.ttl,
            created_at=now,
            last_activity=now,
        )
        await self._save(session)
        await self.store.sadd(user_sessions_key(user_id), session.session_id)

        logger.info(f"Session created for user {user_id}")
        return session.session_id

    async def get_session(self, session_id: str) -> Optional[Session]:
        data = await self.store.get(session_key(session_id))
        if data is None:
            return None
        return Session.model_validate(data)

    async def get_user_sessions(self, user_id: str) -> List[Session]:
        """Live sessions of a user. Dangling set members are pruned."""
        sessions = []
        for session_id in await self.store.smembers(user_sessions_key(user_id)):
            session = await self.get_session(session_id)
            if session is None:
                await self.store.srem(user_sessions_key(user_id), session_id)
                continue
            sessions.append(session)
        return sessions

    async def refresh_session(self, session_id: str) -> Session:
        """
        Mark activity on a session and renew its TTL.

        Raises:
            SessionNotFoundError: session absent
            SessionExpiredError: session idle beyond its TTL (it is deleted)
        """
        session = await self.get_session(session_id)
        if session is None:
            raise SessionNotFoundError("Session not found")

        now = self.clock()
        if session.is_expired(now):
            await self.destroy_session(session_id)
            raise SessionExpiredError("Session expired")

        session.last_activity = now
        await self._save(session)
        return session

    async def destroy_session(self, session_id: str) -> int:
        session = await self.get_session(session_id)
        if session is not None:
            await self.store.srem(user_sessions_key(session.user_id), session_id)
        return await self.store.delete(session_key(session_id))

    async def destroy_all_sessions_for_user(self, user_id: str) -> int:
        removed = 0
        for session_id in await self.store.smembers(user_sessions_key(user_id)):
            removed += await self.store.delete(session_key(session_id))
        await self.store.delete(user_sessions_key(user_id))
        return removed

    def resolve_session_id(
        self, headers: Mapping[str, str], cookies: Mapping[str, str]
    ) -> Optional[str]:
        """
        Extract a session id from, in order: a bearer token's session_id
        claim, the session cookie, the session header.
        """
        authorization = headers.get("authorization")
        if authorization and authorization.startswith("Bearer ") and self.token_verifier:
            claims = self.token_verifier(authorization[len("Bearer "):])
            if claims and claims.get("session_id"):
                return claims["session_id"]

        if cookies.get(self.cookie_name):
            return cookies[self.cookie_name]

        return headers.get(self.header_name) or None

    async def load_context(
        self, headers: Mapping[str, str], cookies: Mapping[str, str]
    ) -> Optional[Session]:
        """
        Resolve and touch the request's session. Never raises.

        Returns:
            The live session with refreshed last_activity, or None
        """
        try:
            session_id = self.resolve_session_id(headers, cookies)
            if not session_id:
                return None

            session = await self.get_session(session_id)
            if session is None:
                return None

            now = self.clock()
            if session.is_expired(now):
                await self.destroy_session(session_id)
                return None

            session.last_activity = now
            await self._save(session)
            return session
        except Exception as e:
            logger.warning(f"Session middleware degraded to no session: {e!r}")
            return None

    async def _scan_sessions(self) -> List[Session]:
        """Every stored session. Entries that fail validation are logged and skipped."""
        sessions = []
        for key in await self.store.keys(f"{SESSION_PREFIX}*"):
            data = await self.store.get(key)
            if data is None:
                continue
            try:
                sessions.append(Session.model_validate(data))
            except ValidationError as e:
                logger.warning(f"Skipping corrupt session entry {key}: {e}")
        return sessions

    async def cleanup_expired_sessions(self) -> int:
        """Delete every session idle beyond its TTL. Returns count cleaned."""
        now = self.clock()
        cleaned = 0
        for session in await self._scan_sessions():
            if session.is_expired(now):
                await self.destroy_session(session.session_id)
                cleaned += 1

        if cleaned:
            logger.info(f"Cleaned up {cleaned} expired session(s)")
        return cleaned

    async def get_session_stats(self) -> Dict[str, Any]:
        now = self.clock()
        sessions = await self._scan_sessions()
        active = sum(1 for session in sessions if not session.is_expired(now))

        return {
            "total_sessions": len(sessions),
            "active_sessions": active,
            "expired_sessions": len(sessions) - active,
            "timestamp": now.isoformat(),
        }


# ============================================================================
# Guards over the session attached to a request
# ============================================================================


def require_session(session: Optional[Session]) -> Session:
    if session is None:
        raise UnauthorizedError("Session required", code="SESSION_REQUIRED")
    return session


def require_user(session: Optional[Session]) -> Session:
    if session is None or not session.user_id:
        raise UnauthorizedError("User session required", code="USER_SESSION_REQUIRED")
    return session


def require_admin_role(session: Optional[Session]) -> Session:
    if session is None or not session.user_id:
        raise UnauthorizedError("Admin session required", code="ADMIN_SESSION_REQUIRED")
    if session.role != SessionRole.admin.value:
        raise ForbiddenError("Admin privileges required", code="ADMIN_REQUIRED")
    return session
