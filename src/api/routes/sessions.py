from datetime import timedelta
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Request, Response, status
from pydantic import BaseModel, Field

from src.adapter.services.service_container import ServiceContainer
from src.api.error import ClientError
from src.api.utils.jwt import create_session_token
from src.api.utils.rate_limit import create_limiter
from src.app.use_cases.sessions import (
    CreateSessionResponse,
    RevokeSessionsResponse,
    RevokeSessionsUseCase,
    RevokeSpecificSessionResponse,
    SessionInfo,
    SessionListResponse,
)
from src.depends import get_container, get_current_user, require_session, require_user
from src.domain.entities import LimitCategory, Session
from src.domain.errors import ForbiddenError, SessionExpiredError, SessionNotFoundError

router = APIRouter(prefix="/sessions", tags=["Sessions"])


class CreateSessionRequest(BaseModel):
    """Optional client details recorded on the new session"""

    user_agent: Optional[str] = Field(None, description="Overrides the User-Agent header")
    attributes: Dict[str, Any] = Field(default_factory=dict)


class RevokeAllSessionsRequest(BaseModel):
    """Request to revoke all sessions for a user"""

    user_id: str = Field(..., description="User ID whose sessions will be revoked")


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=CreateSessionResponse,
    dependencies=[Depends(create_limiter(LimitCategory.auth))],
)
async def create_session(
    http_request: Request,
    response: Response,
    request: Optional[CreateSessionRequest] = None,
    current_user: dict = Depends(get_current_user),
    container: ServiceContainer = Depends(get_container),
):
    """
    Create Session

    Exchanges a verified access token for a server-side session. If the
    user already holds the maximum number of sessions, the least recently
    active ones are evicted.

    Returns the session id, a signed session token carrying it, and sets
    the session cookie.
    """
    request = request or CreateSessionRequest()
    session_manager = container.session_manager

    session_id = await session_manager.create_session(
        current_user["user_id"],
        role=current_user.get("role"),
        ip_address=http_request.client.host if http_request.client else None,
        user_agent=request.user_agent or http_request.headers.get("user-agent"),
        attributes=request.attributes,
    )
    token = create_session_token(
        session_id,
        current_user["user_id"],
        current_user.get("role"),
        timedelta(seconds=session_manager.ttl),
    )

    response.set_cookie(
        session_manager.cookie_name,
        session_id,
        max_age=session_manager.ttl,
        httponly=True,
        samesite="lax",
    )
    return CreateSessionResponse(
        session_id=session_id, session_token=token, expires_in=session_manager.ttl
    )


@router.get("/current", response_model=SessionInfo)
async def get_current_session(session: Session = Depends(require_session)):
    return SessionInfo.from_session(session)


@router.post("/refresh", response_model=SessionInfo)
async def refresh_session(
    session: Session = Depends(require_session),
    container: ServiceContainer = Depends(get_container),
):
    """
    Refresh Session

    Renews the session TTL.

    Raises:
        - 401 Unauthorized: SESSION_EXPIRED
        - 404 Not Found: SESSION_NOT_FOUND
    """
    try:
        refreshed = await container.session_manager.refresh_session(session.session_id)
    except SessionNotFoundError as e:
        raise ClientError(e.error, status_code=status.HTTP_404_NOT_FOUND)
    except SessionExpiredError as e:
        raise ClientError(e.error, status_code=status.HTTP_401_UNAUTHORIZED)

    return SessionInfo.from_session(refreshed)


@router.delete("/current", response_model=RevokeSpecificSessionResponse)
async def logout(
    response: Response,
    session: Session = Depends(require_session),
    container: ServiceContainer = Depends(get_container),
):
    """Logout: destroy the current session and clear the session cookie."""
    removed = await container.session_manager.destroy_session(session.session_id)
    response.delete_cookie(container.session_manager.cookie_name)
    return RevokeSpecificSessionResponse(session_id=session.session_id, revoked=removed > 0)


@router.get("", response_model=SessionListResponse)
async def list_sessions(
    session: Session = Depends(require_user),
    container: ServiceContainer = Depends(get_container),
):
    sessions = await container.session_manager.get_user_sessions(session.user_id)
    return SessionListResponse(sessions=[SessionInfo.from_session(s) for s in sessions])


@router.post("/revoke-all", response_model=RevokeSessionsResponse)
async def revoke_all_sessions(
    request: RevokeAllSessionsRequest,
    session: Session = Depends(require_user),
    container: ServiceContainer = Depends(get_container),
):
    """
    Revoke All Sessions

    Authorization:
    - Users can revoke their own sessions
    - Admins can revoke any user's sessions

    Raises:
        - 403 Forbidden: Insufficient permissions
    """
    use_case = RevokeSessionsUseCase(container.session_manager)
    try:
        return await use_case.revoke_all_sessions(request.user_id, session)
    except ForbiddenError as e:
        raise ClientError(e.error, status_code=status.HTTP_403_FORBIDDEN)


@router.post("/revoke-others", response_model=RevokeSessionsResponse)
async def revoke_all_except_current(
    session: Session = Depends(require_user),
    container: ServiceContainer = Depends(get_container),
):
    """Revoke all sessions except the current one (logout other devices)."""
    use_case = RevokeSessionsUseCase(container.session_manager)
    return await use_case.revoke_all_except_current(session)


@router.delete("/{session_id}", response_model=RevokeSpecificSessionResponse)
async def revoke_specific_session(
    session_id: str,
    session: Session = Depends(require_user),
    container: ServiceContainer = Depends(get_container),
):
    """
    Revoke Specific Session

    Raises:
        - 403 Forbidden: Insufficient permissions
        - 404 Not Found: Session not found
    """
    use_case = RevokeSessionsUseCase(container.session_manager)
    try:
        return await use_case.revoke_specific_session(session_id, session)
    except ForbiddenError as e:
        raise ClientError(e.error, status_code=status.HTTP_403_FORBIDDEN)
    except SessionNotFoundError as e:
        raise ClientError(e.error, status_code=status.HTTP_404_NOT_FOUND)
