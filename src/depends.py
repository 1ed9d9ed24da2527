from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from src.adapter.services.service_container import ServiceContainer
from src.api.error import ClientError
from src.api.utils.jwt import verify_jwt
from src.app.services import session_manager as guards
from src.domain.entities import Session
from src.domain.errors import ForbiddenError, UnauthorizedError

security = HTTPBearer()


def get_container(request: Request) -> ServiceContainer:
    return request.app.state.container


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
) -> dict:
    """
    Dependency to extract and verify JWT token from Authorization header.

    Args:
        credentials: Bearer token from Authorization header

    Returns:
        Decoded JWT payload containing user_id, role

    Raises:
        HTTPException: 401 if token is invalid or expired
    """
    token = credentials.credentials
    payload = verify_jwt(token)

    if payload is None or not payload.get("user_id"):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
        )

    return payload


def get_current_session(request: Request) -> Optional[Session]:
    return getattr(request.state, "session", None)


def _guard(check, session: Optional[Session]) -> Session:
    try:
        return check(session)
    except UnauthorizedError as e:
        raise ClientError(e.error, status_code=status.HTTP_401_UNAUTHORIZED)
    except ForbiddenError as e:
        raise ClientError(e.error, status_code=status.HTTP_403_FORBIDDEN)


def require_session(session: Optional[Session] = Depends(get_current_session)) -> Session:
    return _guard(guards.require_session, session)


def require_user(session: Optional[Session] = Depends(get_current_session)) -> Session:
    return _guard(guards.require_user, session)


def require_admin(session: Optional[Session] = Depends(get_current_session)) -> Session:
    return _guard(guards.require_admin_role, session)
