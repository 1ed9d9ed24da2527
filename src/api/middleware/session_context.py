from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request


class SessionContextMiddleware(BaseHTTPMiddleware):
    """
    Attaches the request's live session (or None) to request.state.

    request.state.session: Session | None
    request.state.user: {"id", "role"} | None
    """

    async def dispatch(self, request: Request, call_next):
        session_manager = request.app.state.container.session_manager
        session = await session_manager.load_context(request.headers, request.cookies)

        request.state.session = session
        request.state.user = (
            {"id": session.user_id, "role": session.role} if session else None
        )
        return await call_next(request)
