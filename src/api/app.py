import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import Depends, FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from src.adapter.services.service_container import ServiceContainer, build_container
from src.domain.entities import JobType, LimitCategory
from src.domain.errors import StoreUnavailableError
from .error import ClientError, ServerError
from .middleware.session_context import SessionContextMiddleware
from .utils.rate_limit import create_limiter

logger = logging.getLogger(__name__)


async def handle_client_error(request: Request, exc: ClientError):
    error_dict = {"code": exc.base_error.code, "message": exc.base_error.message, **exc.extra}
    logger.warning(f"Client error: {error_dict}")
    return JSONResponse(
        status_code=exc.status_code, content={"error": error_dict}, headers=exc.headers
    )


async def handle_server_error(request: Request, exc: ServerError):
    message = (
        "Service unavailable"
        if exc.status_code == status.HTTP_503_SERVICE_UNAVAILABLE
        else "Internal server error"
    )
    error_dict = {"code": exc.base_error.code, "message": message}
    logger.error(f"Server error: {exc.base_error.code}: {exc.base_error.message}")
    return JSONResponse(status_code=exc.status_code, content={"error": error_dict})


async def handle_store_unavailable(request: Request, exc: StoreUnavailableError):
    return await handle_server_error(
        request, ServerError(exc.error, status_code=status.HTTP_503_SERVICE_UNAVAILABLE)
    )


def create_app(ApplicationConfig, container: Optional[ServiceContainer] = None) -> FastAPI:
    container = container or build_container(ApplicationConfig)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if not container.store.is_connected:
            await container.store.connect()

        processor = container.job_processor
        if ApplicationConfig.JOB_PROCESSOR_ENABLED:
            if ApplicationConfig.SESSION_CLEANUP_INTERVAL > 0:
                processor.schedule_recurring(
                    JobType.cleanup, {"type": "sessions"}, ApplicationConfig.SESSION_CLEANUP_INTERVAL
                )
            await processor.start()

        yield

        await processor.stop()
        await container.store.disconnect()

    app = FastAPI(
        title="Medical Document Platform Core",
        version="0.1.0",
        lifespan=lifespan,
        dependencies=[Depends(create_limiter(LimitCategory.ip))],
    )
    app.state.container = container

    app.add_middleware(SessionContextMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=ApplicationConfig.CORS_ORIGINS,
        allow_credentials=ApplicationConfig.CORS_ALLOW_CREDENTIALS,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    from src.api.routes import admin, health_check, jobs, notifications, sessions

    app.include_router(health_check.router, tags=["Health"])
    app.include_router(sessions.router, tags=["Sessions"])
    app.include_router(jobs.router, tags=["Jobs"])
    app.include_router(notifications.router, tags=["Notifications"])
    app.include_router(admin.router, tags=["Admin"])

    app.add_exception_handler(ClientError, handle_client_error)
    app.add_exception_handler(ServerError, handle_server_error)
    app.add_exception_handler(StoreUnavailableError, handle_store_unavailable)

    return app
