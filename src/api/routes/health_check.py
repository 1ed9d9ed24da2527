from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from src.adapter.services.service_container import ServiceContainer
from src.depends import get_container

router = APIRouter()


@router.get("/health")
async def health_check(container: ServiceContainer = Depends(get_container)):
    cache = await container.store.health_check()
    job_processor = container.job_processor.health_check()

    healthy = cache["status"] == "healthy"
    return JSONResponse(
        status_code=status.HTTP_200_OK if healthy else status.HTTP_503_SERVICE_UNAVAILABLE,
        content={
            "status": "healthy" if healthy else "degraded",
            "cache": cache,
            "job_processor": job_processor,
        },
    )
