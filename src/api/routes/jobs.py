from fastapi import APIRouter, Depends, status

from config import ApplicationConfig
from src.adapter.services.service_container import ServiceContainer
from src.api.error import ClientError
from src.api.utils.rate_limit import create_burst_limiter, create_limiter
from src.app.use_cases.jobs import (
    GetJobStatusUseCase,
    JobStatusResponse,
    SubmitJobCommand,
    SubmitJobResponse,
    SubmitJobUseCase,
)
from src.depends import get_container, require_user
from src.domain.entities import DEFAULT_RATE_LIMITS, LimitCategory, Session
from src.domain.errors import ForbiddenError, InvalidJobPayloadError, JobNotFoundError

router = APIRouter(prefix="/jobs", tags=["Jobs"])

_api_rule = DEFAULT_RATE_LIMITS[LimitCategory.api]


@router.post(
    "",
    status_code=status.HTTP_202_ACCEPTED,
    response_model=SubmitJobResponse,
    dependencies=[
        Depends(
            create_burst_limiter(
                _api_rule.limit, ApplicationConfig.JOB_BURST_LIMIT, _api_rule.window
            )
        )
    ],
)
async def submit_job(
    command: SubmitJobCommand,
    session: Session = Depends(require_user),
    container: ServiceContainer = Depends(get_container),
):
    """
    Submit Job

    Enqueues background work; poll GET /jobs/{job_id} for the outcome.

    Raises:
        - 403 Forbidden: Job type not permitted for this user
        - 422 Unprocessable Entity: INVALID_JOB_PAYLOAD
    """
    use_case = SubmitJobUseCase(container.job_queue)
    try:
        return await use_case.execute(command, session)
    except ForbiddenError as e:
        raise ClientError(e.error, status_code=status.HTTP_403_FORBIDDEN)
    except InvalidJobPayloadError as e:
        raise ClientError(e.error, status_code=status.HTTP_422_UNPROCESSABLE_ENTITY)


@router.get(
    "/{job_id}",
    response_model=JobStatusResponse,
    response_model_exclude_none=True,
    dependencies=[Depends(create_limiter(LimitCategory.api))],
)
async def get_job_status(
    job_id: str,
    session: Session = Depends(require_user),
    container: ServiceContainer = Depends(get_container),
):
    """
    Get Job Status

    Raises:
        - 404 Not Found: JOB_NOT_FOUND (unknown, still pending, or result expired)
    """
    use_case = GetJobStatusUseCase(container.job_queue)
    try:
        return await use_case.execute(job_id)
    except JobNotFoundError as e:
        raise ClientError(e.error, status_code=status.HTTP_404_NOT_FOUND)
