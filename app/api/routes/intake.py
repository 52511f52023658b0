from typing import Annotated

from fastapi import APIRouter, Depends, Request

from app.core.rate_limit import enforce_rate_limit
from app.schemas.intake import (
    ErrorResponse,
    IntakeSuccessResponse,
    SubmissionPayload,
    ThrottledResponse,
)
from app.services.intake_service import (
    CONTACT_ENDPOINT,
    WORK_VIEW_ENDPOINT,
    IntakeService,
    get_intake_service,
)

router = APIRouter(tags=["Intake"])

_ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Validation or verification failure"},
    429: {"model": ThrottledResponse, "description": "Too many submissions from this client"},
    500: {"model": ErrorResponse, "description": "Configuration or notification failure"},
}


@router.post(
    "/send-email",
    response_model=IntakeSuccessResponse,
    responses=_ERROR_RESPONSES,
    dependencies=[Depends(enforce_rate_limit)],
)
async def send_email(
    payload: SubmissionPayload,
    request: Request,
    service: Annotated[IntakeService, Depends(get_intake_service)],
) -> IntakeSuccessResponse:
    """Contact form submission endpoint.

    Validates the submission, checks the human verification token, stores
    the submission (best-effort) and notifies the site owners.

    Returns:
        IntakeSuccessResponse: Success flag, message and transport message id.
    """
    return await service.submit(CONTACT_ENDPOINT, payload, request)


@router.post(
    "/request-work-view",
    response_model=IntakeSuccessResponse,
    responses=_ERROR_RESPONSES,
    dependencies=[Depends(enforce_rate_limit)],
)
async def request_work_view(
    payload: SubmissionPayload,
    request: Request,
    service: Annotated[IntakeService, Depends(get_intake_service)],
) -> IntakeSuccessResponse:
    """Private work view request endpoint.

    Same pipeline as the contact form; whether a verification token is
    required is configured per endpoint (INTAKE_WORK_VIEW_REQUIRES_VERIFICATION).
    """
    return await service.submit(WORK_VIEW_ENDPOINT, payload, request)
