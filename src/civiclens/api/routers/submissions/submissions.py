# File: api/routers/submissions/submissions.py

from typing import Annotated, Optional

from fastapi import APIRouter, status, Depends
from pydantic import Field

from civiclens.common.dependencies.service_deps import get_submission_service
from civiclens.common.logging.logger import log_info
from civiclens.common.schemas.request_base import BaseRequestModel
from civiclens.common.schemas.standard_response import StandardResponse
from civiclens.common.security.access_guard import require_citizen
from civiclens.common.translations.messages import get_message
from civiclens.domain.auth.entities.token_entity import TokenPayload
from civiclens.domain.reports.entities.report_entity import GeoLocation, Severity
from civiclens.domain.submissions.entities.submission_entity import AdjudicationDecision
from civiclens.domain.submissions.services.submission_service import (
    SubmissionService,
    state_message,
    submission_view,
)

router = APIRouter()


class SubmitReportRequest(BaseRequestModel):
    """A citizen's report; issue fields usually come pre-filled from /reports/analyze."""

    photo_data_uri: Optional[str] = Field(default=None, description="Photo as data:<mime>;base64,<payload>")
    location: Optional[GeoLocation] = Field(default=None, description="GPS coordinates of the issue")
    issue_type: str = Field(..., min_length=1, max_length=100)
    severity: Severity = Field(default=Severity.MEDIUM)
    ai_description: str = Field(..., min_length=1, max_length=2000)
    location_name: Optional[str] = Field(default=None, max_length=200)
    image_hint: Optional[str] = Field(default=None, max_length=100)


class AdjudicateRequest(BaseRequestModel):
    decision: AdjudicationDecision = Field(..., description="confirm_duplicate or reject_duplicate")


@router.post(
    "/submissions",
    status_code=status.HTTP_200_OK,
    response_model=StandardResponse,
    summary="Submit a report; returns the new report or the duplicate candidates",
    tags=["Submissions"],
    responses={
        400: {"description": "Missing or invalid photo or location."},
        503: {"description": "Processing failed; safe to retry."}
    }
)
async def submit_report(
    data: SubmitReportRequest,
    current_user: Annotated[TokenPayload, Depends(require_citizen)],
    submission_service: Annotated[SubmissionService, Depends(get_submission_service)]
):
    outcome = await submission_service.submit(
        current_user,
        photo_data_uri=data.photo_data_uri,
        location=data.location,
        issue_type=data.issue_type,
        ai_description=data.ai_description,
        severity=data.severity,
        location_name=data.location_name,
        image_hint=data.image_hint
    )
    log_info("Submission handled", extra={
        "submission_id": outcome.draft.id,
        "state": outcome.draft.state.value,
        "request_id": data.request_id
    })
    return StandardResponse.success(data=submission_view(outcome), message=state_message(outcome.draft))


@router.get(
    "/submissions/{submission_id}",
    status_code=status.HTTP_200_OK,
    response_model=StandardResponse,
    summary="Current state of a pending or resolved submission",
    tags=["Submissions"]
)
async def get_submission(
    submission_id: str,
    current_user: Annotated[TokenPayload, Depends(require_citizen)],
    submission_service: Annotated[SubmissionService, Depends(get_submission_service)]
):
    outcome = await submission_service.get(submission_id, current_user)
    return StandardResponse.success(data=submission_view(outcome), message=state_message(outcome.draft))


@router.post(
    "/submissions/{submission_id}/resume",
    status_code=status.HTTP_200_OK,
    response_model=StandardResponse,
    summary="Retry a submission whose processing failed",
    tags=["Submissions"]
)
async def resume_submission(
    submission_id: str,
    current_user: Annotated[TokenPayload, Depends(require_citizen)],
    submission_service: Annotated[SubmissionService, Depends(get_submission_service)]
):
    outcome = await submission_service.resume(submission_id, current_user)
    return StandardResponse.success(data=submission_view(outcome), message=state_message(outcome.draft))


@router.post(
    "/submissions/{submission_id}/adjudicate",
    status_code=status.HTTP_200_OK,
    response_model=StandardResponse,
    summary="Confirm or reject the duplicate candidates",
    tags=["Submissions"],
    responses={
        409: {"description": "Submission is not awaiting a decision."}
    }
)
async def adjudicate_submission(
    submission_id: str,
    data: AdjudicateRequest,
    current_user: Annotated[TokenPayload, Depends(require_citizen)],
    submission_service: Annotated[SubmissionService, Depends(get_submission_service)]
):
    outcome = await submission_service.adjudicate(submission_id, current_user, data.decision)
    return StandardResponse.success(data=submission_view(outcome), message=state_message(outcome.draft))


@router.delete(
    "/submissions/{submission_id}",
    status_code=status.HTTP_200_OK,
    response_model=StandardResponse,
    summary="Discard an unfinished submission",
    tags=["Submissions"]
)
async def discard_submission(
    submission_id: str,
    current_user: Annotated[TokenPayload, Depends(require_citizen)],
    submission_service: Annotated[SubmissionService, Depends(get_submission_service)]
):
    await submission_service.discard(submission_id, current_user)
    return StandardResponse.success(data={"submission_id": submission_id}, message=get_message("submission.discarded"))
