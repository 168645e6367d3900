# File: api/routers/reports/reports.py

from typing import Annotated, Optional

from fastapi import APIRouter, status, Depends, Query
from pydantic import Field

from civiclens.common.dependencies.service_deps import get_report_service
from civiclens.common.schemas.request_base import BaseRequestModel
from civiclens.common.schemas.standard_response import StandardResponse
from civiclens.common.security.access_guard import get_current_user, require_authority, require_citizen
from civiclens.common.translations.messages import get_message
from civiclens.common.utils.pagination import paginate_response
from civiclens.domain.auth.entities.token_entity import TokenPayload
from civiclens.domain.reports.entities.report_entity import ReportStatus
from civiclens.domain.reports.services.report_service import ReportService

router = APIRouter()


class UpdateStatusRequest(BaseRequestModel):
    status: ReportStatus = Field(..., description="Submitted, In Progress or Resolved")
    resolved_image_url: Optional[str] = Field(default=None, description="Resolution photo as a data URI")
    resolved_image_hint: Optional[str] = Field(default=None, max_length=100)


@router.get(
    "/reports",
    status_code=status.HTTP_200_OK,
    response_model=StandardResponse,
    summary="All reports, newest first",
    tags=["Reports"]
)
async def list_reports(
    current_user: Annotated[TokenPayload, Depends(require_authority)],
    report_service: Annotated[ReportService, Depends(get_report_service)],
    report_status: Annotated[Optional[ReportStatus], Query(alias="status")] = None,
    page: Annotated[int, Query(ge=1)] = 1,
    page_size: Annotated[int, Query(ge=1, le=100)] = 20
):
    items, total = await report_service.list_reports(report_status, page, page_size)
    return StandardResponse.success(
        data=paginate_response(items, total, page, page_size),
        message=get_message("report.listed")
    )


@router.get(
    "/reports/mine",
    status_code=status.HTTP_200_OK,
    response_model=StandardResponse,
    summary="Reports submitted by the current citizen",
    tags=["Reports"]
)
async def list_my_reports(
    current_user: Annotated[TokenPayload, Depends(require_citizen)],
    report_service: Annotated[ReportService, Depends(get_report_service)],
    page: Annotated[int, Query(ge=1)] = 1,
    page_size: Annotated[int, Query(ge=1, le=100)] = 20
):
    items, total = await report_service.list_user_reports(current_user.user_id, page, page_size)
    return StandardResponse.success(
        data=paginate_response(items, total, page, page_size),
        message=get_message("report.listed")
    )


@router.get(
    "/reports/{report_id}",
    status_code=status.HTTP_200_OK,
    response_model=StandardResponse,
    summary="One report with its corroboration count",
    tags=["Reports"]
)
async def get_report(
    report_id: str,
    current_user: Annotated[TokenPayload, Depends(get_current_user)],
    report_service: Annotated[ReportService, Depends(get_report_service)]
):
    report = await report_service.get_report(report_id, current_user)
    return StandardResponse.success(data=report, message=get_message("report.fetched"))


@router.patch(
    "/reports/{report_id}/status",
    status_code=status.HTTP_200_OK,
    response_model=StandardResponse,
    summary="Change a report's status and notify the reporter",
    tags=["Reports"],
    responses={
        400: {"description": "Resolved without a resolution photo."},
        404: {"description": "Report not found."}
    }
)
async def update_report_status(
    report_id: str,
    data: UpdateStatusRequest,
    current_user: Annotated[TokenPayload, Depends(require_authority)],
    report_service: Annotated[ReportService, Depends(get_report_service)]
):
    report = await report_service.update_status(
        report_id,
        current_user,
        data.status,
        resolved_image_url=data.resolved_image_url,
        resolved_image_hint=data.resolved_image_hint
    )
    return StandardResponse.success(data=report, message=get_message("report.status_updated", data.response_language))


@router.delete(
    "/reports/{report_id}",
    status_code=status.HTTP_200_OK,
    response_model=StandardResponse,
    summary="Delete a report and its duplicate submissions",
    tags=["Reports"]
)
async def delete_report(
    report_id: str,
    current_user: Annotated[TokenPayload, Depends(get_current_user)],
    report_service: Annotated[ReportService, Depends(get_report_service)]
):
    await report_service.delete_report(report_id, current_user)
    return StandardResponse.success(data={"id": report_id}, message=get_message("report.deleted"))


@router.get(
    "/reports/{report_id}/duplicates",
    status_code=status.HTTP_200_OK,
    response_model=StandardResponse,
    summary="Citizen submissions merged into a report",
    tags=["Reports"]
)
async def list_report_duplicates(
    report_id: str,
    current_user: Annotated[TokenPayload, Depends(require_authority)],
    report_service: Annotated[ReportService, Depends(get_report_service)]
):
    duplicates = await report_service.list_duplicates(report_id)
    return StandardResponse.success(data=duplicates, message=get_message("report.duplicates_listed"))
