# File: api/routers/reports/analyze.py

from typing import Annotated

from fastapi import APIRouter, status, Depends
from pydantic import Field

from civiclens.common.config.settings import settings
from civiclens.common.schemas.request_base import BaseRequestModel
from civiclens.common.schemas.standard_response import StandardResponse
from civiclens.common.security.access_guard import get_current_user
from civiclens.common.translations.messages import get_message
from civiclens.common.utils.image_utils import validate_photo
from civiclens.common.dependencies.service_deps import get_analysis_service
from civiclens.domain.auth.entities.token_entity import TokenPayload
from civiclens.domain.reports.entities.report_entity import GeoLocation
from civiclens.domain.reports.services.analysis_service import AnalysisService

router = APIRouter()


class AnalyzeRequest(BaseRequestModel):
    photo_data_uri: str = Field(..., min_length=1, description="Photo as data:<mime>;base64,<payload>")
    location: GeoLocation = Field(..., description="GPS coordinates of the issue")


@router.post(
    "/reports/analyze",
    status_code=status.HTTP_200_OK,
    response_model=StandardResponse,
    summary="Pre-fill issue type, severity, description and place name from a photo",
    tags=["Reports"],
    responses={
        400: {"description": "Invalid photo."},
        503: {"description": "Analysis unavailable; fill the details manually."}
    }
)
async def analyze_issue(
    data: AnalyzeRequest,
    current_user: Annotated[TokenPayload, Depends(get_current_user)],
    analysis_service: Annotated[AnalysisService, Depends(get_analysis_service)]
):
    validate_photo(data.photo_data_uri, settings.MAX_IMAGE_BYTES)
    analysis = await analysis_service.analyze(data.photo_data_uri, data.location)
    return StandardResponse.success(
        data=analysis.model_dump(),
        message=get_message("report.analyzed", data.response_language)
    )
