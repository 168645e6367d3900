# File: api/routers/analytics/analytics.py

from typing import Annotated

from fastapi import APIRouter, status, Depends
from pydantic import Field

from civiclens.common.dependencies.service_deps import get_analytics_service
from civiclens.common.schemas.request_base import BaseRequestModel
from civiclens.common.schemas.standard_response import StandardResponse
from civiclens.common.security.access_guard import require_authority
from civiclens.common.translations.messages import get_message
from civiclens.domain.analytics.services.analytics_service import AnalyticsService
from civiclens.domain.auth.entities.token_entity import TokenPayload

router = APIRouter()


class AskRequest(BaseRequestModel):
    query: str = Field(..., min_length=1, max_length=1000, examples=["What are the most urgent issues this week?"])


@router.get(
    "/analytics/summary",
    status_code=status.HTTP_200_OK,
    response_model=StandardResponse,
    summary="Report counters for the authority dashboard",
    tags=["Analytics"]
)
async def analytics_summary(
    current_user: Annotated[TokenPayload, Depends(require_authority)],
    analytics_service: Annotated[AnalyticsService, Depends(get_analytics_service)]
):
    summary = await analytics_service.summary()
    return StandardResponse.success(data=summary, message=get_message("analytics.summary"))


@router.post(
    "/analytics/ask",
    status_code=status.HTTP_200_OK,
    response_model=StandardResponse,
    summary="Ask the analyst assistant about the reports",
    tags=["Analytics"],
    responses={503: {"description": "Assistant unavailable."}}
)
async def analytics_ask(
    data: AskRequest,
    current_user: Annotated[TokenPayload, Depends(require_authority)],
    analytics_service: Annotated[AnalyticsService, Depends(get_analytics_service)]
):
    answer = await analytics_service.ask(data.query)
    return StandardResponse.success(data={"answer": answer}, message=get_message("analytics.answered", data.response_language))
