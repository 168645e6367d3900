# File: domain/reports/services/analysis_service.py
import asyncio
from typing import Optional

from pydantic import BaseModel, Field, ValidationError

from civiclens.common.exceptions.base_exception import ServiceUnavailableException
from civiclens.common.exceptions.workflow_errors import LLMUnavailableError
from civiclens.common.logging.logger import log_info, log_warning
from civiclens.common.translations.messages import get_message
from civiclens.domain.reports.entities.report_entity import (
    GeoLocation,
    IssueCategory,
    Severity,
    coerce_severity,
    normalize_issue_category,
)
from civiclens.infrastructure.external.llm.llm_client import LLMClient, image_message

ISSUE_REPORT_PROMPT = """You are an AI assistant helping to generate civic issue reports.

Analyze the image and provide the issue type, severity, and a short description.

Location: Latitude: {lat}, Longitude: {lng}

Severity must be one of: Low, Medium, High.

Respond with JSON only, in exactly this shape:
{{"issue_type": "", "severity": "", "ai_description": ""}}"""

LOCATION_NAME_PROMPT = """You are an AI assistant that generates a human-readable location name based on GPS coordinates and an image.

Analyze the image to identify landmarks, street signs, or other notable features. Use the GPS coordinates to provide context like street names if possible.

Combine these to create a short, descriptive location name.

Example: "On Maple Ave, in front of the public library."
Example: "At the park entrance near the water fountain."

Location: Latitude: {lat}, Longitude: {lng}

Respond with JSON only, in exactly this shape: {{"location_name": ""}}"""


class IssueDraftPayload(BaseModel):
    issue_type: str = Field(..., min_length=1)
    severity: Optional[str] = None
    ai_description: str = Field(..., min_length=1)


class IssueAnalysis(BaseModel):
    issue_type: str
    issue_category: IssueCategory
    severity: Severity
    ai_description: str
    location_name: Optional[str] = None

    class Config:
        use_enum_values = True


class AnalysisService:
    """Pre-fills the report form from the photo; the citizen may edit everything before submitting."""

    def __init__(self, llm: LLMClient):
        self.llm = llm

    async def _draft_issue(self, photo_data_uri: str, location: GeoLocation) -> IssueDraftPayload:
        prompt = ISSUE_REPORT_PROMPT.format(lat=location.lat, lng=location.lng)
        data = await self.llm.complete_json(image_message(photo_data_uri, prompt))
        return IssueDraftPayload.model_validate(data)

    async def name_location(self, photo_data_uri: str, location: GeoLocation) -> Optional[str]:
        """Best effort: a missing location name never blocks a report."""
        prompt = LOCATION_NAME_PROMPT.format(lat=location.lat, lng=location.lng)
        try:
            data = await self.llm.complete_json(image_message(photo_data_uri, prompt), max_tokens=128)
        except (LLMUnavailableError, ValueError) as e:
            log_warning("Location naming failed", extra={"error": str(e)})
            return None
        name = data.get("location_name")
        return " ".join(name.split()) if isinstance(name, str) and name.strip() else None

    async def analyze(self, photo_data_uri: str, location: GeoLocation) -> IssueAnalysis:
        draft_result, location_name = await asyncio.gather(
            self._draft_issue(photo_data_uri, location),
            self.name_location(photo_data_uri, location),
            return_exceptions=True,
        )
        if isinstance(location_name, BaseException):
            location_name = None
        if isinstance(draft_result, (LLMUnavailableError, ValueError, ValidationError)):
            log_warning("Issue analysis failed", extra={"error": str(draft_result)})
            raise ServiceUnavailableException(get_message("report.analysis_failed"))
        if isinstance(draft_result, BaseException):
            raise draft_result

        analysis = IssueAnalysis(
            issue_type=draft_result.issue_type.strip(),
            issue_category=normalize_issue_category(draft_result.issue_type),
            severity=coerce_severity(draft_result.severity),
            ai_description=draft_result.ai_description.strip(),
            location_name=location_name,
        )
        log_info("Issue analyzed", extra={
            "issue_type": analysis.issue_type,
            "severity": analysis.severity,
            "has_location_name": bool(location_name)
        })
        return analysis
