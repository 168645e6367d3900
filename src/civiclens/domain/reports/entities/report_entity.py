import secrets
from datetime import datetime, UTC
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field


class Severity(str, Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


class ReportStatus(str, Enum):
    SUBMITTED = "Submitted"
    IN_PROGRESS = "In Progress"
    RESOLVED = "Resolved"


# Workflow order; transitions are allowed in any direction but backwards moves are logged.
STATUS_ORDER = {
    ReportStatus.SUBMITTED: 0,
    ReportStatus.IN_PROGRESS: 1,
    ReportStatus.RESOLVED: 2,
}


class IssueCategory(str, Enum):
    POTHOLE = "Pothole"
    GRAFFITI = "Graffiti"
    WASTE_MANAGEMENT = "Waste Management"
    BROKEN_STREETLIGHT = "Broken Streetlight"
    OTHER = "Other"


ISSUE_CATEGORY_TERMS = {
    IssueCategory.POTHOLE: ("pothole", "pot hole", "road damage", "asphalt"),
    IssueCategory.GRAFFITI: ("graffiti", "vandal", "spray paint"),
    IssueCategory.WASTE_MANAGEMENT: ("waste", "garbage", "trash", "litter", "rubbish", "dump", "overflowing"),
    IssueCategory.BROKEN_STREETLIGHT: ("streetlight", "street light", "lamp", "light pole"),
}


def normalize_issue_category(issue_type: Optional[str]) -> IssueCategory:
    """Map a free-text issue type onto the small display taxonomy."""
    text = (issue_type or "").strip().lower()
    if not text:
        return IssueCategory.OTHER
    for category in IssueCategory:
        if text == category.value.lower():
            return category
    for category, terms in ISSUE_CATEGORY_TERMS.items():
        if any(term in text for term in terms):
            return category
    return IssueCategory.OTHER


def coerce_severity(value: Optional[str]) -> Severity:
    """Case-insensitive severity lookup; anything unknown becomes Medium."""
    text = (value or "").strip().lower()
    for severity in Severity:
        if severity.value.lower() == text:
            return severity
    return Severity.MEDIUM


def generate_report_id() -> str:
    return f"CL-{secrets.token_hex(4).upper()}"


class GeoLocation(BaseModel):
    lat: float = Field(..., ge=-90, le=90, description="Latitude in degrees")
    lng: float = Field(..., ge=-180, le=180, description="Longitude in degrees")


class Report(BaseModel):
    id: Optional[str] = Field(default=None, alias="_id")
    report_id: str = Field(default_factory=generate_report_id)
    user_id: str
    user_full_name: str
    image_url: str
    image_hint: str = "user uploaded"
    issue_type: str
    issue_category: IssueCategory = IssueCategory.OTHER
    severity: Severity = Severity.MEDIUM
    ai_description: str
    location: GeoLocation
    location_name: Optional[str] = None
    fingerprint_keywords: List[str] = Field(default_factory=list)
    submission_id: Optional[str] = None  # draft that produced this report
    status: ReportStatus = ReportStatus.SUBMITTED
    authority_id: Optional[str] = None
    resolved_image_url: Optional[str] = None
    resolved_image_hint: Optional[str] = None
    upvote_count: int = Field(default=0, ge=0)

    created_at: str = Field(default_factory=lambda: datetime.now(UTC).isoformat())
    updated_at: Optional[str] = None

    class Config:
        populate_by_name = True  # Allow using 'id' instead of '_id'
        use_enum_values = True

    def to_document(self) -> dict:
        return self.model_dump(exclude={"id"}, exclude_none=True)


class DuplicateSubmission(BaseModel):
    id: Optional[str] = Field(default=None, alias="_id")
    user_id: str
    user_full_name: str
    original_report_id: str
    submission_id: Optional[str] = None
    created_at: str = Field(default_factory=lambda: datetime.now(UTC).isoformat())

    class Config:
        populate_by_name = True

    def to_document(self) -> dict:
        return self.model_dump(exclude={"id"}, exclude_none=True)
