from datetime import datetime, UTC
from enum import Enum
from typing import List, Optional
from uuid import uuid4

from pydantic import BaseModel, Field

from civiclens.domain.reports.entities.report_entity import GeoLocation, Severity


class AdjudicationState(str, Enum):
    DRAFTING = "drafting"
    AWAITING_ADJUDICATION = "awaiting_adjudication"
    MERGED = "merged"
    CREATED_NEW = "created_new"


TERMINAL_STATES = {AdjudicationState.MERGED, AdjudicationState.CREATED_NEW}


class AdjudicationDecision(str, Enum):
    CONFIRM_DUPLICATE = "confirm_duplicate"
    REJECT_DUPLICATE = "reject_duplicate"


class SubmissionDraft(BaseModel):
    """
    A citizen submission between photo upload and its single persisted outcome.

    `candidate_ids` is fixed when the draft is created; `outcome_report_id` is the
    new report (created_new) or the canonical report it was merged into (merged).
    """

    id: str = Field(default_factory=lambda: uuid4().hex)
    user_id: str
    user_full_name: str

    image_url: str
    image_hint: str = "user uploaded"
    issue_type: str
    severity: Severity = Severity.MEDIUM
    ai_description: str
    location: GeoLocation
    location_name: Optional[str] = None

    fingerprint_keywords: List[str] = Field(default_factory=list)
    fingerprint_error: Optional[str] = None
    candidate_ids: List[str] = Field(default_factory=list)

    state: AdjudicationState = AdjudicationState.DRAFTING
    decision: Optional[AdjudicationDecision] = None
    outcome_report_id: Optional[str] = None
    duplicate_submission_id: Optional[str] = None

    created_at: str = Field(default_factory=lambda: datetime.now(UTC).isoformat())
    updated_at: Optional[str] = None

    @property
    def is_terminal(self) -> bool:
        return self.state in TERMINAL_STATES

    def transition(self, state: AdjudicationState) -> None:
        self.state = state
        self.updated_at = datetime.now(UTC).isoformat()
