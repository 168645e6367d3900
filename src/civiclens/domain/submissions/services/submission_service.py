# File: domain/submissions/services/submission_service.py
from typing import Any, Dict, Optional

from civiclens.common.config.settings import settings
from civiclens.common.exceptions.base_exception import (
    AppHTTPException,
    BadRequestException,
    ConflictException,
    ForbiddenException,
    NotFoundException,
    ServiceUnavailableException,
)
from civiclens.common.logging.logger import log_info, log_error, log_warning
from civiclens.common.translations.messages import get_message
from civiclens.common.utils.image_utils import validate_photo
from civiclens.domain.auth.entities.token_entity import TokenPayload
from civiclens.domain.reports.entities.report_entity import GeoLocation, Severity
from civiclens.domain.reports.services.candidate_matcher import CandidateMatcher
from civiclens.domain.reports.services.duplicate_adjudicator import AdjudicationOutcome, DuplicateAdjudicator
from civiclens.domain.reports.services.fingerprint_extractor import FingerprintExtractor
from civiclens.domain.reports.services.report_service import serialize_report
from civiclens.domain.submissions.entities.submission_entity import (
    AdjudicationDecision,
    AdjudicationState,
    SubmissionDraft,
)
from civiclens.infrastructure.database.redis.repositories.draft_repository import DraftRepository

STATE_MESSAGES = {
    AdjudicationState.DRAFTING: "submission.fetched",
    AdjudicationState.AWAITING_ADJUDICATION: "submission.duplicates_found",
    AdjudicationState.MERGED: "submission.merged",
    AdjudicationState.CREATED_NEW: "submission.created",
}


def submission_view(outcome: AdjudicationOutcome) -> Dict[str, Any]:
    """Response payload for any draft state; the photo itself is not echoed back."""
    draft = outcome.draft
    return {
        "submission_id": draft.id,
        "state": draft.state.value,
        "decision": draft.decision.value if draft.decision else None,
        "fingerprint_keywords": draft.fingerprint_keywords,
        "duplicate_check_skipped": not draft.fingerprint_keywords,
        "candidates": [serialize_report(c) for c in outcome.candidates],
        "report": serialize_report(outcome.report) if outcome.report else None,
        "duplicate_submission_id": draft.duplicate_submission_id,
        "expires_in": settings.SUBMISSION_DRAFT_TTL if not draft.is_terminal else None,
    }


def state_message(draft: SubmissionDraft) -> str:
    return get_message(STATE_MESSAGES[draft.state])


class SubmissionService:
    """
    One citizen submission from photo upload to its persisted outcome.

    The draft lives in Redis between requests so the citizen can leave and come
    back to the duplicate question; an abandoned draft expires with its TTL.
    """

    def __init__(self, extractor: FingerprintExtractor, matcher: CandidateMatcher,
                 adjudicator: DuplicateAdjudicator, drafts: DraftRepository):
        self.extractor = extractor
        self.matcher = matcher
        self.adjudicator = adjudicator
        self.drafts = drafts

    async def _load_owned(self, draft_id: str, user: TokenPayload) -> SubmissionDraft:
        draft = await self.drafts.get(draft_id)
        if not draft:
            raise NotFoundException(get_message("submission.not_found"))
        if draft.user_id != user.user_id:
            log_warning("Submission access denied", extra={"draft_id": draft_id, "user_id": user.user_id})
            raise ForbiddenException(get_message("auth.forbidden"))
        return draft

    async def _run_step(self, draft_id: str, user: TokenPayload, step, *args) -> AdjudicationOutcome:
        """
        Run one adjudicator step under the draft lock and store the result.
        The draft is re-read inside the lock; on a storage failure the stored
        draft keeps its previous state.
        """
        if not await self.drafts.acquire_lock(draft_id):
            raise ConflictException(get_message("submission.in_progress"))
        try:
            draft = await self._load_owned(draft_id, user)
            working = draft.model_copy(deep=True)
            try:
                outcome = await step(working, *args)
                await self.drafts.save(outcome.draft)
            except AppHTTPException as e:
                log_error("Submission step failed; draft left unchanged", extra={
                    "draft_id": draft.id,
                    "state": draft.state.value,
                    "error": str(e.detail)
                })
                raise ServiceUnavailableException(
                    get_message("submission.retry", variables={"id": draft.id}),
                    error_code="SUBMISSION_RETRY"
                )
            return outcome
        finally:
            await self.drafts.release_lock(draft_id)

    async def submit(self, user: TokenPayload, photo_data_uri: str, location: Optional[GeoLocation],
                     issue_type: str, ai_description: str, severity: Severity = Severity.MEDIUM,
                     location_name: Optional[str] = None, image_hint: Optional[str] = None) -> AdjudicationOutcome:
        if not photo_data_uri or location is None:
            raise BadRequestException(get_message("submission.missing_input"))
        validate_photo(photo_data_uri, settings.MAX_IMAGE_BYTES)

        fingerprint = await self.extractor.extract(photo_data_uri)
        try:
            candidates = await self.matcher.find_candidates(fingerprint.keywords)
        except AppHTTPException as e:
            log_error("Candidate lookup failed", extra={"user_id": user.user_id, "error": str(e.detail)})
            raise ServiceUnavailableException(get_message("submission.processing_error"))

        draft = SubmissionDraft(
            user_id=user.user_id,
            user_full_name=user.full_name or user.email or user.user_id,
            image_url=photo_data_uri,
            image_hint=image_hint or "user uploaded",
            issue_type=issue_type,
            severity=severity,
            ai_description=ai_description,
            location=location,
            location_name=location_name,
            fingerprint_keywords=fingerprint.keywords,
            fingerprint_error=fingerprint.error,
            candidate_ids=[c["_id"] for c in candidates],
        )
        await self.drafts.save(draft)
        log_info("Submission drafted", extra={
            "draft_id": draft.id,
            "user_id": user.user_id,
            "keywords": draft.fingerprint_keywords,
            "candidates": len(draft.candidate_ids)
        })

        return await self._run_step(draft.id, user, self.adjudicator.advance)

    async def get(self, draft_id: str, user: TokenPayload) -> AdjudicationOutcome:
        draft = await self._load_owned(draft_id, user)
        if draft.is_terminal:
            report = await self.adjudicator.outcome_report(draft)
            return AdjudicationOutcome(draft=draft, report=report)
        candidates = await self.matcher.load_candidates(draft.candidate_ids)
        return AdjudicationOutcome(draft=draft, candidates=candidates)

    async def resume(self, draft_id: str, user: TokenPayload) -> AdjudicationOutcome:
        """Re-run the automatic step for a draft whose earlier write failed."""
        return await self._run_step(draft_id, user, self.adjudicator.advance)

    async def adjudicate(self, draft_id: str, user: TokenPayload,
                         decision: AdjudicationDecision) -> AdjudicationOutcome:
        outcome = await self._run_step(draft_id, user, self.adjudicator.adjudicate, decision)
        log_info("Submission adjudicated", extra={
            "draft_id": draft_id,
            "decision": decision.value,
            "state": outcome.draft.state.value,
            "report_id": outcome.draft.outcome_report_id
        })
        return outcome

    async def discard(self, draft_id: str, user: TokenPayload) -> None:
        """Drop an unfinished draft; a resolved one is kept until it expires."""
        draft = await self._load_owned(draft_id, user)
        if draft.is_terminal:
            return
        await self.drafts.delete(draft_id)
        log_info("Submission discarded", extra={"draft_id": draft_id, "state": draft.state.value})
