# File: domain/reports/services/duplicate_adjudicator.py
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from civiclens.common.exceptions.workflow_errors import InvalidStateTransition
from civiclens.common.logging.logger import log_info, log_warning, log_error
from civiclens.common.utils.date_utils import utc_now_iso
from civiclens.domain.reports.entities.report_entity import DuplicateSubmission, Report, normalize_issue_category
from civiclens.domain.reports.services.candidate_matcher import CandidateMatcher
from civiclens.domain.submissions.entities.submission_entity import (
    AdjudicationDecision,
    AdjudicationState,
    SubmissionDraft,
)
from civiclens.infrastructure.database.mongodb.repository import MongoRepository


class AdjudicationOutcome(BaseModel):
    """What a single adjudication step produced for the caller to persist and display."""

    draft: SubmissionDraft
    report: Optional[Dict[str, Any]] = None
    candidates: List[Dict[str, Any]] = Field(default_factory=list)


class DuplicateAdjudicator:
    """
    Drives a submission draft to exactly one persisted outcome.

        drafting --(no candidates)--> created_new
        drafting --(candidates)-----> awaiting_adjudication
        awaiting_adjudication --reject--> created_new
        awaiting_adjudication --confirm--> merged

    Terminal drafts are returned unchanged so a repeated decision never
    writes twice.
    """

    def __init__(self, reports_repo: MongoRepository, duplicates_repo: MongoRepository, matcher: CandidateMatcher):
        self.reports_repo = reports_repo
        self.duplicates_repo = duplicates_repo
        self.matcher = matcher

    async def advance(self, draft: SubmissionDraft) -> AdjudicationOutcome:
        """Resolve a fresh draft: persist a new report, or stop and wait for the citizen."""
        if draft.is_terminal:
            log_info("Draft already resolved", extra={"draft_id": draft.id, "state": draft.state.value})
            return AdjudicationOutcome(draft=draft, report=await self.outcome_report(draft))

        recorded = await self._recorded_outcome(draft)
        if recorded:
            return recorded

        if draft.state == AdjudicationState.AWAITING_ADJUDICATION:
            return AdjudicationOutcome(draft=draft, candidates=await self.matcher.load_candidates(draft.candidate_ids))

        candidates = await self.matcher.load_candidates(draft.candidate_ids)
        if not candidates:
            if draft.candidate_ids:
                log_info("Every candidate is gone; no duplicate question to ask", extra={"draft_id": draft.id})
            report = await self._create_new(draft)
            return AdjudicationOutcome(draft=draft, report=report)

        draft.transition(AdjudicationState.AWAITING_ADJUDICATION)
        log_info("Draft awaiting adjudication", extra={"draft_id": draft.id, "candidates": len(candidates)})
        return AdjudicationOutcome(draft=draft, candidates=candidates)

    async def adjudicate(self, draft: SubmissionDraft, decision: AdjudicationDecision) -> AdjudicationOutcome:
        if draft.is_terminal:
            if draft.decision and draft.decision != decision:
                log_warning("Conflicting decision ignored for resolved draft", extra={
                    "draft_id": draft.id,
                    "recorded": draft.decision.value,
                    "requested": decision.value
                })
            return AdjudicationOutcome(draft=draft, report=await self.outcome_report(draft))

        recorded = await self._recorded_outcome(draft, decision)
        if recorded:
            return recorded

        if draft.state != AdjudicationState.AWAITING_ADJUDICATION:
            raise InvalidStateTransition(draft.state.value, decision.value)

        if decision == AdjudicationDecision.REJECT_DUPLICATE:
            report = await self._create_new(draft, decision)
        else:
            report = await self._merge(draft)
        return AdjudicationOutcome(draft=draft, report=report)

    async def outcome_report(self, draft: SubmissionDraft) -> Optional[Dict[str, Any]]:
        if not draft.outcome_report_id:
            return None
        return await self.reports_repo.find_one({"_id": draft.outcome_report_id})

    async def _recorded_outcome(self, draft: SubmissionDraft,
                                requested: Optional[AdjudicationDecision] = None) -> Optional[AdjudicationOutcome]:
        """
        Outcome an earlier attempt already persisted for this submission, if any.

        A step can write its record and then fail to store the draft, leaving the
        stored copy unresolved. Both collections are checked by `submission_id`
        so the retry adopts that outcome whichever decision it carries.
        """
        duplicate = await self.duplicates_repo.find_one({"submission_id": draft.id})
        if duplicate:
            self._record(draft, AdjudicationState.MERGED, AdjudicationDecision.CONFIRM_DUPLICATE,
                         duplicate["original_report_id"], duplicate["_id"])
            report = await self.reports_repo.find_one({"_id": duplicate["original_report_id"]})
        else:
            report = await self.reports_repo.find_one({"submission_id": draft.id})
            if not report:
                return None
            decision = AdjudicationDecision.REJECT_DUPLICATE if draft.candidate_ids else None
            self._record(draft, AdjudicationState.CREATED_NEW, decision, report["_id"])

        extra = {"draft_id": draft.id, "state": draft.state.value, "report_id": draft.outcome_report_id}
        if requested and draft.decision != requested:
            log_warning("Conflicting decision ignored for resolved draft", extra={
                **extra,
                "recorded": draft.decision.value if draft.decision else None,
                "requested": requested.value
            })
        else:
            log_warning("Submission outcome already recorded", extra=extra)
        return AdjudicationOutcome(draft=draft, report=report)

    async def _create_new(self, draft: SubmissionDraft,
                          decision: Optional[AdjudicationDecision] = None) -> Dict[str, Any]:
        report = Report(
            user_id=draft.user_id,
            user_full_name=draft.user_full_name,
            image_url=draft.image_url,
            image_hint=draft.image_hint,
            issue_type=draft.issue_type,
            issue_category=normalize_issue_category(draft.issue_type),
            severity=draft.severity,
            ai_description=draft.ai_description,
            location=draft.location,
            location_name=draft.location_name,
            fingerprint_keywords=draft.fingerprint_keywords,
            submission_id=draft.id,
        )
        document = report.to_document()
        report_id = await self.reports_repo.insert_one(document)
        document["_id"] = report_id

        self._record(draft, AdjudicationState.CREATED_NEW, decision, report_id)
        log_info("New report created", extra={
            "draft_id": draft.id,
            "report_id": report_id,
            "public_id": report.report_id,
            "keywords": draft.fingerprint_keywords
        })
        return document

    @staticmethod
    def _record(draft: SubmissionDraft, state: AdjudicationState, decision: Optional[AdjudicationDecision],
                report_id: str, duplicate_id: Optional[str] = None) -> None:
        draft.decision = decision
        draft.outcome_report_id = report_id
        draft.duplicate_submission_id = duplicate_id
        draft.transition(state)

    async def _merge(self, draft: SubmissionDraft) -> Dict[str, Any]:
        # Candidates are re-read so reports deleted since the draft was made are skipped.
        candidates = await self.matcher.load_candidates(draft.candidate_ids)

        for candidate in candidates:
            canonical = await self.reports_repo.increment_one(
                {"_id": candidate["_id"]}, "upvote_count", 1, set_fields={"updated_at": utc_now_iso()}
            )
            if canonical is None:
                log_warning("Canonical candidate vanished before merge", extra={"report_id": candidate["_id"]})
                continue

            duplicate = DuplicateSubmission(
                user_id=draft.user_id,
                user_full_name=draft.user_full_name,
                original_report_id=canonical["_id"],
                submission_id=draft.id,
            )
            try:
                duplicate_id = await self.duplicates_repo.insert_one(duplicate.to_document())
            except Exception:
                log_error("Duplicate record insert failed; reverting upvote", extra={
                    "draft_id": draft.id,
                    "report_id": canonical["_id"]
                })
                await self.reports_repo.increment_one({"_id": canonical["_id"]}, "upvote_count", -1)
                raise

            self._record(draft, AdjudicationState.MERGED, AdjudicationDecision.CONFIRM_DUPLICATE,
                         canonical["_id"], duplicate_id)
            log_info("Submission merged into existing report", extra={
                "draft_id": draft.id,
                "report_id": canonical["_id"],
                "upvote_count": canonical.get("upvote_count")
            })
            return canonical

        log_warning("No candidate left to merge into; creating a new report", extra={"draft_id": draft.id})
        return await self._create_new(draft, AdjudicationDecision.CONFIRM_DUPLICATE)
