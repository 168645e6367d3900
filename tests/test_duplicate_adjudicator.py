"""
Tests for the duplicate adjudication state machine.

Covers:
  - No candidates: straight to a new report
  - Candidates: stop in awaiting_adjudication with nothing written
  - Reject: new report, existing reports untouched
  - Confirm: merge into the oldest candidate, +1 upvote, one duplicate record
  - Exactly one outcome per draft, even when a decision is repeated
  - Candidates deleted before confirmation
  - Failed duplicate insert reverts the upvote
"""

import pytest

from civiclens.common.exceptions.base_exception import ServiceUnavailableException
from civiclens.common.exceptions.workflow_errors import InvalidStateTransition
from civiclens.domain.reports.entities.report_entity import GeoLocation
from civiclens.domain.submissions.entities.submission_entity import (
    AdjudicationDecision,
    AdjudicationState,
    SubmissionDraft,
)

from conftest import LOCATION, PHOTO, report_doc

CONFIRM = AdjudicationDecision.CONFIRM_DUPLICATE
REJECT = AdjudicationDecision.REJECT_DUPLICATE


def make_draft(keywords=("pothole", "asphalt"), candidate_ids=(), **overrides) -> SubmissionDraft:
    fields = dict(
        user_id="citizen-1",
        user_full_name="Jane Citizen",
        image_url=PHOTO,
        issue_type="Large pothole",
        ai_description="Deep pothole near the crossing.",
        location=GeoLocation(**LOCATION),
        fingerprint_keywords=list(keywords),
        candidate_ids=list(candidate_ids),
    )
    fields.update(overrides)
    return SubmissionDraft(**fields)


async def awaiting(adjudicator, candidate_ids) -> SubmissionDraft:
    outcome = await adjudicator.advance(make_draft(candidate_ids=candidate_ids))
    assert outcome.draft.state == AdjudicationState.AWAITING_ADJUDICATION
    return outcome.draft


# ============================================================
# advance
# ============================================================

class TestAdvance:

    async def test_no_candidates_creates_new_report(self, adjudicator, reports_repo, duplicates_repo):
        outcome = await adjudicator.advance(make_draft())

        assert outcome.draft.state == AdjudicationState.CREATED_NEW
        assert outcome.draft.decision is None
        assert len(reports_repo.docs) == 1
        stored = reports_repo.docs[0]
        assert stored["fingerprint_keywords"] == ["pothole", "asphalt"]
        assert stored["upvote_count"] == 0
        assert stored["status"] == "Submitted"
        assert stored["submission_id"] == outcome.draft.id
        assert stored["issue_category"] == "Pothole"
        assert outcome.draft.outcome_report_id == stored["_id"]
        assert duplicates_repo.docs == []

    async def test_empty_fingerprint_creates_report_with_empty_keywords(self, adjudicator, reports_repo):
        outcome = await adjudicator.advance(make_draft(keywords=()))

        assert outcome.draft.state == AdjudicationState.CREATED_NEW
        assert reports_repo.docs[0]["fingerprint_keywords"] == []

    async def test_candidates_wait_for_the_citizen(self, adjudicator, reports_repo, duplicates_repo):
        existing = reports_repo.seed(report_doc(["pothole"], minutes=1))

        outcome = await adjudicator.advance(make_draft(candidate_ids=[existing]))

        assert outcome.draft.state == AdjudicationState.AWAITING_ADJUDICATION
        assert [c["_id"] for c in outcome.candidates] == [existing]
        assert outcome.report is None
        assert len(reports_repo.docs) == 1
        assert reports_repo.get(existing)["upvote_count"] == 0
        assert duplicates_repo.docs == []

    async def test_every_candidate_deleted_creates_new_report(self, adjudicator, reports_repo, duplicates_repo):
        gone = reports_repo.seed(report_doc(["pothole"]))
        await reports_repo.delete_one({"_id": gone})

        outcome = await adjudicator.advance(make_draft(candidate_ids=[gone]))

        assert outcome.draft.state == AdjudicationState.CREATED_NEW
        assert outcome.draft.decision is None
        assert outcome.candidates == []
        assert len(reports_repo.docs) == 1
        assert duplicates_repo.docs == []

    async def test_advance_on_awaiting_draft_writes_nothing(self, adjudicator, reports_repo):
        existing = reports_repo.seed(report_doc(["pothole"]))
        draft = await awaiting(adjudicator, [existing])

        outcome = await adjudicator.advance(draft)

        assert outcome.draft.state == AdjudicationState.AWAITING_ADJUDICATION
        assert len(reports_repo.docs) == 1

    async def test_advance_on_resolved_draft_returns_recorded_report(self, adjudicator, reports_repo):
        first = await adjudicator.advance(make_draft())
        again = await adjudicator.advance(first.draft)

        assert again.draft.state == AdjudicationState.CREATED_NEW
        assert again.report["_id"] == first.draft.outcome_report_id
        assert len(reports_repo.docs) == 1


# ============================================================
# adjudicate
# ============================================================

class TestReject:

    async def test_reject_creates_new_report(self, adjudicator, reports_repo, duplicates_repo):
        existing = reports_repo.seed(report_doc(["pothole"], minutes=1))
        draft = await awaiting(adjudicator, [existing])

        outcome = await adjudicator.adjudicate(draft, REJECT)

        assert outcome.draft.state == AdjudicationState.CREATED_NEW
        assert outcome.draft.decision == REJECT
        assert len(reports_repo.docs) == 2
        assert reports_repo.get(existing)["upvote_count"] == 0
        assert duplicates_repo.docs == []
        assert outcome.report["fingerprint_keywords"] == ["pothole", "asphalt"]


class TestConfirm:

    async def test_confirm_merges_into_oldest_candidate(self, adjudicator, reports_repo, duplicates_repo):
        newer = reports_repo.seed(report_doc(["pothole"], minutes=20, upvote_count=4))
        oldest = reports_repo.seed(report_doc(["asphalt"], minutes=2, upvote_count=1))
        draft = await awaiting(adjudicator, [newer, oldest])

        outcome = await adjudicator.adjudicate(draft, CONFIRM)

        assert outcome.draft.state == AdjudicationState.MERGED
        assert outcome.draft.outcome_report_id == oldest
        assert reports_repo.get(oldest)["upvote_count"] == 2
        assert reports_repo.get(newer)["upvote_count"] == 4
        assert len(reports_repo.docs) == 2
        assert outcome.report["upvote_count"] == 2

        assert len(duplicates_repo.docs) == 1
        record = duplicates_repo.docs[0]
        assert record["original_report_id"] == oldest
        assert record["user_id"] == "citizen-1"
        assert record["user_full_name"] == "Jane Citizen"
        assert record["submission_id"] == draft.id
        assert outcome.draft.duplicate_submission_id == record["_id"]

    async def test_confirm_updates_canonical_timestamp(self, adjudicator, reports_repo):
        existing = reports_repo.seed(report_doc(["pothole"]))
        draft = await awaiting(adjudicator, [existing])

        await adjudicator.adjudicate(draft, CONFIRM)

        assert reports_repo.get(existing).get("updated_at")

    async def test_equal_timestamps_merge_into_lowest_id(self, adjudicator, reports_repo):
        reports_repo.seed({**report_doc(["pothole"], minutes=5), "_id": "bbbb"})
        reports_repo.seed({**report_doc(["pothole"], minutes=5), "_id": "aaaa"})
        draft = await awaiting(adjudicator, ["bbbb", "aaaa"])

        outcome = await adjudicator.adjudicate(draft, CONFIRM)

        assert outcome.draft.outcome_report_id == "aaaa"

    async def test_deleted_oldest_candidate_falls_through_to_next(self, adjudicator, reports_repo, duplicates_repo):
        oldest = reports_repo.seed(report_doc(["pothole"], minutes=1))
        next_oldest = reports_repo.seed(report_doc(["pothole"], minutes=2))
        draft = await awaiting(adjudicator, [oldest, next_oldest])
        await reports_repo.delete_one({"_id": oldest})

        outcome = await adjudicator.adjudicate(draft, CONFIRM)

        assert outcome.draft.outcome_report_id == next_oldest
        assert reports_repo.get(next_oldest)["upvote_count"] == 1
        assert duplicates_repo.docs[0]["original_report_id"] == next_oldest

    async def test_all_candidates_deleted_creates_new_report(self, adjudicator, reports_repo, duplicates_repo):
        only = reports_repo.seed(report_doc(["pothole"]))
        draft = await awaiting(adjudicator, [only])
        await reports_repo.delete_one({"_id": only})

        outcome = await adjudicator.adjudicate(draft, CONFIRM)

        assert outcome.draft.state == AdjudicationState.CREATED_NEW
        assert outcome.draft.decision == CONFIRM
        assert len(reports_repo.docs) == 1
        assert duplicates_repo.docs == []

    async def test_failed_duplicate_insert_reverts_upvote(self, adjudicator, reports_repo, duplicates_repo):
        existing = reports_repo.seed(report_doc(["pothole"], upvote_count=3))
        draft = await awaiting(adjudicator, [existing])
        duplicates_repo.fail("insert_one")

        with pytest.raises(ServiceUnavailableException):
            await adjudicator.adjudicate(draft, CONFIRM)

        assert reports_repo.get(existing)["upvote_count"] == 3
        assert duplicates_repo.docs == []


class TestExactlyOnce:

    async def test_repeated_confirm_counts_once(self, adjudicator, reports_repo, duplicates_repo):
        existing = reports_repo.seed(report_doc(["pothole"]))
        draft = await awaiting(adjudicator, [existing])

        first = await adjudicator.adjudicate(draft, CONFIRM)
        second = await adjudicator.adjudicate(first.draft, CONFIRM)

        assert second.draft.state == AdjudicationState.MERGED
        assert reports_repo.get(existing)["upvote_count"] == 1
        assert len(duplicates_repo.docs) == 1

    async def test_conflicting_decision_after_merge_is_ignored(self, adjudicator, reports_repo, duplicates_repo):
        existing = reports_repo.seed(report_doc(["pothole"]))
        draft = await awaiting(adjudicator, [existing])

        merged = await adjudicator.adjudicate(draft, CONFIRM)
        again = await adjudicator.adjudicate(merged.draft, REJECT)

        assert again.draft.state == AdjudicationState.MERGED
        assert again.draft.decision == CONFIRM
        assert len(reports_repo.docs) == 1

    async def test_repeated_reject_creates_one_report(self, adjudicator, reports_repo):
        existing = reports_repo.seed(report_doc(["pothole"]))
        draft = await awaiting(adjudicator, [existing])

        first = await adjudicator.adjudicate(draft, REJECT)
        await adjudicator.adjudicate(first.draft, REJECT)

        assert len(reports_repo.docs) == 2

    async def test_stale_copy_of_merged_draft_does_not_merge_twice(self, adjudicator, reports_repo, duplicates_repo):
        existing = reports_repo.seed(report_doc(["pothole"]))
        draft = await awaiting(adjudicator, [existing])
        stale = draft.model_copy(deep=True)

        await adjudicator.adjudicate(draft, CONFIRM)
        outcome = await adjudicator.adjudicate(stale, CONFIRM)

        assert outcome.draft.state == AdjudicationState.MERGED
        assert outcome.draft.outcome_report_id == existing
        assert reports_repo.get(existing)["upvote_count"] == 1
        assert len(duplicates_repo.docs) == 1

    async def test_stale_copy_of_created_draft_does_not_create_twice(self, adjudicator, reports_repo):
        draft = make_draft()
        stale = draft.model_copy(deep=True)

        first = await adjudicator.advance(draft)
        second = await adjudicator.advance(stale)

        assert second.draft.outcome_report_id == first.draft.outcome_report_id
        assert len(reports_repo.docs) == 1


class TestInvalidTransitions:

    async def test_decision_on_drafting_state_rejected(self, adjudicator, reports_repo):
        existing = reports_repo.seed(report_doc(["pothole"]))
        draft = make_draft(candidate_ids=[existing])

        with pytest.raises(InvalidStateTransition) as exc_info:
            await adjudicator.adjudicate(draft, CONFIRM)

        assert exc_info.value.current == "drafting"
        assert reports_repo.get(existing)["upvote_count"] == 0

    async def test_opposite_decision_on_stale_merged_copy_keeps_merge(self, adjudicator, reports_repo,
                                                                      duplicates_repo):
        existing = reports_repo.seed(report_doc(["pothole"]))
        draft = await awaiting(adjudicator, [existing])
        stale = draft.model_copy(deep=True)

        await adjudicator.adjudicate(draft, CONFIRM)
        outcome = await adjudicator.adjudicate(stale, REJECT)

        assert outcome.draft.state == AdjudicationState.MERGED
        assert outcome.draft.decision == CONFIRM
        assert len(reports_repo.docs) == 1
        assert reports_repo.get(existing)["upvote_count"] == 1
        assert len(duplicates_repo.docs) == 1

    async def test_opposite_decision_on_stale_created_copy_keeps_new_report(self, adjudicator, reports_repo,
                                                                            duplicates_repo):
        existing = reports_repo.seed(report_doc(["pothole"]))
        draft = await awaiting(adjudicator, [existing])
        stale = draft.model_copy(deep=True)

        first = await adjudicator.adjudicate(draft, REJECT)
        outcome = await adjudicator.adjudicate(stale, CONFIRM)

        assert outcome.draft.state == AdjudicationState.CREATED_NEW
        assert outcome.draft.decision == REJECT
        assert outcome.draft.outcome_report_id == first.draft.outcome_report_id
        assert len(reports_repo.docs) == 2
        assert reports_repo.get(existing)["upvote_count"] == 0
        assert duplicates_repo.docs == []
