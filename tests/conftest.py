"""
Shared fixtures for the CivicLens test suite.

Settings are read from the environment at import time, so the required
secrets are set here before any civiclens module is imported.
"""

import os

os.environ.setdefault("ACCESS_SECRET", "test-access-secret-with-enough-entropy")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("SENTRY_DSN", "")

from datetime import datetime, timedelta, timezone

import pytest

from civiclens.common.security.jwt.tokens import generate_access_token
from civiclens.domain.auth.entities.token_entity import TokenPayload
from civiclens.domain.notification.services.notification_service import NotificationService
from civiclens.domain.reports.services.candidate_matcher import CandidateMatcher
from civiclens.domain.reports.services.duplicate_adjudicator import DuplicateAdjudicator
from civiclens.domain.reports.services.fingerprint_extractor import FingerprintExtractor
from civiclens.domain.reports.services.report_service import ReportService
from civiclens.domain.submissions.services.submission_service import SubmissionService
from civiclens.infrastructure.database.redis.repositories.draft_repository import DraftRepository

from fakes import FakeLLM, FakeRedis, FakeRepository

# Smallest valid PNG header, base64 encoded.
PHOTO = "data:image/png;base64,iVBORw0KGgo="
LOCATION = {"lat": 40.7128, "lng": -74.006}
BASE_TIME = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


def make_user(user_id: str = "citizen-1", role: str = "citizen", full_name: str = "Jane Citizen") -> TokenPayload:
    return TokenPayload(
        sub=user_id,
        role=role,
        email=f"{user_id}@example.com",
        full_name=full_name,
        jti=f"jti-{user_id}",
        exp=int((datetime.now(timezone.utc) + timedelta(hours=1)).timestamp()),
    )


def report_doc(keywords, minutes: int = 0, **overrides) -> dict:
    """A stored report document created `minutes` after BASE_TIME."""
    doc = {
        "report_id": f"CL-{minutes:08d}",
        "user_id": "citizen-0",
        "user_full_name": "First Reporter",
        "image_url": PHOTO,
        "image_hint": "user uploaded",
        "issue_type": "Pothole",
        "issue_category": "Pothole",
        "severity": "Medium",
        "ai_description": "A pothole in the road.",
        "location": dict(LOCATION),
        "fingerprint_keywords": list(keywords),
        "status": "Submitted",
        "upvote_count": 0,
        "created_at": (BASE_TIME + timedelta(minutes=minutes)).isoformat(),
    }
    doc.update(overrides)
    return doc


def fingerprint_reply(*keywords: str) -> str:
    return '{"keywords": [%s]}' % ", ".join(f'"{k}"' for k in keywords)


@pytest.fixture
def reports_repo():
    return FakeRepository("reports")


@pytest.fixture
def duplicates_repo():
    return FakeRepository("duplicate_submissions")


@pytest.fixture
def users_repo():
    return FakeRepository("users")


@pytest.fixture
def notifications_repo():
    return FakeRepository("notifications")


@pytest.fixture
def redis():
    return FakeRedis()


@pytest.fixture
def llm():
    return FakeLLM()


@pytest.fixture
def citizen():
    return make_user()


@pytest.fixture
def authority():
    return make_user("authority-1", role="authority", full_name="City Authority")


@pytest.fixture
def matcher(reports_repo):
    return CandidateMatcher(reports_repo)


@pytest.fixture
def adjudicator(reports_repo, duplicates_repo, matcher):
    return DuplicateAdjudicator(reports_repo, duplicates_repo, matcher)


@pytest.fixture
def drafts(redis):
    return DraftRepository(redis, ttl=3600)


@pytest.fixture
def submission_service(llm, matcher, adjudicator, drafts):
    return SubmissionService(
        extractor=FingerprintExtractor(llm, max_attempts=2),
        matcher=matcher,
        adjudicator=adjudicator,
        drafts=drafts,
    )


@pytest.fixture
def notification_service(notifications_repo):
    return NotificationService(notifications_repo)


@pytest.fixture
def report_service(reports_repo, duplicates_repo, users_repo, notification_service):
    return ReportService(reports_repo, duplicates_repo, users_repo, notification_service)


def bearer(user_id: str, role: str, full_name: str = "Jane Citizen") -> dict:
    token = generate_access_token(user_id=user_id, role=role, email=f"{user_id}@example.com", full_name=full_name)
    return {"Authorization": f"Bearer {token}"}
