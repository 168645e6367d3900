# File: common/dependencies/service_deps.py
from fastapi import Depends
from redis.asyncio import Redis

from civiclens.domain.analytics.services.analytics_service import AnalyticsService
from civiclens.domain.notification.services.notification_service import NotificationService
from civiclens.domain.reports.services.analysis_service import AnalysisService
from civiclens.domain.reports.services.candidate_matcher import CandidateMatcher
from civiclens.domain.reports.services.duplicate_adjudicator import DuplicateAdjudicator
from civiclens.domain.reports.services.fingerprint_extractor import FingerprintExtractor
from civiclens.domain.reports.services.report_service import ReportService
from civiclens.domain.submissions.services.submission_service import SubmissionService
from civiclens.infrastructure.database.mongodb.mongo_client import (
    get_duplicates_repo,
    get_notifications_repo,
    get_reports_repo,
    get_users_repo,
)
from civiclens.infrastructure.database.mongodb.repository import MongoRepository
from civiclens.infrastructure.database.redis.redis_client import get_redis_client
from civiclens.infrastructure.database.redis.repositories.draft_repository import DraftRepository
from civiclens.infrastructure.external.llm.llm_client import LLMClient, get_llm_client


def get_notification_service(
    notifications_repo: MongoRepository = Depends(get_notifications_repo),
) -> NotificationService:
    return NotificationService(notifications_repo)


def get_report_service(
    reports_repo: MongoRepository = Depends(get_reports_repo),
    duplicates_repo: MongoRepository = Depends(get_duplicates_repo),
    users_repo: MongoRepository = Depends(get_users_repo),
    notification_service: NotificationService = Depends(get_notification_service),
) -> ReportService:
    return ReportService(reports_repo, duplicates_repo, users_repo, notification_service)


def get_submission_service(
    reports_repo: MongoRepository = Depends(get_reports_repo),
    duplicates_repo: MongoRepository = Depends(get_duplicates_repo),
    redis: Redis = Depends(get_redis_client),
    llm: LLMClient = Depends(get_llm_client),
) -> SubmissionService:
    matcher = CandidateMatcher(reports_repo)
    return SubmissionService(
        extractor=FingerprintExtractor(llm),
        matcher=matcher,
        adjudicator=DuplicateAdjudicator(reports_repo, duplicates_repo, matcher),
        drafts=DraftRepository(redis),
    )


def get_analysis_service(llm: LLMClient = Depends(get_llm_client)) -> AnalysisService:
    return AnalysisService(llm)


def get_analytics_service(
    reports_repo: MongoRepository = Depends(get_reports_repo),
    llm: LLMClient = Depends(get_llm_client),
) -> AnalyticsService:
    return AnalyticsService(reports_repo, llm)
