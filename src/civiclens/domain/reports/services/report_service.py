# File: domain/reports/services/report_service.py
from typing import Any, Dict, List, Optional, Tuple

from civiclens.common.config.settings import settings
from civiclens.common.exceptions.base_exception import (
    AppHTTPException,
    BadRequestException,
    ForbiddenException,
    NotFoundException,
)
from civiclens.common.logging.logger import log_error, log_info, log_warning
from civiclens.common.translations.messages import get_message
from civiclens.common.utils.date_utils import utc_now_iso
from civiclens.common.utils.image_utils import validate_photo
from civiclens.common.utils.pagination import page_to_skip
from civiclens.domain.auth.entities.token_entity import TokenPayload
from civiclens.domain.notification.services.notification_service import NotificationService
from civiclens.domain.reports.entities.report_entity import STATUS_ORDER, ReportStatus
from civiclens.infrastructure.database.mongodb.repository import MongoRepository

NEWEST_FIRST = [("created_at", -1), ("_id", -1)]


def corroboration_message(upvote_count: int) -> Optional[str]:
    if not upvote_count or upvote_count <= 0:
        return None
    return get_message("report.corroborations", variables={"count": upvote_count})


def serialize_report(report: Dict[str, Any]) -> Dict[str, Any]:
    """API shape of a stored report: `_id` becomes `id` and the corroboration line is added."""
    data = {k: v for k, v in report.items() if k != "_id"}
    data["id"] = str(report["_id"])
    data["upvote_count"] = int(report.get("upvote_count", 0))
    data["corroboration_message"] = corroboration_message(data["upvote_count"])
    return data


class ReportService:
    def __init__(self, reports_repo: MongoRepository, duplicates_repo: MongoRepository,
                 users_repo: MongoRepository, notification_service: NotificationService):
        self.reports_repo = reports_repo
        self.duplicates_repo = duplicates_repo
        self.users_repo = users_repo
        self.notification_service = notification_service

    async def _get_or_404(self, report_id: str) -> Dict[str, Any]:
        report = await self.reports_repo.find_one({"_id": report_id})
        if not report:
            raise NotFoundException(get_message("report.not_found"))
        return report

    @staticmethod
    def _check_access(report: Dict[str, Any], user: TokenPayload) -> None:
        if not user.is_authority and report.get("user_id") != user.user_id:
            log_warning("Report access denied", extra={"report_id": report["_id"], "user_id": user.user_id})
            raise ForbiddenException(get_message("auth.forbidden"))

    async def list_reports(self, status: Optional[ReportStatus] = None, page: int = 1,
                           page_size: int = 20) -> Tuple[List[Dict[str, Any]], int]:
        query = {"status": status.value} if status else {}
        items = await self.reports_repo.find_with_pagination(
            query, skip=page_to_skip(page, page_size), limit=page_size, sort=NEWEST_FIRST
        )
        total = await self.reports_repo.count(query)
        return [serialize_report(r) for r in items], total

    async def list_user_reports(self, user_id: str, page: int = 1,
                                page_size: int = 20) -> Tuple[List[Dict[str, Any]], int]:
        query = {"user_id": user_id}
        items = await self.reports_repo.find_with_pagination(
            query, skip=page_to_skip(page, page_size), limit=page_size, sort=NEWEST_FIRST
        )
        total = await self.reports_repo.count(query)
        return [serialize_report(r) for r in items], total

    async def get_report(self, report_id: str, user: TokenPayload) -> Dict[str, Any]:
        report = await self._get_or_404(report_id)
        self._check_access(report, user)
        return serialize_report(report)

    async def update_status(self, report_id: str, authority: TokenPayload, status: ReportStatus,
                            resolved_image_url: Optional[str] = None,
                            resolved_image_hint: Optional[str] = None) -> Dict[str, Any]:
        report = await self._get_or_404(report_id)
        current = ReportStatus(report.get("status", ReportStatus.SUBMITTED.value))

        if resolved_image_url:
            validate_photo(resolved_image_url, settings.MAX_IMAGE_BYTES)
        if status == ReportStatus.RESOLVED and not (resolved_image_url or report.get("resolved_image_url")):
            raise BadRequestException(get_message("report.resolution_image_required"))

        if STATUS_ORDER[status] < STATUS_ORDER[current]:
            log_warning("Report status moved backwards", extra={
                "report_id": report_id,
                "from": current.value,
                "to": status.value,
                "authority_id": authority.user_id
            })

        update = {"status": status.value, "authority_id": authority.user_id, "updated_at": utc_now_iso()}
        if resolved_image_url:
            update["resolved_image_url"] = resolved_image_url
            update["resolved_image_hint"] = resolved_image_hint or "resolved issue"
        await self.reports_repo.update_one({"_id": report_id}, update)
        report.update(update)

        log_info("Report status updated", extra={
            "report_id": report_id,
            "from": current.value,
            "to": status.value,
            "authority_id": authority.user_id
        })

        if status != current:
            await self._notify_reporter(report, status, authority.user_id)

        return serialize_report(report)

    async def _notify_reporter(self, report: Dict[str, Any], status: ReportStatus, authority_id: str) -> None:
        try:
            reporter = await self.users_repo.find_one({"_id": report["user_id"]})
        except AppHTTPException as e:
            log_error("Reporter lookup failed; notification skipped", extra={"report_id": report["_id"], "error": str(e.detail)})
            return
        if not reporter:
            log_warning("Reporter not found; notification skipped", extra={"report_id": report["_id"]})
            return
        await self.notification_service.send_status_update(reporter, report, status.value, authority_id)

    async def delete_report(self, report_id: str, user: TokenPayload) -> None:
        report = await self._get_or_404(report_id)
        self._check_access(report, user)

        await self.reports_repo.delete_one({"_id": report_id})
        removed = await self.duplicates_repo.delete_many({"original_report_id": report_id})
        log_info("Report deleted", extra={
            "report_id": report_id,
            "deleted_by": user.user_id,
            "duplicates_removed": removed
        })

    async def list_duplicates(self, report_id: str) -> List[Dict[str, Any]]:
        await self._get_or_404(report_id)
        duplicates = await self.duplicates_repo.find(
            {"original_report_id": report_id}, sort=[("created_at", 1)]
        )
        return [{**{k: v for k, v in d.items() if k != "_id"}, "id": d["_id"]} for d in duplicates]
