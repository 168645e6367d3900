# File: domain/notification/services/notification_service.py
from datetime import datetime, UTC
from typing import Any, Dict, List, Optional, Tuple

from civiclens.common.exceptions.base_exception import NotFoundException
from civiclens.common.logging.logger import log_error, log_info
from civiclens.common.translations.messages import get_message
from civiclens.common.utils.pagination import page_to_skip
from civiclens.domain.notification.entities.notification_entity import (
    Notification,
    NotificationChannel,
    NotificationStatus,
)
from civiclens.domain.notification.services.builder import build_notification_content
from civiclens.domain.users.entities.user_entity import CommunicationPreferences
from civiclens.infrastructure.database.mongodb.repository import MongoRepository


class NotificationService:
    """
    Status-change notices for citizens. E-mail delivery is simulated by a log
    record; in-app notices are stored and listed per user.
    """

    def __init__(self, notifications_repo: MongoRepository):
        self.notifications_repo = notifications_repo

    async def _dispatch_notification(
        self,
        receiver_id: str,
        receiver_role: str,
        title: str,
        body: str,
        channel: NotificationChannel = NotificationChannel.INAPP,
        reference_type: str = None,
        reference_id: str = None,
        created_by: str = "system",
        recipient_email: str = None
    ) -> Optional[str]:
        sent_at = datetime.now(UTC).isoformat()

        if channel == NotificationChannel.EMAIL:
            log_info("Simulated email notification", extra={
                "recipient": recipient_email,
                "receiver_id": receiver_id,
                "reference_type": reference_type,
                "reference_id": reference_id,
                "title": title,
                "message": body
            })
            return None

        notification = Notification(
            receiver_id=receiver_id,
            receiver_role=receiver_role,
            created_by=created_by,
            title=title,
            body=body,
            channel=channel,
            reference_type=reference_type,
            reference_id=reference_id,
            status=NotificationStatus.SENT,
            sent_at=sent_at
        )
        notification_id = await self.notifications_repo.insert_one(
            notification.model_dump(exclude={"id"}, exclude_none=True)
        )
        log_info("Notification dispatched", extra={
            "notification_id": notification_id,
            "receiver_id": receiver_id,
            "receiver_role": receiver_role,
            "channel": channel.value,
            "title": title,
            "created_by": created_by
        })
        return notification_id

    async def send(
        self,
        recipient: Dict[str, Any],
        template_key: str,
        variables: dict = None,
        reference_type: str = None,
        reference_id: str = None,
        created_by: str = "system",
        language: str = "en"
    ) -> bool:
        """
        Deliver one template over every channel the recipient opted into.
        Never raises: a failed notice must not fail the action that caused it.
        """
        receiver_id = str(recipient.get("_id"))
        try:
            content = await build_notification_content(template_key, language=language, variables=variables or {})
            preferences = CommunicationPreferences(**(recipient.get("communication_preferences") or {}))

            channels: List[NotificationChannel] = []
            if preferences.email_updates and recipient.get("email"):
                channels.append(NotificationChannel.EMAIL)
            if preferences.in_app_updates:
                channels.append(NotificationChannel.INAPP)

            for channel in channels:
                await self._dispatch_notification(
                    receiver_id=receiver_id,
                    receiver_role=recipient.get("role", "citizen"),
                    title=content["title"],
                    body=content["body"],
                    channel=channel,
                    reference_type=reference_type,
                    reference_id=reference_id,
                    created_by=created_by,
                    recipient_email=recipient.get("email")
                )

            log_info("Notification sent successfully", extra={
                "receiver_id": receiver_id,
                "template_key": template_key,
                "channels": [c.value for c in channels]
            })
            return True

        except Exception as e:
            log_error("Notification service failed", extra={
                "receiver_id": receiver_id,
                "template_key": template_key,
                "error": str(e)
            }, exc_info=True)
            return False

    async def send_status_update(self, recipient: Dict[str, Any], report: Dict[str, Any],
                                 new_status: str, authority_id: str) -> bool:
        return await self.send(
            recipient=recipient,
            template_key="report_status_updated",
            variables={
                "report_id": report.get("report_id") or report["_id"],
                "issue_type": report.get("issue_type", ""),
                "new_status": new_status
            },
            reference_type="report",
            reference_id=report["_id"],
            created_by=authority_id
        )

    async def list_for_user(self, user_id: str, page: int = 1, page_size: int = 20) -> Tuple[List[dict], int]:
        query = {"receiver_id": user_id}
        items = await self.notifications_repo.find_with_pagination(
            query, skip=page_to_skip(page, page_size), limit=page_size, sort=[("created_at", -1)]
        )
        total = await self.notifications_repo.count(query)
        return items, total

    async def mark_read(self, notification_id: str, user_id: str) -> dict:
        notification = await self.notifications_repo.find_one({"_id": notification_id, "receiver_id": user_id})
        if not notification:
            raise NotFoundException(get_message("notification.not_found"))

        if notification.get("status") != NotificationStatus.READ.value:
            read_at = datetime.now(UTC).isoformat()
            await self.notifications_repo.update_one(
                {"_id": notification_id},
                {"status": NotificationStatus.READ.value, "read_at": read_at}
            )
            notification.update({"status": NotificationStatus.READ.value, "read_at": read_at})
            log_info("Notification marked as read", extra={"notification_id": notification_id, "user_id": user_id})
        return notification
