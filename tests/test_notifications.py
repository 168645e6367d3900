"""
Tests for notification content and delivery.
"""

import pytest

from civiclens.common.exceptions.base_exception import NotFoundException
from civiclens.domain.notification.services.builder import build_notification_content

RECIPIENT = {
    "_id": "citizen-1",
    "email": "citizen-1@example.com",
    "role": "citizen",
    "communication_preferences": {"email_updates": True, "in_app_updates": True},
}


class TestBuilder:

    async def test_status_update_content(self):
        content = await build_notification_content(
            "report_status_updated",
            variables={"report_id": "CL-1", "issue_type": "Graffiti", "new_status": "Resolved"},
        )
        assert content["title"] == "Your report was updated"
        assert content["body"] == (
            "Hello, this is a notification that your report regarding 'Graffiti' "
            "(ID: CL-1) has been updated to 'Resolved'."
        )

    async def test_unknown_template(self):
        with pytest.raises(ValueError):
            await build_notification_content("no_such_template", variables={})

    async def test_missing_variables(self):
        with pytest.raises(ValueError):
            await build_notification_content("report_status_updated", variables={"report_id": "CL-1"})


class TestNotificationService:

    async def test_send_stores_in_app_notice(self, notification_service, notifications_repo):
        report = {"_id": "r1", "report_id": "CL-1", "issue_type": "Pothole"}

        sent = await notification_service.send_status_update(RECIPIENT, report, "In Progress", "authority-1")

        assert sent is True
        assert len(notifications_repo.docs) == 1
        notice = notifications_repo.docs[0]
        assert notice["channel"] == "inapp"
        assert notice["status"] == "sent"
        assert notice["created_by"] == "authority-1"
        assert notice["reference_type"] == "report"

    async def test_send_reports_failure_instead_of_raising(self, notification_service, notifications_repo):
        notifications_repo.fail("insert_one")

        sent = await notification_service.send_status_update(
            RECIPIENT, {"_id": "r1", "issue_type": "Pothole"}, "Resolved", "authority-1"
        )

        assert sent is False

    async def test_list_only_own_newest_first(self, notification_service, notifications_repo):
        notifications_repo.seed({"receiver_id": "citizen-1", "title": "old", "created_at": "2024-01-01T00:00:00+00:00"})
        notifications_repo.seed({"receiver_id": "citizen-1", "title": "new", "created_at": "2024-02-01T00:00:00+00:00"})
        notifications_repo.seed({"receiver_id": "citizen-2", "title": "other", "created_at": "2024-03-01T00:00:00+00:00"})

        items, total = await notification_service.list_for_user("citizen-1")

        assert total == 2
        assert [n["title"] for n in items] == ["new", "old"]

    async def test_mark_read(self, notification_service, notifications_repo):
        notice_id = notifications_repo.seed({"receiver_id": "citizen-1", "status": "sent"})

        notice = await notification_service.mark_read(notice_id, "citizen-1")

        assert notice["status"] == "read"
        assert notice["read_at"]
        assert notifications_repo.get(notice_id)["status"] == "read"

    async def test_mark_read_of_someone_else(self, notification_service, notifications_repo):
        notice_id = notifications_repo.seed({"receiver_id": "citizen-2", "status": "sent"})

        with pytest.raises(NotFoundException):
            await notification_service.mark_read(notice_id, "citizen-1")
