# File: domain/notification/services/templates/notification_templates.py

TEMPLATE_KEYS = [
    "report_status_updated",
]

TEMPLATE_VARIABLES = {
    "report_status_updated": {"report_id": "str", "issue_type": "str", "new_status": "str"},
}
