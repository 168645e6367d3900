#  common/translations/messages.py
from typing import Dict, Optional, Literal

MESSAGES = {
    "auth.register.success": {
        "en": "Account created successfully."
    },
    "auth.register.email_taken": {
        "en": "An account with this email already exists."
    },
    "auth.register.invalid_invite": {
        "en": "A valid invite code is required to register as an authority."
    },
    "auth.login.success": {
        "en": "Login successful."
    },
    "auth.login.invalid": {
        "en": "Invalid credentials."
    },
    "auth.login.not_active": {
        "en": "Account not active."
    },
    "auth.login.too_many_attempts": {
        "en": "Too many login attempts. Please try again later."
    },
    "auth.logout.success": {
        "en": "You have been logged out."
    },
    "auth.forbidden": {
        "en": "Access denied."
    },
    "auth.profile.updated": {
        "en": "Profile updated successfully."
    },
    "auth.profile.fetched": {
        "en": "Profile retrieved."
    },
    "auth.password.changed": {
        "en": "Password changed successfully."
    },
    "auth.password.invalid": {
        "en": "Current password is incorrect."
    },
    "token.invalid": {
        "en": "Invalid token."
    },
    "token.expired": {
        "en": "Token has expired."
    },
    "token.revoked": {
        "en": "Token has been revoked."
    },
    "user.not_found": {
        "en": "User not found."
    },
    "report.analyzed": {
        "en": "The issue details have been auto-filled."
    },
    "report.analysis_failed": {
        "en": "Could not analyze the image. Please fill the details manually."
    },
    "report.not_found": {
        "en": "Report not found."
    },
    "report.listed": {
        "en": "Reports retrieved."
    },
    "report.fetched": {
        "en": "Report retrieved."
    },
    "report.status_updated": {
        "en": "Report status updated."
    },
    "report.resolution_image_required": {
        "en": "A resolution photo is required to mark a report as resolved."
    },
    "report.deleted": {
        "en": "Report deleted."
    },
    "report.duplicates_listed": {
        "en": "Duplicate submissions retrieved."
    },
    "report.corroborations": {
        "en": "{count} other citizen(s) have also reported this issue."
    },
    "submission.missing_input": {
        "en": "Please upload an image and ensure location is available."
    },
    "submission.invalid_image": {
        "en": "The photo must be a base64 data URI with an image MIME type."
    },
    "submission.image_too_large": {
        "en": "The photo exceeds the maximum allowed size."
    },
    "submission.created": {
        "en": "Report submitted successfully!"
    },
    "submission.duplicates_found": {
        "en": "We found one or more existing reports that look similar to yours. Is your report about one of these issues?"
    },
    "submission.merged": {
        "en": "Thanks! Your submission was added to the existing report."
    },
    "submission.fetched": {
        "en": "Submission retrieved."
    },
    "submission.not_found": {
        "en": "Submission not found or expired."
    },
    "submission.processing_error": {
        "en": "We could not process your submission. Please try again."
    },
    "submission.retry": {
        "en": "Your submission {id} was saved but could not be completed. Please retry it."
    },
    "submission.discarded": {
        "en": "Submission discarded."
    },
    "submission.in_progress": {
        "en": "This submission is already being processed. Please wait a moment."
    },
    "analytics.summary": {
        "en": "Analytics summary generated."
    },
    "analytics.answered": {
        "en": "Analysis complete."
    },
    "analytics.failed": {
        "en": "The analysis assistant is unavailable. Please try again."
    },
    "notification.listed": {
        "en": "Notifications retrieved."
    },
    "notification.read": {
        "en": "Notification marked as read."
    },
    "notification.not_found": {
        "en": "Notification not found."
    },
    "notification.report_status_updated.title": {
        "en": "Your report was updated"
    },
    "notification.report_status_updated.body": {
        "en": "Hello, this is a notification that your report regarding '{issue_type}' (ID: {report_id}) has been updated to '{new_status}'."
    },
    "server.error": {
        "en": "Internal server error occurred."
    },
}


def get_message(key: str, lang: Literal["en"] = "en", variables: Optional[Dict[str, int | str]] = None) -> str:
    """
    Retrieve a localized message based on key and language, with optional variable substitution.

    Args:
        key (str): Message key (e.g., 'report.not_found')
        lang (Literal["en"]): Language code
        variables (Optional[Dict[str, int | str]]): Variables to substitute in the message

    Returns:
        str: Localized message or key as fallback
    """
    message = MESSAGES.get(key, {}).get(lang) or MESSAGES.get(key, {}).get("en") or key
    if variables and isinstance(message, str):
        try:
            return message.format(**variables)
        except (KeyError, ValueError):
            return message
    return message
