# File: common/utils/date_utils.py

from datetime import datetime, timezone


def utc_now() -> datetime:
    """Returns current UTC time as aware datetime."""
    return datetime.now(timezone.utc)


def utc_now_iso() -> str:
    return utc_now().isoformat()


def parse_iso(value: str) -> datetime:
    """
    Parses an ISO-8601 string into an aware datetime.
    Naive values and date-only values are taken as UTC.
    """
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed
