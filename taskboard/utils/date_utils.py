"""
Centralized date/time utilities
All timestamps handled by the board are timezone-aware UTC datetimes
"""

import re
from datetime import datetime, timezone
from typing import Any, Optional
from taskboard.utils.logger import logger

# Before 3.11 fromisoformat only reads 3 or 6 fraction digits; Firestore also sends 9
FRACTION = re.compile(r"\.(\d+)")


def _microsecond_fraction(match: re.Match) -> str:
    return "." + match.group(1)[:6].ljust(6, "0")


def utc_now() -> datetime:
    """
    Get current datetime in UTC

    Returns:
        Current datetime object with UTC timezone
    """
    return datetime.now(timezone.utc)


def parse_timestamp(value: Any) -> Optional[datetime]:
    """
    Coerce a stored timestamp into an aware UTC datetime

    Accepts datetime objects, ISO-8601 strings (with or without "Z"),
    epoch seconds and Firestore-style {"seconds": ..., "nanoseconds": ...} maps.

    Args:
        value: Raw value from a document

    Returns:
        Datetime in UTC, or None if the value is empty or unreadable
    """
    if value is None or value == "":
        return None

    try:
        if isinstance(value, datetime):
            dt = value
        elif isinstance(value, bool):
            return None
        elif isinstance(value, (int, float)):
            dt = datetime.fromtimestamp(value, tz=timezone.utc)
        elif isinstance(value, dict) and "seconds" in value:
            seconds = float(value["seconds"]) + float(value.get("nanoseconds", 0)) / 1e9
            dt = datetime.fromtimestamp(seconds, tz=timezone.utc)
        elif isinstance(value, str):
            text = FRACTION.sub(_microsecond_fraction, value.strip(), count=1)
            dt = datetime.fromisoformat(text.replace("Z", "+00:00"))
        else:
            return None
    except (ValueError, TypeError, OverflowError) as e:
        logger.warning(f"Failed to parse timestamp '{value}': {e}")
        return None

    # Naive values are treated as UTC
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def format_timestamp(dt: datetime) -> str:
    """
    Format datetime as RFC 3339 in UTC ("2024-11-05T10:00:00.000000Z")

    Args:
        dt: Datetime to format (naive values are treated as UTC)

    Returns:
        Formatted timestamp string
    """
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%fZ")
