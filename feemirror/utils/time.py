"""Calendar helpers for the configured school timezone"""

from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from feemirror.config import settings


def school_timezone():
    """The zone used to decide which calendar month "now" falls in. Unknown names fall back to UTC."""
    try:
        return ZoneInfo(settings.TIMEZONE)
    except (ZoneInfoNotFoundError, ValueError):
        return timezone.utc


def get_utc_now() -> datetime:
    """
    Returns a naive UTC datetime.
    Avoids 'datetime.utcnow()' deprecation warnings.
    """
    return datetime.now(timezone.utc).replace(tzinfo=None)


def get_local_now() -> datetime:
    """Naive wall-clock time in the school timezone"""
    return datetime.now(school_timezone()).replace(tzinfo=None)


def get_today() -> date:
    return get_local_now().date()


def to_local_naive(value: datetime) -> datetime:
    """Convert an aware timestamp into school wall-clock time; naive values pass through."""
    if value.tzinfo is None:
        return value
    return value.astimezone(school_timezone()).replace(tzinfo=None)
