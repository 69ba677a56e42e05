"""Lenient coercion of values written by the desktop app.

Mirrored documents are not validated upstream: amounts arrive as numbers or
strings, dates as ISO strings or serialized timestamps, and lists are
sometimes missing or replaced by other shapes. Every helper here returns a
neutral value (zero, None, empty list) instead of raising.
"""

from collections.abc import Mapping
from datetime import date, datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, List, Optional

from feemirror.utils.time import to_local_naive

ZERO = Decimal("0")


def to_decimal(value: Any) -> Decimal:
    """Currency amount; anything unparseable or non-finite is zero."""
    if value is None or isinstance(value, bool):
        return ZERO
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, int):
        return Decimal(value)
    elif isinstance(value, float):
        result = Decimal(str(value))
    elif isinstance(value, str):
        try:
            result = Decimal(value.strip().replace(",", ""))
        except InvalidOperation:
            return ZERO
    else:
        return ZERO
    return result if result.is_finite() else ZERO


def to_optional_decimal(value: Any) -> Optional[Decimal]:
    if value is None or value == "":
        return None
    return to_decimal(value)


def to_int(value: Any) -> Optional[int]:
    """Integral period/month numbers; fractional or garbage values are None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return None
    return None


def to_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    if isinstance(value, str):
        return value.strip().lower() in ("true", "1", "yes")
    if isinstance(value, (int, float, Decimal)):
        return value != 0
    return False


def to_text(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def parse_datetime(value: Any) -> Optional[datetime]:
    """
    Parse a stored timestamp.

    Accepts datetime/date objects, ISO 8601 strings (with or without a
    trailing Z) and serialized Firestore timestamps ({"seconds": ...}).
    Aware values are converted to school wall-clock time.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return to_local_naive(value)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            return to_local_naive(datetime.fromisoformat(text))
        except ValueError:
            return None
    if isinstance(value, Mapping) and "seconds" in value:
        try:
            stamp = datetime.fromtimestamp(int(value["seconds"]), tz=timezone.utc)
        except (TypeError, ValueError, OverflowError, OSError):
            return None
        return to_local_naive(stamp)
    return None


def parse_date(value: Any) -> Optional[date]:
    parsed = parse_datetime(value)
    return parsed.date() if parsed is not None else None


def as_record_list(value: Any) -> List[Any]:
    """A list of mapping-like records; non-lists become empty and stray entries are dropped."""
    if not isinstance(value, (list, tuple)):
        return []
    return [item for item in value if isinstance(item, Mapping) or hasattr(item, "model_dump")]


def to_optional_text(value: Any) -> Optional[str]:
    return None if value is None else to_text(value)
