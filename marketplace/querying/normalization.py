"""
Normalization of raw filter input.

Turns free text, status strings, date ranges and result toggles coming from
request handlers into canonical values. Unrecognized input is dropped rather
than rejected so that deprecated filter values keep working.
"""

from datetime import date, datetime, time, timedelta
from datetime import timezone as dt_timezone
from typing import Iterable, Optional, Tuple, Union

from .statuses import canonical_status

MAX_SEARCH_LENGTH = 200

DateInput = Union[date, datetime, str, None]


def normalize_text(value: Optional[str], max_length: Optional[int] = None) -> Optional[str]:
    """
    Trim free text; blank input becomes None.

    Args:
        value: Raw text
        max_length: Optional maximum length, applied as a left-anchored slice

    Returns:
        Normalized text or None
    """
    if value is None:
        return None
    text = str(value).strip()
    if not text:
        return None
    if max_length is not None and len(text) > max_length:
        text = text[:max_length]
    return text


def normalize_search_term(value: Optional[str]) -> Optional[str]:
    return normalize_text(value, MAX_SEARCH_LENGTH)


def normalize_status(value: Optional[str], family: str) -> Optional[str]:
    """Map a raw status string onto the family's canonical token, or None."""
    text = normalize_text(value)
    if text is None:
        return None
    return canonical_status(text, family)


def normalize_statuses(values: Union[str, Iterable[str], None], family: str) -> Tuple[str, ...]:
    """
    Canonicalize a multi-valued status filter.

    Accepts an iterable of strings or a single comma-separated string.
    Unknown values are dropped; duplicates are removed keeping first-seen order.
    """
    if values is None:
        return ()
    if isinstance(values, str):
        values = [values]

    tokens = []
    for value in (part for item in values if isinstance(item, str) for part in item.split(",")):
        token = normalize_status(value, family)
        if token is not None and token not in tokens:
            tokens.append(token)
    return tuple(tokens)


def parse_date(value: DateInput) -> Optional[date]:
    """Parse a calendar date; unparsable input is treated as absent."""
    if value is None:
        return None
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(dt_timezone.utc)
        return value.date()
    if isinstance(value, date):
        return value

    text = normalize_text(value)
    if text is None:
        return None
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        return None


def start_of_day(day: date) -> datetime:
    return datetime.combine(day, time.min, tzinfo=dt_timezone.utc)


def end_of_day(day: date) -> datetime:
    """Last representable instant of ``day`` in UTC (next midnight minus one microsecond)."""
    return start_of_day(day + timedelta(days=1)) - timedelta(microseconds=1)


def normalize_date_range(start: DateInput, end: DateInput) -> Tuple[Optional[datetime], Optional[datetime]]:
    """
    Expand calendar dates into whole-day UTC boundaries.

    Inverted ranges are swapped before expansion so that both days are
    fully included. A missing bound stays unbounded.

    Returns:
        (from_instant, to_instant), each possibly None
    """
    start_day = parse_date(start)
    end_day = parse_date(end)

    if start_day is not None and end_day is not None and start_day > end_day:
        start_day, end_day = end_day, start_day

    return (
        start_of_day(start_day) if start_day is not None else None,
        end_of_day(end_day) if end_day is not None else None,
    )


def parse_result_filter(value: Optional[str]) -> Optional[bool]:
    """
    Parse a success/failure toggle.

    "success" -> True, "failure" or "fail" -> False, anything else -> None.
    """
    text = normalize_text(value)
    if text is None:
        return None
    text = text.lower()
    if text == "success":
        return True
    if text in ("failure", "fail"):
        return False
    return None


def parse_bool(value) -> bool:
    if isinstance(value, bool):
        return value
    text = normalize_text(value)
    return text is not None and text.lower() in ("1", "true", "yes", "on")


def parse_positive_int(value) -> Optional[int]:
    """Parse a positive integer id; anything else is treated as absent."""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = int(str(value).strip())
    except ValueError:
        return None
    return number if number > 0 else None
