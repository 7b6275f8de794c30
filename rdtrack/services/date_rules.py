"""
Date rules for loosely-typed date strings.
Task start/end dates and labor work dates are stored as free text; anything
that cannot be parsed is treated as absent rather than raising.
"""
from datetime import datetime, timedelta
from typing import Optional, Tuple


_FORMATS = (
    "%Y-%m-%d",
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%d %H:%M",
    "%Y-%m-%dT%H:%M:%S",
    "%Y-%m-%dT%H:%M:%S.%f",
    "%Y-%m-%dT%H:%M",
    "%Y-%m-%dT%H:%M:%S%z",
    "%Y-%m-%dT%H:%M:%S.%f%z",
    "%Y/%m/%d",
    "%Y/%m/%d %H:%M:%S",
    "%Y%m%d",
)

DISPLAY_FORMAT = "%Y-%m-%d %H:%M:%S"


def parse_loose_datetime(value) -> Optional[datetime]:
    """
    Parse a stored date string into a naive datetime.

    Args:
        value: Raw value (string, datetime or None)

    Returns:
        Parsed datetime, or None when missing or unparsable
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.replace(tzinfo=None)
    if not isinstance(value, str):
        return None
    text = value.strip()
    if not text:
        return None
    if text.endswith("Z"):
        text = text[:-1] + "+0000"
    for fmt in _FORMATS:
        try:
            dt = datetime.strptime(text, fmt)
        except ValueError:
            continue
        if dt.tzinfo is not None:
            dt = dt.replace(tzinfo=None)
        return dt
    return None


def parse_report_range(
    start_date: Optional[str],
    end_date: Optional[str],
) -> Tuple[Optional[datetime], Optional[datetime]]:
    """
    Turn report request bounds into comparable datetimes.

    The end bound covers the whole end day, so it is moved to midnight of the
    following day. A bound that does not parse means "no bound".
    """
    start = parse_loose_datetime(start_date)
    end = parse_loose_datetime(end_date)
    if end is not None:
        end = end + timedelta(days=1)
    return start, end


def within_bounds(value: Optional[datetime], start: Optional[datetime], end: Optional[datetime]) -> bool:
    """True when value lies in [start, end]; a missing value fails any supplied bound."""
    if start is None and end is None:
        return True
    if value is None:
        return False
    if start is not None and value < start:
        return False
    if end is not None and value > end:
        return False
    return True


def task_in_range(start_text: Optional[str], end_text: Optional[str], start: Optional[datetime], end: Optional[datetime]) -> bool:
    """
    Check a task against a report range.

    The task start is compared to the range start and the task end to the
    range end; each side is only checked when its bound is supplied.
    """
    if start is not None:
        task_start = parse_loose_datetime(start_text)
        if task_start is None or task_start < start:
            return False
    if end is not None:
        task_end = parse_loose_datetime(end_text)
        if task_end is None or task_end > end:
            return False
    return True


def derived_task_hours(start_text: Optional[str], end_text: Optional[str]) -> float:
    """
    Estimate the hours spent on a task from its dates.

    Both dates parse: the duration in hours, never less than 1 hour.
    Only a start date present: 1 hour. Otherwise nothing.
    """
    has_start = bool(start_text and str(start_text).strip())
    has_end = bool(end_text and str(end_text).strip())
    if has_start and has_end:
        task_start = parse_loose_datetime(start_text)
        task_end = parse_loose_datetime(end_text)
        if task_start is None or task_end is None:
            return 0.0
        hours = (task_end - task_start).total_seconds() / 3600
        return max(1.0, hours)
    if has_start:
        return 1.0
    return 0.0


def format_timestamp(value: Optional[datetime]) -> Optional[str]:
    if value is None:
        return None
    return value.strftime(DISPLAY_FORMAT)
