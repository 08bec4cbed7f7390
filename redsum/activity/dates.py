"""Calendar date parsing for explicit activity windows."""

from __future__ import annotations

import re
from datetime import date, datetime, time

from redsum.errors import InvalidDateFormat, InvalidDateRange

_DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")

END_OF_DAY = time(23, 59, 59)


def parse_date(value: str) -> date:
    """Parse a strict ``YYYY-MM-DD`` string into a :class:`date`."""

    if not isinstance(value, str) or not _DATE_PATTERN.match(value):
        raise InvalidDateFormat(f"Invalid date '{value}': expected YYYY-MM-DD")
    try:
        return date.fromisoformat(value)
    except ValueError as exc:
        raise InvalidDateFormat(f"Invalid date '{value}': {exc}") from exc


def parse_date_range(from_value: str, to_value: str) -> tuple[date, date]:
    """Validate both ends of a window and return them as dates."""

    start = parse_date(from_value)
    end = parse_date(to_value)
    if start > end:
        raise InvalidDateRange(f"Start date {from_value} is later than end date {to_value}")
    return start, end


def range_bounds(start: date, end: date) -> tuple[datetime, datetime]:
    """Return the inclusive ``[start 00:00:00, end 23:59:59]`` datetime bounds."""

    return datetime.combine(start, time.min), datetime.combine(end, END_OF_DAY)


__all__ = ["END_OF_DAY", "parse_date", "parse_date_range", "range_bounds"]
