from __future__ import annotations

import re
from datetime import date, datetime, time
from typing import Optional

from ..core.constants import DATE_FORMAT, SHORT_TIME_FORMAT, TIME_FORMAT
from ..core.exceptions import InvalidInputError

# strptime alone accepts unpadded fields ("2024-1-5", "08:5"); the hour may be one digit.
_DATE_SHAPE = re.compile(r"\d{4}-\d{2}-\d{2}")
_TIME_SHAPE = re.compile(r"\d{1,2}:\d{2}(:\d{2})?")


def parse_date(value: str) -> date:
    """Parse a strict YYYY-MM-DD string into a date.

    Raises ValueError on any other format.
    """
    if not _DATE_SHAPE.fullmatch(value):
        raise ValueError(f"invalid date {value!r}, expected YYYY-MM-DD")
    return datetime.strptime(value, DATE_FORMAT).date()


def parse_time(value: str) -> Optional[time]:
    """Parse HH:MM:SS or HH:MM into a time; HH:MM gets ``00`` seconds.

    An empty string means "no value" and returns None.
    """
    if value == "":
        return None

    if _TIME_SHAPE.fullmatch(value):
        for fmt in (TIME_FORMAT, SHORT_TIME_FORMAT):
            try:
                return datetime.strptime(value, fmt).time()
            except ValueError:
                continue

    raise InvalidInputError(f"invalid time {value!r}, expected HH:MM or HH:MM:SS")


def normalize_time_separator(value: str) -> str:
    """Accept ``08.30`` style input by turning dots into colons."""
    return value.replace(".", ":")


def hours_between(start: time, end: time) -> float:
    """Hours from start to end on the same day, rounded to 2 decimals."""
    anchor = date(2000, 1, 1)
    delta = datetime.combine(anchor, end) - datetime.combine(anchor, start)
    return round(delta.total_seconds() / 3600, 2)


def format_time(value: Optional[time]) -> Optional[str]:
    return value.strftime(TIME_FORMAT) if value is not None else None
