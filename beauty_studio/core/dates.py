import re
from datetime import date, datetime
from typing import Union

DateLike = Union[str, date, datetime]

YMD_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")
TIME_SLOT_PATTERN = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")

# Formats accepted besides plain YYYY-MM-DD and ISO timestamps
_EXTRA_FORMATS = ("%Y/%m/%d", "%d.%m.%Y", "%Y-%m-%d %H:%M", "%Y-%m-%d %H:%M:%S")


def normalize_date(value: DateLike) -> str:
    """
    Normalize any supported date representation to a ``YYYY-MM-DD`` string.

    The calendar date is taken as written: time-of-day and timezone are
    dropped, never converted, so ``2025-04-10T23:30:00-05:00`` stays
    ``2025-04-10``. Raises ``ValueError`` for input that is not a date.
    """
    # datetime is a subclass of date, check it first
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if not isinstance(value, str):
        raise ValueError(f"Unsupported date value: {value!r}")

    text = value.strip()
    if YMD_PATTERN.match(text):
        # rejects 2025-02-30 and friends
        return date.fromisoformat(text).isoformat()

    if "T" in text:
        head = text.split("T", 1)[0]
        if YMD_PATTERN.match(head):
            return date.fromisoformat(head).isoformat()

    try:
        # space-separated timestamps, e.g. str(datetime) with an offset
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date().isoformat()
    except ValueError:
        pass

    for fmt in _EXTRA_FORMATS:
        try:
            return datetime.strptime(text, fmt).date().isoformat()
        except ValueError:
            continue

    raise ValueError(f"Invalid date: {value!r}")


def format_long_date(value: DateLike) -> str:
    """'2025-04-08' -> 'April 8, 2025'"""
    day = date.fromisoformat(normalize_date(value))
    return f"{day.strftime('%B')} {day.day}, {day.year}"
