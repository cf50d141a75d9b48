"""Calendar date helpers for ``YYYY-MM-DD`` strings and git timestamps."""

from __future__ import annotations

import re
from datetime import date, datetime, timedelta, timezone

from commit_canvas.errors import ValidationError

ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def parse_iso_date(value: str, field_name: str = "date") -> date:
    """Parse a strict ``YYYY-MM-DD`` string into a real calendar date.

    Raises:
        ValidationError: ``InvalidDate`` when the format is wrong or the date
            does not exist (``2023-02-30``).
    """
    if not isinstance(value, str) or not ISO_DATE_RE.match(value):
        raise ValidationError(f"{field_name} must be in YYYY-MM-DD format.", kind="InvalidDate")
    try:
        return date.fromisoformat(value)
    except ValueError as exc:
        raise ValidationError(f"{field_name} is not a real calendar date.", kind="InvalidDate") from exc


def format_iso_date(value: date) -> str:
    return value.isoformat()


def add_days(value: str, days: int) -> str:
    """Return the ISO date ``days`` after ``value``."""
    return format_iso_date(parse_iso_date(value) + timedelta(days=days))


def diff_in_days(start: str, end: str) -> int:
    return (parse_iso_date(end, "endDate") - parse_iso_date(start, "startDate")).days


def format_git_timestamp(moment: datetime) -> str:
    """Format a datetime as ``YYYY-MM-DDTHH:mm:ss+HHMM`` for git date fields.

    Naive datetimes are interpreted in the local timezone.
    """
    aware = moment if moment.tzinfo is not None else moment.astimezone()
    return aware.strftime("%Y-%m-%dT%H:%M:%S%z")


def utc_now_iso() -> str:
    """Return the current UTC time as ISO-8601 with milliseconds and ``Z``."""
    now = datetime.now(timezone.utc)
    return now.strftime("%Y-%m-%dT%H:%M:%S.") + f"{now.microsecond // 1000:03d}Z"
