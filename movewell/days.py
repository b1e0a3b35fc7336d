# movewell/days.py
"""
Calendar-day resolution.

A day is a plain ``datetime.date``. The canonical "today" is the UTC calendar
date; client-supplied ``YYYY-MM-DD`` strings are taken as-is. Lookups, dedup
checks, streak comparisons and weekly buckets all go through these helpers.
"""
import re
from datetime import date, datetime, timedelta, timezone
from typing import Optional

from .errors import ValidationError

DATE_FORMAT = "%Y-%m-%d"
_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def utc_today(now: Optional[datetime] = None) -> date:
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is not None:
        now = now.astimezone(timezone.utc)
    return now.date()


def parse_day(value, field: str = "date") -> date:
    if not isinstance(value, str) or not _DATE_RE.match(value.strip()):
        raise ValidationError(f"{field} must be in YYYY-MM-DD format")
    try:
        return datetime.strptime(value.strip(), DATE_FORMAT).date()
    except ValueError:
        raise ValidationError(f"{field} is not a valid calendar date")


def resolve_day(value=None, now: Optional[datetime] = None) -> date:
    """Explicit date string wins; otherwise the current UTC day."""
    if value is None or (isinstance(value, str) and not value.strip()):
        return utc_today(now)
    return parse_day(value)


def previous_day(day: date) -> date:
    return day - timedelta(days=1)
