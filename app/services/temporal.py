"""Calendar helpers for bucketing learner activity.

All keys are derived from the UTC calendar date. A naive datetime is
treated as already being in UTC.

Month and weekday names come from fixed English tables rather than
strftime("%b") / strftime("%A"), which follow the process locale.
"""

from __future__ import annotations

from datetime import UTC, date, datetime

_SECONDS_PER_DAY = 24 * 60 * 60

_MONTH_ABBREVIATIONS = (
    "Jan",
    "Feb",
    "Mar",
    "Apr",
    "May",
    "Jun",
    "Jul",
    "Aug",
    "Sep",
    "Oct",
    "Nov",
    "Dec",
)

# Indexed by date.weekday(): Monday == 0
_WEEKDAY_NAMES = (
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
    "Sunday",
)


def as_utc(instant: datetime) -> datetime:
    if instant.tzinfo is None:
        return instant.replace(tzinfo=UTC)
    return instant.astimezone(UTC)


def utc_date(instant: datetime) -> date:
    return as_utc(instant).date()


def days_between(a: datetime, b: datetime) -> int:
    """Whole days between two instants, order-independent, floored."""
    seconds = abs((as_utc(b) - as_utc(a)).total_seconds())
    return int(seconds // _SECONDS_PER_DAY)


def date_key(instant: datetime | date) -> str:
    """Canonical YYYY-MM-DD key for an instant's UTC calendar day."""
    if isinstance(instant, datetime):
        instant = utc_date(instant)
    return instant.isoformat()


def week_label(day: datetime | date) -> str:
    """Label like "Week 2 Nov 2025".

    Weeks split each month into 7-day spans starting on the 1st, so
    days 29-31 form a short "Week 5". Labels never span two months.
    """
    if isinstance(day, datetime):
        day = utc_date(day)
    week = (day.day - 1) // 7 + 1
    return f"Week {week} {_MONTH_ABBREVIATIONS[day.month - 1]} {day.year}"


def weekday_name(day: datetime | date) -> str:
    if isinstance(day, datetime):
        day = utc_date(day)
    return _WEEKDAY_NAMES[day.weekday()]
