"""
TRACKER Calendar Helpers

All timestamps are ISO dates ("YYYY-MM-DD"); day counts are whole days.
"""

from datetime import date
from typing import Union

DateLike = Union[str, date]


def parse_date(value: DateLike) -> date:
    if isinstance(value, date):
        return value
    return date.fromisoformat(value[:10])


def days_between(start: DateLike, end: DateLike) -> int:
    """Signed number of days from start to end."""
    return (parse_date(end) - parse_date(start)).days


def days_until_due(reference: DateLike, due: DateLike) -> int:
    """
    Inclusive days left until the due date.

    0 once the reference date is past the due date.
    """
    if parse_date(reference) > parse_date(due):
        return 0
    return days_between(reference, due) + 1


def overdue_by(reference: DateLike, due: DateLike) -> int:
    """Inclusive days past the due date, 0 while not overdue."""
    if parse_date(reference) <= parse_date(due):
        return 0
    return days_between(due, reference) + 1


def previous_month_prefix(timestamp: DateLike) -> str:
    """"YYYY-MM-" of the calendar month before `timestamp`."""
    current = parse_date(timestamp)
    year, month = current.year, current.month - 1
    if month == 0:
        year, month = year - 1, 12
    return f"{year:04d}-{month:02d}-"
