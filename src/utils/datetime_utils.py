"""Date and time helpers.

Usage:
    from src.utils.datetime_utils import utc_now, month_bounds

    # For SQLAlchemy Column defaults
    created_at = Column(DateTime, default=utc_now)

    # First day of the month and first day of the following month
    start, end = month_bounds(2024, 3)
"""

import calendar
from datetime import date, datetime, timedelta, timezone
from typing import Tuple


def utc_now() -> datetime:
    """Return current UTC time as timezone-aware datetime."""
    return datetime.now(timezone.utc)


def month_bounds(year: int, month: int) -> Tuple[date, date]:
    """
    Half-open date range covering one calendar month.

    Args:
        year: Four digit year
        month: Month number, 1-12

    Returns:
        (first day of month, first day of next month)

    Raises:
        ValueError: If month is outside 1-12
    """
    if not 1 <= month <= 12:
        raise ValueError(f"Month must be between 1 and 12, got {month}")
    days_in_month = calendar.monthrange(year, month)[1]
    start = date(year, month, 1)
    return start, start + timedelta(days=days_in_month)


def format_month(year: int, month: int) -> str:
    """Format a month for report titles, e.g. 'March 2024'."""
    return date(year, month, 1).strftime("%B %Y")


def format_display_date(value: date) -> str:
    """Format a date the way the printed registers show it (dd/mm/yyyy)."""
    return value.strftime("%d/%m/%Y")
