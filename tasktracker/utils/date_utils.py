"""Utilities for date and time operations."""

from datetime import date, datetime, time, timedelta


def get_day_bounds(day: date) -> tuple[datetime, datetime]:
    """Return [start, end) datetimes covering the given calendar day."""
    start = datetime.combine(day, time.min)
    return start, start + timedelta(days=1)


def get_month_start(day: date) -> date:
    return day.replace(day=1)


def shift_months(month_start: date, months: int) -> date:
    """Move the first day of a month by `months` calendar months (may be negative)."""
    index = month_start.year * 12 + (month_start.month - 1) + months
    return date(index // 12, index % 12 + 1, 1)


def format_month_label(month_start: date) -> str:
    """Format as "Oct 2026"."""
    return month_start.strftime("%b %Y")


def format_due_date(day: date) -> str:
    """Format as "Oct 9, 2026" (no zero padding)."""
    return f"{day.strftime('%b')} {day.day}, {day.year}"


def days_between(earlier: date, later: date) -> int:
    return (later - earlier).days
