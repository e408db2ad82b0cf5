# Calendar and date helpers for the scheduling engine.
# Version: 1.0.0
# Parses YYYY-MM-DD strings as local calendar days and measures day differences.

from datetime import date, datetime, timedelta


DATE_FORMAT = "%Y-%m-%d"


def try_parse_local_date(value: str | date | None) -> datetime | None:
    """Parse a YYYY-MM-DD value as local midnight.

    Components are split manually so the date is never interpreted as UTC
    and shifted to the previous day.

    Args:
        value: Date string in format YYYY-MM-DD, or a date/datetime.

    Returns:
        Naive local datetime at midnight, or None if the value is not a date.
    """
    if isinstance(value, datetime):
        return datetime(value.year, value.month, value.day)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if not value or not isinstance(value, str):
        return None

    parts = value.strip().split("-")
    if len(parts) != 3:
        return None

    try:
        year, month, day = (int(part) for part in parts)
        return datetime(year, month, day)
    except ValueError:
        return None


def parse_local_date(value: str | date | None, now: datetime | None = None) -> datetime:
    """Parse a YYYY-MM-DD value as local midnight.

    Unparseable input falls back to the current time instead of raising.
    Callers that must reject bad dates validate with try_parse_local_date first.

    Args:
        value: Date string in format YYYY-MM-DD, or a date/datetime.
        now: Reference time returned for invalid input (defaults to now).

    Returns:
        Naive local datetime.
    """
    parsed = try_parse_local_date(value)
    if parsed is None:
        return now if now is not None else datetime.now()
    return parsed


def calculate_days_difference(value: str | date | None, today: date | None = None) -> int:
    """Calculate the difference in whole days between a date and today.

    Args:
        value: Date string in format YYYY-MM-DD, or a date.
        today: Reference day (defaults to the current local day).

    Returns:
        Positive for future dates, negative for past dates, 0 for invalid input.
    """
    target = try_parse_local_date(value)
    if target is None:
        return 0

    if today is None:
        today = date.today()
    elif isinstance(today, datetime):
        today = today.date()

    return (target.date() - today).days


def format_local_date(value: str | date | None) -> str:
    """Format a date for display, e.g. "October 18, 2026"."""
    parsed = try_parse_local_date(value)
    if parsed is None:
        return ""
    return f"{parsed.strftime('%B')} {parsed.day}, {parsed.year}"


def format_due_date(value: str | date | None, today: date | None = None) -> str:
    """Format a due date with relative terms (Today, Tomorrow, Yesterday, etc.).

    Args:
        value: Date string in format YYYY-MM-DD, or a date.
        today: Reference day (defaults to the current local day).

    Returns:
        Formatted string, or an empty string for invalid input.
    """
    formatted = format_local_date(value)
    if not formatted:
        return ""

    days = calculate_days_difference(value, today)
    if days == 0:
        return f"Today ({formatted})"
    elif days == 1:
        return f"Tomorrow ({formatted})"
    elif days == -1:
        return f"Yesterday ({formatted})"
    elif days > 1:
        return f"In {days} days ({formatted})"
    return f"{abs(days)} days ago ({formatted})"


def is_today(value: str | date | None, today: date | None = None) -> bool:
    return try_parse_local_date(value) is not None and calculate_days_difference(value, today) == 0


def is_past_date(value: str | date | None, today: date | None = None) -> bool:
    return calculate_days_difference(value, today) < 0


def is_future_date(value: str | date | None, today: date | None = None) -> bool:
    return calculate_days_difference(value, today) > 0


def get_current_date_string(today: date | None = None) -> str:
    """Get the current local date in YYYY-MM-DD format."""
    return (today or date.today()).strftime(DATE_FORMAT)


def hours_to_timedelta(hours: float) -> timedelta:
    """Convert a duration in hours to a timedelta."""
    return timedelta(hours=hours)
