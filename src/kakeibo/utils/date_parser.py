"""Date parsing utilities."""

from datetime import date, timedelta
from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta


def parse_date(date_str: str) -> date:
    """Parse a date string into a date object.

    Supports various formats including relative dates:
    - Absolute dates: "2025-01-27", "2025/01/27", "January 27, 2025", etc.
    - Relative dates: "today", "yesterday", "tomorrow", "last month", "next month"

    Args:
        date_str: Date string in various formats

    Returns:
        Date object

    Raises:
        ValueError: If date string cannot be parsed
    """
    date_str = date_str.strip().lower()
    today = date.today()

    relative_dates = {
        "today": today,
        "yesterday": today - timedelta(days=1),
        "tomorrow": today + timedelta(days=1),
        "last month": (today - relativedelta(months=1)).replace(day=1),
        "this month": today.replace(day=1),
        "next month": (today + relativedelta(months=1)).replace(day=1),
    }

    if date_str in relative_dates:
        return relative_dates[date_str]

    try:
        dt = date_parser.parse(date_str)
        return dt.date()
    except (ValueError, TypeError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}")


def parse_billing_month(month_str: str) -> str:
    """Normalize a billing month to YYYY-MM.

    Accepts "2025-01", "2025/01", "2025-1" and "last month"/"this month".

    Raises:
        ValueError: If the month cannot be parsed
    """
    text = month_str.strip().lower()
    if text in ("last month", "this month", "next month"):
        return parse_date(text).strftime("%Y-%m")
    parts = text.replace("/", "-").split("-")
    if len(parts) != 2 or not all(p.isdigit() for p in parts):
        raise ValueError(f"Could not parse billing month '{month_str}'")
    year, month = int(parts[0]), int(parts[1])
    if not 1 <= month <= 12:
        raise ValueError(f"Could not parse billing month '{month_str}'")
    return f"{year:04d}-{month:02d}"


def day_of_month_distance(first: date, second: date) -> int:
    """Distance between the day-of-month of two dates, wrapping month ends.

    The 30th and the 1st are two days apart.
    """
    diff = abs(first.day - second.day)
    return min(diff, 31 - diff)
