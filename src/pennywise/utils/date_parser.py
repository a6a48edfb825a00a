"""Date and month-key parsing utilities."""

import re
from datetime import date, datetime, timedelta
from typing import Optional

from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta

MONTH_KEY_PATTERN = re.compile(r"^(\d{4})-(\d{2})$")
ISO_DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")
ISO_TIMESTAMP_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}[T ]")


def parse_date(date_str: str) -> date:
    """Parse a date string into a date object.

    Supports absolute dates ("2024-01-15", "January 15, 2024") and the
    relative forms "today", "yesterday", "tomorrow", "this month" and
    "last month".

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
        "this month": today.replace(day=1),
        "last month": (today - relativedelta(months=1)).replace(day=1),
    }

    if date_str in relative_dates:
        return relative_dates[date_str]

    try:
        dt = date_parser.parse(date_str)
        return dt.date()
    except (ValueError, OverflowError, TypeError) as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}")


def coerce_date(value) -> date:
    """Return a date for a date, datetime or ISO-8601 string value.

    Raises:
        ValueError: If the value is not a recognisable date
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        try:
            if ISO_DATE_PATTERN.match(text):
                return date.fromisoformat(text)
            if ISO_TIMESTAMP_PATTERN.match(text):
                return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
        except ValueError:
            raise ValueError(f"Could not parse date '{value}'")
    raise ValueError(f"Could not parse date {value!r}")


def parse_month_key(month_key: str) -> tuple[int, int]:
    """Split a "YYYY-MM" month key into (year, month).

    Raises:
        ValueError: If the key is not exactly of the form YYYY-MM
    """
    match = MONTH_KEY_PATTERN.match(month_key or "")
    if match is None:
        raise ValueError(f"Invalid month key '{month_key}': expected YYYY-MM")
    year, month = int(match.group(1)), int(match.group(2))
    if not 1 <= month <= 12:
        raise ValueError(f"Invalid month key '{month_key}': month must be 01-12")
    return year, month


def month_range(month_key: str) -> tuple[date, date]:
    """Get the first and last day of the month identified by ``month_key``."""
    year, month = parse_month_key(month_key)
    start_date = date(year, month, 1)
    end_date = start_date + relativedelta(months=1) - timedelta(days=1)
    return (start_date, end_date)


def month_key_for(value: date) -> str:
    """Get the month key a date falls in."""
    return value.strftime("%Y-%m")


def current_month_key(today: Optional[date] = None) -> str:
    """Get the month key for today."""
    return month_key_for(today or date.today())


def shift_month(month_key: str, months: int) -> str:
    """Move a month key forwards (positive) or backwards (negative)."""
    start_date, _ = month_range(month_key)
    return month_key_for(start_date + relativedelta(months=months))


def last_months(end_month_key: str, count: int = 6) -> list[str]:
    """Get ``count`` consecutive month keys ending at ``end_month_key``, oldest first."""
    if count < 1:
        raise ValueError("Month count must be at least 1")
    return [shift_month(end_month_key, -offset) for offset in range(count - 1, -1, -1)]


def month_label(month_key: str) -> str:
    """Human readable label such as "March 2024"."""
    start_date, _ = month_range(month_key)
    return start_date.strftime("%B %Y")
