"""Date parsing utilities."""

from datetime import date, datetime, timedelta
from dateutil import parser as date_parser


def parse_date(value: str | date) -> date:
    """Parse a date value into a date object.

    Supports:
    - date/datetime instances (returned as a date)
    - ISO dates: "2024-01-15"
    - Day-first dates: "15/01/2024"
    - Relative dates: "today", "yesterday", "tomorrow"

    Args:
        value: Date string or date object

    Returns:
        Date object

    Raises:
        ValueError: If the value cannot be parsed
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        raise ValueError("Empty date string")

    date_str = value.strip().lower()
    today = date.today()

    relative_dates = {
        "today": today,
        "yesterday": today - timedelta(days=1),
        "tomorrow": today + timedelta(days=1),
    }
    if date_str in relative_dates:
        return relative_dates[date_str]

    try:
        return date.fromisoformat(date_str[:10])
    except ValueError:
        pass

    try:
        return date_parser.parse(date_str, dayfirst=True).date()
    except (ValueError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{value}': {e}") from e


def parse_ofx_date(value: str) -> date:
    """Parse an OFX DTPOSTED value (YYYYMMDD with optional time and zone).

    Raises:
        ValueError: If fewer than eight leading digits are present
    """
    digits = value.strip()[:8]
    if len(digits) < 8 or not digits.isdigit():
        raise ValueError(f"Invalid OFX date: '{value}'")
    return datetime.strptime(digits, "%Y%m%d").date()
