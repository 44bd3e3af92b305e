"""Date parsing utilities."""

from datetime import date, datetime
from typing import Union

from dateutil import parser as date_parser


def parse_date(value: Union[str, date]) -> date:
    """Parse a bundle date into a date object.

    Accepts ISO days ("2024-01-15"), ISO timestamps ("2024-01-15T08:30:00Z",
    only the day is kept) and anything else dateutil understands.

    Args:
        value: Date string or date

    Returns:
        Date object

    Raises:
        ValueError: If the value cannot be parsed
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if value is None or not str(value).strip():
        raise ValueError("Empty date string")

    date_str = str(value).strip()
    try:
        return date.fromisoformat(date_str[:10])
    except ValueError:
        pass

    try:
        return date_parser.parse(date_str).date()
    except (ValueError, TypeError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}")
