"""Shared validation utilities"""

import re
from datetime import date, datetime, time
from typing import Optional


def validate_phone(phone: Optional[str]) -> Optional[str]:
    """
    Validate an international phone number and normalize it to E.164.

    Spaces, dashes, dots and parentheses are stripped; a leading ``00`` is
    read as ``+``. Between 8 and 15 digits are accepted.

    Raises:
        ValueError: If phone number is invalid
    """
    if not phone:
        return phone

    cleaned = re.sub(r"[\s\-().]", "", phone.strip())
    if cleaned.startswith("00"):
        cleaned = "+" + cleaned[2:]

    digits = cleaned[1:] if cleaned.startswith("+") else cleaned
    if not digits.isdigit() or not 8 <= len(digits) <= 15:
        raise ValueError("Invalid phone number")

    return f"+{digits}" if cleaned.startswith("+") else digits


def parse_clock_time(value) -> time:
    """
    Parse a wall-clock time given as "HH:MM" or "HH:MM:SS"; seconds are dropped.

    Raises:
        ValueError: If the value is not a valid 24h time
    """
    if isinstance(value, time):
        return value.replace(second=0, microsecond=0)
    if not isinstance(value, str):
        raise ValueError("Time must be a string in HH:MM format")

    for fmt in ("%H:%M", "%H:%M:%S"):
        try:
            return datetime.strptime(value.strip(), fmt).time().replace(second=0)
        except ValueError:
            continue
    raise ValueError("Invalid time format. Expected HH:MM")


def parse_calendar_date(value) -> date:
    """Parse a calendar date given as YYYY-MM-DD."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        raise ValueError("Date must be a string in YYYY-MM-DD format")
    try:
        return datetime.strptime(value.strip(), "%Y-%m-%d").date()
    except ValueError:
        raise ValueError("Invalid date format. Expected YYYY-MM-DD") from None
