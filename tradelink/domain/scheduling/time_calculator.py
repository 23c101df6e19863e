"""Time parsing and calculations for wall-clock slot times"""

from datetime import date, datetime
from typing import Union

from ...shared.validators import validate_hhmm
from .exceptions import InvalidTimeError

MINUTES_PER_DAY = 24 * 60


def parse_hhmm(value: str) -> int:
    """Convert "HH:MM" to minutes since midnight."""
    try:
        value = validate_hhmm(value)
    except ValueError as e:
        raise InvalidTimeError(f"Invalid time '{value}': {e}") from None
    hours, minutes = value.split(":")
    return int(hours) * 60 + int(minutes)


def format_hhmm(minutes: int) -> str:
    if not 0 <= minutes < MINUTES_PER_DAY:
        raise InvalidTimeError(f"{minutes} minutes is outside a single day")
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def add_minutes(value: str, minutes: int) -> str:
    """Add minutes to a wall-clock time; the result must stay on the same day."""
    total = parse_hhmm(value) + minutes
    if total >= MINUTES_PER_DAY:
        raise InvalidTimeError(f"{value} + {minutes} minutes crosses midnight")
    return format_hhmm(total)


def weekday_index(day: date) -> int:
    """Weekday with 0=Sunday..6=Saturday (Python's date.weekday() is 0=Monday)."""
    return (day.weekday() + 1) % 7


def normalize_calendar_date(value: Union[date, datetime, str]) -> date:
    """
    Reduce a date-like value to its calendar day.

    Accepts date objects, datetimes and ISO strings, including full timestamps
    such as "2024-05-14T00:00:00.000Z".
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        try:
            if "T" in text or " " in text:
                return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
            return date.fromisoformat(text)
        except ValueError:
            raise InvalidTimeError(
                f"Invalid date '{value}'. Expected YYYY-MM-DD or an ISO timestamp"
            ) from None
    raise InvalidTimeError(f"Unsupported date value: {value!r}")
