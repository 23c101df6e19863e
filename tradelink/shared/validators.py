"""Shared validation utilities"""

import re
from typing import Optional

HHMM_PATTERN = re.compile(r"^([01][0-9]|2[0-3]):[0-5][0-9]$")

USER_ROLES = ("realtor", "contractor")


def validate_hhmm(value: str) -> str:
    """
    Validate a 24h wall-clock time.

    Args:
        value: Time string such as "09:30"

    Returns:
        The stripped time string

    Raises:
        ValueError: If the value is not HH:MM between 00:00 and 23:59
    """
    if not isinstance(value, str) or not HHMM_PATTERN.match(value.strip()):
        raise ValueError("Time must be in HH:MM format (00:00-23:59)")
    return value.strip()


def validate_working_days(days: list[int]) -> list[int]:
    """
    Validate a set of weekday integers (0=Sunday..6=Saturday).

    Returns:
        Sorted, de-duplicated weekdays

    Raises:
        ValueError: If any day is outside 0..6
    """
    for day in days:
        if not isinstance(day, int) or isinstance(day, bool) or not 0 <= day <= 6:
            raise ValueError("Working days must be integers between 0 (Sunday) and 6 (Saturday)")
    return sorted(set(days))


def validate_role(role: str) -> str:
    """Validate and normalize a user role"""
    normalized = (role or "").strip().lower()
    if normalized not in USER_ROLES:
        raise ValueError(f"Role must be one of: {', '.join(USER_ROLES)}")
    return normalized


def validate_email(email: Optional[str]) -> Optional[str]:
    """
    Validate email format.

    Args:
        email: Email address string

    Returns:
        Lowercase email address

    Raises:
        ValueError: If email format is invalid
    """
    if not email:
        return email

    email = email.strip().lower()

    # Basic email validation pattern
    email_pattern = r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$"

    if not re.match(email_pattern, email):
        raise ValueError("Invalid email format")

    return email
