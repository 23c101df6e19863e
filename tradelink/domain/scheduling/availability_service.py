"""Availability service - slot generation from recurring working hours"""

from datetime import date, datetime
from typing import Optional

from .entities import Availability
from .exceptions import InvalidAvailabilityError, InvalidTimeError
from .time_calculator import MINUTES_PER_DAY, format_hhmm, parse_hhmm, weekday_index


def validate_availability(availability: Availability) -> Availability:
    """
    Check that an availability record can generate slots.

    Raises:
        InvalidAvailabilityError: If hours, days or duration are inconsistent
    """
    try:
        start = parse_hhmm(availability.working_hours.start)
        end = parse_hhmm(availability.working_hours.end)
    except InvalidTimeError as e:
        raise InvalidAvailabilityError(str(e)) from None

    if start >= end:
        raise InvalidAvailabilityError("Working hours start must be before end")
    if availability.meeting_duration <= 0:
        raise InvalidAvailabilityError("Meeting duration must be a positive number of minutes")
    if any(not 0 <= day <= 6 for day in availability.working_days):
        raise InvalidAvailabilityError("Working days must be between 0 (Sunday) and 6 (Saturday)")
    return availability


def compute_available_slots(
    availability: Availability, on_date: date, now: Optional[datetime] = None
) -> list[str]:
    """
    Free slot start times (HH:MM, ascending) for a single date.

    Walks the working-hours window in meeting-duration steps and drops any start
    time that already has a booked slot on the same calendar day. Starts whose
    meeting would run to or past midnight are not offered. Returns an
    empty list when the date's weekday is not a working day.

    Args:
        availability: The contractor's availability record
        on_date: Calendar date to compute slots for
        now: Caller's clock. When given, past dates yield nothing and slots on
            today's date that have already started are dropped. When omitted no
            cut-off is applied.

    Returns:
        Ordered list of bookable start times
    """
    if weekday_index(on_date) not in availability.working_days:
        return []

    if now is not None and on_date < now.date():
        return []

    start = parse_hhmm(availability.working_hours.start)
    end = parse_hhmm(availability.working_hours.end)
    duration = availability.meeting_duration
    if duration <= 0:
        raise InvalidAvailabilityError("Meeting duration must be a positive number of minutes")

    booked_starts = {
        slot.start_time for slot in availability.booked_slots if slot.date == on_date
    }

    cutoff = None
    if now is not None and on_date == now.date():
        cutoff = now.hour * 60 + now.minute

    slots = []
    current = start
    # A meeting has to finish on the day it starts
    while current < end and current + duration < MINUTES_PER_DAY:
        formatted = format_hhmm(current)
        if formatted not in booked_starts and (cutoff is None or current > cutoff):
            slots.append(formatted)
        current += duration

    return slots


def is_slot_available(
    availability: Availability, on_date: date, start_time: str, now: Optional[datetime] = None
) -> bool:
    """True when start_time is one of the currently free slots for on_date"""
    return start_time in compute_available_slots(availability, on_date, now)
