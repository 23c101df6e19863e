"""Scheduling domain errors"""


class SchedulingError(Exception):
    """Base class for scheduling rule violations"""

    pass


class InvalidTimeError(SchedulingError):
    """Raised when a wall-clock time is malformed or not slot-aligned"""

    pass


class InvalidAvailabilityError(SchedulingError):
    """Raised when working hours, days or duration are inconsistent"""

    pass


class SlotUnavailableError(SchedulingError):
    """Raised when the requested (date, start time) is not currently bookable"""

    pass


class DuplicateRequestError(SchedulingError):
    """Raised when a realtor already holds a pending request for the same slot"""

    pass
