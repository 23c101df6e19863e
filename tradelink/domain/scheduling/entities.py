"""Plain scheduling values the availability and lifecycle logic operates on."""

from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Optional


class RequestStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    DECLINED = "declined"


class LifecycleOutcome(str, Enum):
    OK = "ok"
    NOT_FOUND = "not_found"
    INVALID_STATE = "invalid_state"
    CONFLICT = "conflict"


CONFIRMED = "confirmed"


@dataclass(frozen=True)
class WorkingHours:
    start: str  # HH:MM
    end: str  # HH:MM


@dataclass(frozen=True)
class BookedSlot:
    """A confirmed meeting on a contractor's calendar, unique per (date, start_time)."""
    date: date
    start_time: str
    end_time: str
    realtor_id: str
    status: str = CONFIRMED
    notes: str = ""
    request_id: Optional[str] = None

    @property
    def key(self) -> tuple[date, str]:
        return (self.date, self.start_time)


@dataclass(frozen=True)
class MeetingRequest:
    """A proposed meeting awaiting the contractor's decision."""
    id: str
    realtor_id: str
    date: date
    start_time: str
    end_time: str
    status: RequestStatus = RequestStatus.PENDING
    notes: str = ""


@dataclass(frozen=True)
class Availability:
    working_hours: WorkingHours
    working_days: frozenset[int]  # 0=Sunday..6=Saturday
    meeting_duration: int  # minutes
    booked_slots: tuple[BookedSlot, ...] = ()


@dataclass(frozen=True)
class ContractorCalendar:
    """Everything the lifecycle needs for one contractor: availability plus open requests."""
    contractor_id: str
    availability: Availability
    meeting_requests: tuple[MeetingRequest, ...] = ()

    def find_request(self, request_id: str) -> Optional[MeetingRequest]:
        for request in self.meeting_requests:
            if request.id == request_id:
                return request
        return None

    def find_booked_slot(self, slot_date: date, start_time: str) -> Optional[BookedSlot]:
        for slot in self.availability.booked_slots:
            if slot.key == (slot_date, start_time):
                return slot
        return None


@dataclass(frozen=True)
class LifecycleResult:
    """Outcome of a lifecycle operation; `calendar` is the updated calendar when outcome is OK."""
    outcome: LifecycleOutcome
    calendar: ContractorCalendar
    request: Optional[MeetingRequest] = None
    booked_slot: Optional[BookedSlot] = None
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.outcome == LifecycleOutcome.OK


@dataclass(frozen=True)
class ScheduleEntry:
    """One row of the merged schedule view (pending/declined requests and confirmed slots)."""
    date: date
    start_time: str
    end_time: str
    realtor_id: str
    status: str
    notes: str
    request_id: Optional[str] = None
