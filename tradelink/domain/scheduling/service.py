"""Scheduling service - Business logic for availability, meeting requests and bookings"""

import logging
from datetime import date, datetime
from typing import Callable, Optional

from fastapi import HTTPException
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from ...config import (
    DEFAULT_MEETING_DURATION,
    DEFAULT_WORKING_DAYS,
    DEFAULT_WORKING_HOURS_END,
    DEFAULT_WORKING_HOURS_START,
    MAX_BOOKING_DAYS_AHEAD,
)
from ...models import Availability as AvailabilityRow
from ...models import BookedSlot as BookedSlotRow
from ...models import MeetingRequest as MeetingRequestRow
from ...models import User
from . import approval_service, proposal_service
from .availability_service import compute_available_slots, validate_availability
from .entities import (
    Availability,
    ContractorCalendar,
    LifecycleOutcome,
    LifecycleResult,
    RequestStatus,
    ScheduleEntry,
    WorkingHours,
)
from .exceptions import (
    DuplicateRequestError,
    InvalidAvailabilityError,
    InvalidTimeError,
    SlotUnavailableError,
)
from .repository import SchedulingRepository
from .schemas import AvailabilityUpdate, MeetingRequestCreate
from .time_calculator import normalize_calendar_date, parse_hhmm

logger = logging.getLogger(__name__)

OUTCOME_STATUS_CODES = {
    LifecycleOutcome.NOT_FOUND: 404,
    LifecycleOutcome.INVALID_STATE: 400,
    LifecycleOutcome.CONFLICT: 409,
}


def default_availability_data() -> dict:
    """Column values for a contractor who has not configured availability yet"""
    return {
        "working_hours_start": DEFAULT_WORKING_HOURS_START,
        "working_hours_end": DEFAULT_WORKING_HOURS_END,
        "working_days": list(DEFAULT_WORKING_DAYS),
        "meeting_duration": DEFAULT_MEETING_DURATION,
    }


class SchedulingService:
    """Service layer for scheduling business logic"""

    def __init__(self, db: Session, clock: Callable[[], datetime] = datetime.now):
        self.db = db
        self.clock = clock
        self.repo = SchedulingRepository()

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def get_contractor(self, contractor_id: str) -> User:
        user = self.repo.get_user(self.db, contractor_id)
        if not user or user.role != "contractor":
            raise HTTPException(status_code=404, detail="Contractor not found")
        return user

    def get_realtor(self, realtor_id: str) -> User:
        user = self.repo.get_user(self.db, realtor_id)
        if not user:
            raise HTTPException(status_code=404, detail="Realtor not found")
        if user.role != "realtor":
            raise HTTPException(status_code=400, detail="Only realtors can request meetings")
        return user

    def ensure_availability(self, contractor: User) -> AvailabilityRow:
        """Get the contractor's availability row, creating the default one if missing"""
        availability = self.repo.get_availability(self.db, contractor.id)
        if availability:
            return availability

        logger.info(f"📅 Creating default availability for contractor {contractor.id}")
        return self.repo.create_availability(self.db, contractor.id, **default_availability_data())

    def load_calendar(self, contractor_id: str) -> ContractorCalendar:
        contractor = self.get_contractor(contractor_id)
        self.ensure_availability(contractor)
        return self.repo.load_calendar(self.db, contractor_id)

    # ------------------------------------------------------------------
    # Availability
    # ------------------------------------------------------------------

    def get_availability(self, contractor_id: str) -> dict:
        calendar = self.load_calendar(contractor_id)
        return self._availability_response(calendar)

    def update_availability(self, contractor_id: str, data: AvailabilityUpdate) -> dict:
        """Replace working hours, working days and meeting duration"""
        contractor = self.get_contractor(contractor_id)
        availability = self.ensure_availability(contractor)

        candidate = Availability(
            working_hours=WorkingHours(start=data.workingHours.start, end=data.workingHours.end),
            working_days=frozenset(data.workingDays),
            meeting_duration=data.meetingDuration,
        )
        try:
            validate_availability(candidate)
        except InvalidAvailabilityError as e:
            raise HTTPException(status_code=400, detail=str(e)) from None

        self.repo.update_availability(
            self.db,
            availability,
            working_hours_start=data.workingHours.start,
            working_hours_end=data.workingHours.end,
            working_days=list(data.workingDays),
            meeting_duration=data.meetingDuration,
        )
        logger.info(f"✅ Availability updated for contractor {contractor_id}")
        return self._availability_response(self.repo.load_calendar(self.db, contractor_id))

    def get_available_slots(self, contractor_id: str, on_date: date) -> list[str]:
        calendar = self.load_calendar(contractor_id)
        try:
            return compute_available_slots(calendar.availability, on_date, now=self.clock())
        except (InvalidTimeError, InvalidAvailabilityError) as e:
            logger.error(f"❌ Availability for contractor {contractor_id} is invalid: {e}")
            raise HTTPException(status_code=400, detail=str(e)) from None

    # ------------------------------------------------------------------
    # Meeting requests
    # ------------------------------------------------------------------

    def propose_meeting(self, contractor_id: str, data: MeetingRequestCreate) -> MeetingRequestRow:
        """Create a pending meeting request for a free slot"""
        calendar = self.load_calendar(contractor_id)
        realtor = self.get_realtor(data.realtorId)

        try:
            _, request = proposal_service.propose_meeting(
                calendar,
                data.date,
                data.startTime,
                realtor.id,
                notes=data.notes or "",
                now=self.clock(),
                max_days_ahead=MAX_BOOKING_DAYS_AHEAD,
            )
        except SlotUnavailableError as e:
            logger.warning(f"⚠️ Proposal rejected for contractor {contractor_id}: {e}")
            raise HTTPException(status_code=409, detail=f"Slot no longer available. {e}") from None
        except DuplicateRequestError as e:
            raise HTTPException(status_code=409, detail=str(e)) from None
        except InvalidTimeError as e:
            raise HTTPException(status_code=400, detail=str(e)) from None

        return self.repo.create_meeting_request(self.db, contractor_id, request)

    def book_meeting(self, contractor_id: str, data: MeetingRequestCreate) -> BookedSlotRow:
        """Direct booking shortcut: a request that is accepted straight away"""
        calendar = self.load_calendar(contractor_id)
        realtor = self.get_realtor(data.realtorId)

        try:
            result = proposal_service.book_meeting(
                calendar,
                data.date,
                data.startTime,
                realtor.id,
                notes=data.notes or "",
                now=self.clock(),
                max_days_ahead=MAX_BOOKING_DAYS_AHEAD,
            )
        except SlotUnavailableError as e:
            logger.warning(f"⚠️ Direct booking rejected for contractor {contractor_id}: {e}")
            raise HTTPException(status_code=409, detail=f"Slot no longer available. {e}") from None
        except DuplicateRequestError as e:
            raise HTTPException(status_code=409, detail=str(e)) from None
        except InvalidTimeError as e:
            raise HTTPException(status_code=400, detail=str(e)) from None

        self._raise_for_outcome(result)
        return self._persist_booking(contractor_id, result)

    def list_meeting_requests(
        self, contractor_id: str, status: Optional[str] = None
    ) -> list[MeetingRequestRow]:
        self.get_contractor(contractor_id)
        if status and status not in (RequestStatus.PENDING.value, RequestStatus.DECLINED.value):
            raise HTTPException(status_code=400, detail="Status filter must be 'pending' or 'declined'")
        return self.repo.get_meeting_requests(self.db, contractor_id, status)

    def get_meeting_request(self, contractor_id: str, request_id: str) -> MeetingRequestRow:
        self.get_contractor(contractor_id)
        request = self.repo.get_meeting_request(self.db, contractor_id, request_id)
        if not request:
            raise HTTPException(status_code=404, detail="Meeting request not found")
        return request

    def accept_request(self, contractor_id: str, request_id: str) -> BookedSlotRow:
        """Contractor accepts a pending request; it becomes a confirmed slot"""
        calendar = self.load_calendar(contractor_id)
        result = approval_service.accept_request(calendar, request_id, now=self.clock())
        self._raise_for_outcome(result)
        return self._persist_booking(contractor_id, result)

    def decline_request(self, contractor_id: str, request_id: str) -> MeetingRequestRow:
        calendar = self.load_calendar(contractor_id)
        result = approval_service.decline_request(calendar, request_id)
        self._raise_for_outcome(result)

        row = self.repo.get_meeting_request(self.db, contractor_id, request_id)
        return self.repo.set_request_status(self.db, row, RequestStatus.DECLINED)

    def update_request_notes(self, contractor_id: str, request_id: str, notes: str) -> MeetingRequestRow:
        calendar = self.load_calendar(contractor_id)
        result = approval_service.update_request_notes(calendar, request_id, notes)
        self._raise_for_outcome(result)

        row = self.repo.get_meeting_request(self.db, contractor_id, request_id)
        return self.repo.set_notes(self.db, row, result.request.notes)

    # ------------------------------------------------------------------
    # Booked slots
    # ------------------------------------------------------------------

    def list_booked_slots(self, contractor_id: str) -> list[BookedSlotRow]:
        self.get_contractor(contractor_id)
        return self.repo.get_booked_slots(self.db, contractor_id)

    def update_booked_slot_notes(
        self, contractor_id: str, slot_date: str, start_time: str, notes: str
    ) -> BookedSlotRow:
        """Notes are the only editable field of a confirmed slot"""
        try:
            on_date = normalize_calendar_date(slot_date)
            parse_hhmm(start_time)
        except InvalidTimeError as e:
            raise HTTPException(status_code=400, detail=str(e)) from None

        calendar = self.load_calendar(contractor_id)
        result = approval_service.update_booked_slot_notes(calendar, on_date, start_time, notes)
        self._raise_for_outcome(result)

        row = self.repo.get_booked_slot(self.db, contractor_id, on_date, start_time)
        return self.repo.set_notes(self.db, row, result.booked_slot.notes)

    def get_schedule(self, contractor_id: str) -> list[ScheduleEntry]:
        calendar = self.load_calendar(contractor_id)
        return approval_service.list_schedule(calendar)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _persist_booking(self, contractor_id: str, result: LifecycleResult) -> BookedSlotRow:
        availability = self.repo.get_availability(self.db, contractor_id)
        try:
            row = self.repo.promote_request(self.db, availability, contractor_id, result.booked_slot)
        except (IntegrityError, StaleDataError) as e:
            self.db.rollback()
            logger.warning(
                f"⚠️ Concurrent booking for contractor {contractor_id} on "
                f"{result.booked_slot.date.isoformat()} {result.booked_slot.start_time}: {e}"
            )
            raise HTTPException(status_code=409, detail="Slot no longer available") from None

        logger.info(
            f"✅ Slot {row.date.isoformat()} {row.start_time} confirmed for contractor {contractor_id}"
        )
        return row

    @staticmethod
    def _raise_for_outcome(result: LifecycleResult) -> None:
        if result.ok:
            return
        raise HTTPException(
            status_code=OUTCOME_STATUS_CODES.get(result.outcome, 400), detail=result.message
        )

    @staticmethod
    def _availability_response(calendar: ContractorCalendar) -> dict:
        availability = calendar.availability
        return {
            "contractorId": calendar.contractor_id,
            "workingHours": {
                "start": availability.working_hours.start,
                "end": availability.working_hours.end,
            },
            "workingDays": sorted(availability.working_days),
            "meetingDuration": availability.meeting_duration,
            "bookedSlots": [
                {
                    "date": slot.date,
                    "startTime": slot.start_time,
                    "endTime": slot.end_time,
                    "realtorId": slot.realtor_id,
                    "status": slot.status,
                    "notes": slot.notes,
                    "requestId": slot.request_id,
                }
                for slot in availability.booked_slots
            ],
        }
