"""Approval service - the meeting request lifecycle (pending -> accepted | declined)"""

import logging
from dataclasses import replace
from datetime import date, datetime, timedelta
from typing import Optional

from .entities import (
    CONFIRMED,
    BookedSlot,
    ContractorCalendar,
    LifecycleOutcome,
    LifecycleResult,
    RequestStatus,
    ScheduleEntry,
)
from .time_calculator import parse_hhmm

logger = logging.getLogger(__name__)


def _not_found(calendar: ContractorCalendar, what: str) -> LifecycleResult:
    return LifecycleResult(
        outcome=LifecycleOutcome.NOT_FOUND, calendar=calendar, message=f"{what} not found"
    )


def _starts_at(on_date: date, start_time: str) -> datetime:
    return datetime.combine(on_date, datetime.min.time()) + timedelta(minutes=parse_hhmm(start_time))


def accept_request(
    calendar: ContractorCalendar, request_id: str, now: Optional[datetime] = None
) -> LifecycleResult:
    """
    Promote a pending request into a confirmed booked slot.

    The request leaves the pending collection and a booked slot with the same
    date, times, realtor and notes is added. Accepting an id that was already
    accepted reports NOT_FOUND, since the request no longer exists. If the slot
    was booked in the meantime the outcome is CONFLICT and nothing changes.
    When `now` is given, a request whose start time has already passed is
    INVALID_STATE; it can only be declined.
    """
    request = calendar.find_request(request_id)
    if request is None:
        return _not_found(calendar, "Meeting request")

    if request.status != RequestStatus.PENDING:
        return LifecycleResult(
            outcome=LifecycleOutcome.INVALID_STATE,
            calendar=calendar,
            request=request,
            message=f"Meeting request is '{request.status.value}', not pending",
        )

    if now is not None and _starts_at(request.date, request.start_time) <= now:
        return LifecycleResult(
            outcome=LifecycleOutcome.INVALID_STATE,
            calendar=calendar,
            request=request,
            message="Meeting time has already passed",
        )

    if calendar.find_booked_slot(request.date, request.start_time) is not None:
        logger.warning(
            f"⚠️ Slot {request.date.isoformat()} {request.start_time} already booked "
            f"for contractor {calendar.contractor_id}"
        )
        return LifecycleResult(
            outcome=LifecycleOutcome.CONFLICT,
            calendar=calendar,
            request=request,
            message="Slot is already booked",
        )

    booked = BookedSlot(
        date=request.date,
        start_time=request.start_time,
        end_time=request.end_time,
        realtor_id=request.realtor_id,
        status=CONFIRMED,
        notes=request.notes,
        request_id=request.id,
    )
    availability = replace(
        calendar.availability, booked_slots=calendar.availability.booked_slots + (booked,)
    )
    remaining = tuple(r for r in calendar.meeting_requests if r.id != request_id)

    logger.info(f"✅ Meeting request {request_id} accepted by contractor {calendar.contractor_id}")
    return LifecycleResult(
        outcome=LifecycleOutcome.OK,
        calendar=replace(calendar, availability=availability, meeting_requests=remaining),
        request=replace(request, status=RequestStatus.ACCEPTED),
        booked_slot=booked,
    )


def decline_request(calendar: ContractorCalendar, request_id: str) -> LifecycleResult:
    """Mark a pending request declined. It stays in the collection for history."""
    request = calendar.find_request(request_id)
    if request is None:
        return _not_found(calendar, "Meeting request")

    if request.status != RequestStatus.PENDING:
        return LifecycleResult(
            outcome=LifecycleOutcome.INVALID_STATE,
            calendar=calendar,
            request=request,
            message=f"Meeting request is '{request.status.value}', not pending",
        )

    declined = replace(request, status=RequestStatus.DECLINED)
    requests = tuple(declined if r.id == request_id else r for r in calendar.meeting_requests)

    logger.info(f"🚫 Meeting request {request_id} declined by contractor {calendar.contractor_id}")
    return LifecycleResult(
        outcome=LifecycleOutcome.OK,
        calendar=replace(calendar, meeting_requests=requests),
        request=declined,
    )


def update_request_notes(calendar: ContractorCalendar, request_id: str, text: str) -> LifecycleResult:
    request = calendar.find_request(request_id)
    if request is None:
        return _not_found(calendar, "Meeting request")

    updated = replace(request, notes=text or "")
    requests = tuple(updated if r.id == request_id else r for r in calendar.meeting_requests)
    return LifecycleResult(
        outcome=LifecycleOutcome.OK,
        calendar=replace(calendar, meeting_requests=requests),
        request=updated,
    )


def update_booked_slot_notes(
    calendar: ContractorCalendar, slot_date: date, start_time: str, text: str
) -> LifecycleResult:
    """Notes are the only mutable field of a confirmed slot, keyed by (date, start_time)."""
    slot = calendar.find_booked_slot(slot_date, start_time)
    if slot is None:
        return _not_found(calendar, "Booked slot")

    updated = replace(slot, notes=text or "")
    slots = tuple(
        updated if s.key == slot.key else s for s in calendar.availability.booked_slots
    )
    return LifecycleResult(
        outcome=LifecycleOutcome.OK,
        calendar=replace(calendar, availability=replace(calendar.availability, booked_slots=slots)),
        booked_slot=updated,
    )


def list_schedule(calendar: ContractorCalendar) -> list[ScheduleEntry]:
    """Requests and confirmed slots merged, ordered by (date, start_time)."""
    entries = [
        ScheduleEntry(
            date=r.date,
            start_time=r.start_time,
            end_time=r.end_time,
            realtor_id=r.realtor_id,
            status=r.status.value,
            notes=r.notes,
            request_id=r.id,
        )
        for r in calendar.meeting_requests
    ]
    entries.extend(
        ScheduleEntry(
            date=s.date,
            start_time=s.start_time,
            end_time=s.end_time,
            realtor_id=s.realtor_id,
            status=s.status,
            notes=s.notes,
            request_id=s.request_id,
        )
        for s in calendar.availability.booked_slots
    )
    return sorted(entries, key=lambda e: (e.date, e.start_time))
