"""Proposal service - realtors proposing meetings against a contractor's free slots"""

import logging
import uuid
from dataclasses import replace
from datetime import date, datetime, timedelta
from typing import Optional

from .approval_service import accept_request
from .availability_service import is_slot_available
from .entities import ContractorCalendar, LifecycleResult, MeetingRequest, RequestStatus
from .exceptions import DuplicateRequestError, SlotUnavailableError
from .time_calculator import add_minutes, parse_hhmm

logger = logging.getLogger(__name__)


def propose_meeting(
    calendar: ContractorCalendar,
    on_date: date,
    start_time: str,
    requester_id: str,
    notes: str = "",
    now: Optional[datetime] = None,
    request_id: Optional[str] = None,
    max_days_ahead: Optional[int] = None,
) -> tuple[ContractorCalendar, MeetingRequest]:
    """
    Create a pending meeting request for one of the contractor's free slots.

    The contractor's booked slots are left untouched; booking only happens when
    the request is accepted. Two different realtors may hold pending requests
    for the same slot, the first acceptance wins.

    Returns:
        (updated calendar, new pending request)

    Raises:
        InvalidTimeError: If start_time is malformed
        SlotUnavailableError: If the slot is not currently free, or too far ahead
        DuplicateRequestError: If the requester already has a pending request for it
    """
    parse_hhmm(start_time)

    if now is not None and max_days_ahead is not None:
        if on_date > now.date() + timedelta(days=max_days_ahead):
            raise SlotUnavailableError(
                f"Meetings can only be booked up to {max_days_ahead} days in advance"
            )

    if not is_slot_available(calendar.availability, on_date, start_time, now):
        raise SlotUnavailableError(f"Slot {on_date.isoformat()} {start_time} is no longer available")

    for existing in calendar.meeting_requests:
        if (
            existing.realtor_id == requester_id
            and existing.status == RequestStatus.PENDING
            and existing.date == on_date
            and existing.start_time == start_time
        ):
            raise DuplicateRequestError(
                f"A pending request for {on_date.isoformat()} {start_time} already exists"
            )

    request = MeetingRequest(
        id=request_id or str(uuid.uuid4()),
        realtor_id=requester_id,
        date=on_date,
        start_time=start_time,
        end_time=add_minutes(start_time, calendar.availability.meeting_duration),
        status=RequestStatus.PENDING,
        notes=notes or "",
    )
    logger.info(
        f"📅 Realtor {requester_id} proposed {on_date.isoformat()} {start_time} "
        f"to contractor {calendar.contractor_id}"
    )
    return replace(calendar, meeting_requests=calendar.meeting_requests + (request,)), request


def book_meeting(
    calendar: ContractorCalendar,
    on_date: date,
    start_time: str,
    requester_id: str,
    notes: str = "",
    now: Optional[datetime] = None,
    request_id: Optional[str] = None,
    max_days_ahead: Optional[int] = None,
) -> LifecycleResult:
    """Direct booking: propose and immediately accept, so the slot still passes through pending."""
    calendar, request = propose_meeting(
        calendar,
        on_date,
        start_time,
        requester_id,
        notes=notes,
        now=now,
        request_id=request_id,
        max_days_ahead=max_days_ahead,
    )
    return accept_request(calendar, request.id, now=now)
