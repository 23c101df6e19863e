"""Scheduling router - FastAPI endpoints for contractor availability and meetings"""

import logging
from datetime import date, datetime
from typing import Callable, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...database import get_db
from ...models import BookedSlot, MeetingRequest
from .schemas import (
    AcceptResponse,
    AvailabilityResponse,
    AvailabilityUpdate,
    AvailableSlotsResponse,
    BookedSlotResponse,
    BookingResponse,
    MeetingRequestCreate,
    MeetingRequestResponse,
    NotesUpdate,
    ScheduleEntryResponse,
)
from .service import SchedulingService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/contractors/{contractor_id}", tags=["Scheduling"])


def get_clock() -> Callable[[], datetime]:
    """Clock used for past-slot cut-off and booking horizon"""
    return datetime.now


def get_scheduling_service(
    db: Session = Depends(get_db), clock: Callable[[], datetime] = Depends(get_clock)
) -> SchedulingService:
    """Dependency injection for SchedulingService"""
    return SchedulingService(db, clock)


def _booked_slot_response(slot: BookedSlot) -> BookedSlotResponse:
    return BookedSlotResponse(
        date=slot.date,
        startTime=slot.start_time,
        endTime=slot.end_time,
        realtorId=slot.realtor_id,
        status=slot.status,
        notes=slot.notes or "",
        requestId=slot.request_id,
    )


def _meeting_request_response(request: MeetingRequest) -> MeetingRequestResponse:
    return MeetingRequestResponse(
        id=request.id,
        contractorId=request.contractor_id,
        realtorId=request.realtor_id,
        date=request.date,
        startTime=request.start_time,
        endTime=request.end_time,
        status=request.status,
        notes=request.notes or "",
        createdAt=request.created_at,
        respondedAt=request.responded_at,
    )


# ============================================================================
# AVAILABILITY
# ============================================================================


@router.get("/availability", response_model=AvailabilityResponse)
async def get_availability(
    contractor_id: str,
    service: SchedulingService = Depends(get_scheduling_service),
):
    """Get working hours, working days, meeting duration and booked slots"""
    return service.get_availability(contractor_id)


@router.put("/availability", response_model=AvailabilityResponse)
async def update_availability(
    contractor_id: str,
    data: AvailabilityUpdate,
    service: SchedulingService = Depends(get_scheduling_service),
):
    """Replace the contractor's recurring availability"""
    return service.update_availability(contractor_id, data)


@router.get("/slots", response_model=AvailableSlotsResponse)
async def get_available_slots(
    contractor_id: str,
    date: date = Query(..., description="Calendar date (YYYY-MM-DD)"),
    service: SchedulingService = Depends(get_scheduling_service),
):
    """Bookable start times for a date"""
    slots = service.get_available_slots(contractor_id, date)
    return AvailableSlotsResponse(contractorId=contractor_id, date=date, slots=slots)


# ============================================================================
# MEETING REQUESTS
# ============================================================================


@router.post("/meeting-requests", response_model=MeetingRequestResponse, status_code=201)
async def propose_meeting(
    contractor_id: str,
    data: MeetingRequestCreate,
    service: SchedulingService = Depends(get_scheduling_service),
):
    """Realtor proposes a meeting in one of the contractor's free slots"""
    request = service.propose_meeting(contractor_id, data)
    return _meeting_request_response(request)


@router.post("/bookings", response_model=BookingResponse, status_code=201)
async def book_meeting(
    contractor_id: str,
    data: MeetingRequestCreate,
    service: SchedulingService = Depends(get_scheduling_service),
):
    """Realtor books a free slot directly (request is accepted immediately)"""
    slot = service.book_meeting(contractor_id, data)
    return BookingResponse(message="Meeting booked", bookedSlot=_booked_slot_response(slot))


@router.get("/meeting-requests", response_model=list[MeetingRequestResponse])
async def list_meeting_requests(
    contractor_id: str,
    status: Optional[str] = Query(None, description="Filter by request status"),
    service: SchedulingService = Depends(get_scheduling_service),
):
    """Pending and declined meeting requests"""
    return [
        _meeting_request_response(r) for r in service.list_meeting_requests(contractor_id, status)
    ]


@router.get("/meeting-requests/{request_id}", response_model=MeetingRequestResponse)
async def get_meeting_request(
    contractor_id: str,
    request_id: str,
    service: SchedulingService = Depends(get_scheduling_service),
):
    return _meeting_request_response(service.get_meeting_request(contractor_id, request_id))


@router.post("/meeting-requests/{request_id}/accept", response_model=AcceptResponse)
async def accept_meeting_request(
    contractor_id: str,
    request_id: str,
    service: SchedulingService = Depends(get_scheduling_service),
):
    """Contractor accepts a pending request"""
    slot = service.accept_request(contractor_id, request_id)
    return AcceptResponse(
        message="Meeting request accepted",
        requestId=request_id,
        bookedSlot=_booked_slot_response(slot),
    )


@router.post("/meeting-requests/{request_id}/decline", response_model=MeetingRequestResponse)
async def decline_meeting_request(
    contractor_id: str,
    request_id: str,
    service: SchedulingService = Depends(get_scheduling_service),
):
    """Contractor declines a pending request"""
    return _meeting_request_response(service.decline_request(contractor_id, request_id))


@router.patch("/meeting-requests/{request_id}/notes", response_model=MeetingRequestResponse)
async def update_meeting_request_notes(
    contractor_id: str,
    request_id: str,
    data: NotesUpdate,
    service: SchedulingService = Depends(get_scheduling_service),
):
    request = service.update_request_notes(contractor_id, request_id, data.notes)
    return _meeting_request_response(request)


# ============================================================================
# BOOKED SLOTS & SCHEDULE
# ============================================================================


@router.get("/booked-slots", response_model=list[BookedSlotResponse])
async def list_booked_slots(
    contractor_id: str,
    service: SchedulingService = Depends(get_scheduling_service),
):
    """Confirmed upcoming meetings"""
    return [_booked_slot_response(s) for s in service.list_booked_slots(contractor_id)]


@router.patch("/booked-slots/{slot_date}/{start_time}/notes", response_model=BookedSlotResponse)
async def update_booked_slot_notes(
    contractor_id: str,
    slot_date: str,
    start_time: str,
    data: NotesUpdate,
    service: SchedulingService = Depends(get_scheduling_service),
):
    """Update notes on a confirmed slot identified by date and start time"""
    slot = service.update_booked_slot_notes(contractor_id, slot_date, start_time, data.notes)
    return _booked_slot_response(slot)


@router.get("/schedule", response_model=list[ScheduleEntryResponse])
async def get_schedule(
    contractor_id: str,
    service: SchedulingService = Depends(get_scheduling_service),
):
    """Requests and confirmed meetings merged in chronological order"""
    return [
        ScheduleEntryResponse(
            date=e.date,
            startTime=e.start_time,
            endTime=e.end_time,
            realtorId=e.realtor_id,
            status=e.status,
            notes=e.notes,
            requestId=e.request_id,
        )
        for e in service.get_schedule(contractor_id)
    ]


__all__ = [
    "router",
    "get_clock",
    "get_scheduling_service",
]
