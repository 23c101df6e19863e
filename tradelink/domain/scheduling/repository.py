"""Scheduling repository - Database operations for availability, requests and bookings"""

import logging
from datetime import date
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from ...models import Availability as AvailabilityRow
from ...models import BookedSlot as BookedSlotRow
from ...models import MeetingRequest as MeetingRequestRow
from ...models import User
from .entities import (
    Availability,
    BookedSlot,
    ContractorCalendar,
    MeetingRequest,
    RequestStatus,
    WorkingHours,
)

logger = logging.getLogger(__name__)


class SchedulingRepository:
    """Repository for scheduling database operations"""

    @staticmethod
    def get_user(db: Session, user_id: str) -> Optional[User]:
        return db.query(User).filter(User.id == user_id).first()

    @staticmethod
    def get_availability(db: Session, contractor_id: str) -> Optional[AvailabilityRow]:
        """Get the availability row for a contractor"""
        return db.query(AvailabilityRow).filter(AvailabilityRow.contractor_id == contractor_id).first()

    @staticmethod
    def create_availability(db: Session, contractor_id: str, **availability_data) -> AvailabilityRow:
        availability = AvailabilityRow(contractor_id=contractor_id, **availability_data)
        db.add(availability)
        db.commit()
        db.refresh(availability)
        return availability

    @staticmethod
    def update_availability(db: Session, availability: AvailabilityRow, **updates) -> AvailabilityRow:
        """Update working hours, days or duration"""
        for key, value in updates.items():
            if value is not None and hasattr(availability, key):
                setattr(availability, key, value)

        db.commit()
        db.refresh(availability)
        return availability

    @staticmethod
    def get_booked_slots(
        db: Session, contractor_id: str, on_date: Optional[date] = None
    ) -> list[BookedSlotRow]:
        """Get confirmed slots for a contractor, optionally for one date"""
        query = db.query(BookedSlotRow).filter(BookedSlotRow.contractor_id == contractor_id)

        if on_date:
            query = query.filter(BookedSlotRow.date == on_date)

        return query.order_by(BookedSlotRow.date, BookedSlotRow.start_time).all()

    @staticmethod
    def get_booked_slot(
        db: Session, contractor_id: str, on_date: date, start_time: str
    ) -> Optional[BookedSlotRow]:
        return (
            db.query(BookedSlotRow)
            .filter(
                BookedSlotRow.contractor_id == contractor_id,
                BookedSlotRow.date == on_date,
                BookedSlotRow.start_time == start_time,
            )
            .first()
        )

    @staticmethod
    def get_meeting_requests(
        db: Session, contractor_id: str, status: Optional[str] = None
    ) -> list[MeetingRequestRow]:
        """Get meeting requests with optional status filter"""
        query = db.query(MeetingRequestRow).filter(MeetingRequestRow.contractor_id == contractor_id)

        if status:
            query = query.filter(MeetingRequestRow.status == status)

        return query.order_by(
            MeetingRequestRow.date, MeetingRequestRow.start_time, MeetingRequestRow.created_at
        ).all()

    @staticmethod
    def get_meeting_request(
        db: Session, contractor_id: str, request_id: str
    ) -> Optional[MeetingRequestRow]:
        return (
            db.query(MeetingRequestRow)
            .filter(
                MeetingRequestRow.id == request_id,
                MeetingRequestRow.contractor_id == contractor_id,
            )
            .first()
        )

    @staticmethod
    def create_meeting_request(
        db: Session, contractor_id: str, request: MeetingRequest
    ) -> MeetingRequestRow:
        row = MeetingRequestRow(
            id=request.id,
            contractor_id=contractor_id,
            realtor_id=request.realtor_id,
            date=request.date,
            start_time=request.start_time,
            end_time=request.end_time,
            status=request.status.value,
            notes=request.notes,
        )
        db.add(row)
        db.commit()
        db.refresh(row)
        return row

    @staticmethod
    def promote_request(
        db: Session,
        availability: AvailabilityRow,
        contractor_id: str,
        booked: BookedSlot,
    ) -> BookedSlotRow:
        """
        Insert the confirmed slot and drop its pending request in one transaction.

        Touching the availability row bumps its version, so a concurrent promotion
        for the same contractor fails with StaleDataError. A second booking of the
        same (date, start_time) fails on the unique constraint with IntegrityError.
        The caller is responsible for rolling back on either error.
        """
        if booked.request_id:
            db.query(MeetingRequestRow).filter(
                MeetingRequestRow.id == booked.request_id,
                MeetingRequestRow.contractor_id == contractor_id,
            ).delete(synchronize_session=False)

        row = BookedSlotRow(
            contractor_id=contractor_id,
            realtor_id=booked.realtor_id,
            date=booked.date,
            start_time=booked.start_time,
            end_time=booked.end_time,
            status=booked.status,
            notes=booked.notes,
            request_id=booked.request_id,
        )
        db.add(row)
        availability.updated_at = func.now()

        db.commit()
        db.refresh(row)
        return row

    @staticmethod
    def set_request_status(
        db: Session, request: MeetingRequestRow, status: RequestStatus
    ) -> MeetingRequestRow:
        request.status = status.value
        request.responded_at = func.now()
        db.commit()
        db.refresh(request)
        return request

    @staticmethod
    def set_notes(db: Session, row, notes: str):
        """Update notes on a meeting request or booked slot row"""
        row.notes = notes
        db.commit()
        db.refresh(row)
        return row

    # Conversion to plain scheduling values
    @staticmethod
    def to_booked_slot(row: BookedSlotRow) -> BookedSlot:
        return BookedSlot(
            date=row.date,
            start_time=row.start_time,
            end_time=row.end_time,
            realtor_id=row.realtor_id,
            status=row.status,
            notes=row.notes or "",
            request_id=row.request_id,
        )

    @staticmethod
    def to_meeting_request(row: MeetingRequestRow) -> MeetingRequest:
        return MeetingRequest(
            id=row.id,
            realtor_id=row.realtor_id,
            date=row.date,
            start_time=row.start_time,
            end_time=row.end_time,
            status=RequestStatus(row.status),
            notes=row.notes or "",
        )

    @classmethod
    def to_availability(cls, row: AvailabilityRow, booked_rows: list[BookedSlotRow]) -> Availability:
        return Availability(
            working_hours=WorkingHours(start=row.working_hours_start, end=row.working_hours_end),
            working_days=frozenset(row.working_days or []),
            meeting_duration=row.meeting_duration,
            booked_slots=tuple(cls.to_booked_slot(b) for b in booked_rows),
        )

    @classmethod
    def load_calendar(cls, db: Session, contractor_id: str) -> Optional[ContractorCalendar]:
        """Load a contractor's availability, bookings and open requests as plain values"""
        availability = cls.get_availability(db, contractor_id)
        if not availability:
            return None

        booked_rows = cls.get_booked_slots(db, contractor_id)
        request_rows = cls.get_meeting_requests(db, contractor_id)
        return ContractorCalendar(
            contractor_id=contractor_id,
            availability=cls.to_availability(availability, booked_rows),
            meeting_requests=tuple(cls.to_meeting_request(r) for r in request_rows),
        )
