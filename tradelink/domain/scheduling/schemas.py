"""Scheduling domain schemas - Pydantic models for validation"""

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from ...shared.validators import validate_hhmm, validate_working_days
from .exceptions import InvalidTimeError
from .time_calculator import normalize_calendar_date


def _calendar_date(value):
    try:
        return normalize_calendar_date(value)
    except InvalidTimeError as e:
        raise ValueError(str(e)) from None


class WorkingHoursSchema(BaseModel):
    """Daily working window, HH:MM"""

    start: str
    end: str

    @field_validator("start", "end")
    @classmethod
    def validate_time(cls, v):
        return validate_hhmm(v)

    @model_validator(mode="after")
    def validate_window(self):
        if self.start >= self.end:
            raise ValueError("Working hours start must be before end")
        return self


class AvailabilityUpdate(BaseModel):
    """Schema for replacing a contractor's availability settings"""

    workingHours: WorkingHoursSchema
    workingDays: list[int]
    meetingDuration: int = Field(..., gt=0, le=24 * 60)

    @field_validator("workingDays")
    @classmethod
    def validate_days(cls, v):
        return validate_working_days(v)


class BookedSlotResponse(BaseModel):
    """Schema for a confirmed slot"""

    date: date
    startTime: str
    endTime: str
    realtorId: str
    status: str
    notes: str
    requestId: Optional[str] = None


class AvailabilityResponse(BaseModel):
    """Schema for availability response"""

    contractorId: str
    workingHours: WorkingHoursSchema
    workingDays: list[int]
    meetingDuration: int
    bookedSlots: list[BookedSlotResponse]


class AvailableSlotsResponse(BaseModel):
    contractorId: str
    date: date
    slots: list[str]


class MeetingRequestCreate(BaseModel):
    """Schema for a realtor proposing (or directly booking) a meeting"""

    realtorId: str
    date: date
    startTime: str
    notes: Optional[str] = ""

    @field_validator("date", mode="before")
    @classmethod
    def normalize_date(cls, v):
        return _calendar_date(v)

    @field_validator("startTime")
    @classmethod
    def validate_start_time(cls, v):
        return validate_hhmm(v)


class MeetingRequestResponse(BaseModel):
    """Schema for meeting request response"""

    id: str
    contractorId: str
    realtorId: str
    date: date
    startTime: str
    endTime: str
    status: str
    notes: str
    createdAt: Optional[datetime] = None
    respondedAt: Optional[datetime] = None


class NotesUpdate(BaseModel):
    """Free-text notes; no length or content rules"""

    notes: str = ""


class AcceptResponse(BaseModel):
    message: str
    requestId: str
    bookedSlot: BookedSlotResponse


class BookingResponse(BaseModel):
    message: str
    bookedSlot: BookedSlotResponse


class ScheduleEntryResponse(BaseModel):
    """One row of the merged schedule"""

    date: date
    startTime: str
    endTime: str
    realtorId: str
    status: str
    notes: str
    requestId: Optional[str] = None
