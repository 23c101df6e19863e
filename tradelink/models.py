import uuid

from sqlalchemy import (
    JSON,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .database import Base


def generate_id():
    """Generate a UUID string primary key"""
    return str(uuid.uuid4())


class User(Base):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=generate_id)
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    role = Column(String(20), nullable=False, index=True)  # realtor, contractor
    company = Column(String(255), nullable=True)
    specialty = Column(String(255), nullable=True)  # contractors only
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    availability = relationship(
        "Availability", back_populates="contractor", uselist=False, cascade="all, delete-orphan"
    )


class Availability(Base):
    __tablename__ = "availabilities"

    id = Column(Integer, primary_key=True, index=True)
    contractor_id = Column(String(36), ForeignKey("users.id"), unique=True, nullable=False)
    working_hours_start = Column(String(5), nullable=False)  # HH:MM
    working_hours_end = Column(String(5), nullable=False)  # HH:MM
    working_days = Column(JSON, nullable=False)  # [0..6], 0=Sunday
    meeting_duration = Column(Integer, nullable=False)  # minutes
    # Bumped on every booking so concurrent acceptances for one contractor cannot both commit
    version = Column(Integer, nullable=False)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    contractor = relationship("User", back_populates="availability")

    __mapper_args__ = {"version_id_col": version}


class BookedSlot(Base):
    __tablename__ = "booked_slots"
    __table_args__ = (
        UniqueConstraint("contractor_id", "date", "start_time", name="uq_booked_slot_start"),
    )

    id = Column(Integer, primary_key=True, index=True)
    contractor_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    realtor_id = Column(String(36), ForeignKey("users.id"), nullable=False)
    date = Column(Date, nullable=False)
    start_time = Column(String(5), nullable=False)  # HH:MM
    end_time = Column(String(5), nullable=False)
    status = Column(String(20), nullable=False, default="confirmed")
    notes = Column(String(2000), nullable=False, default="")
    request_id = Column(String(36), nullable=True)  # meeting request this slot was promoted from
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())


class MeetingRequest(Base):
    __tablename__ = "meeting_requests"

    id = Column(String(36), primary_key=True, default=generate_id)
    contractor_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    realtor_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    date = Column(Date, nullable=False)
    start_time = Column(String(5), nullable=False)
    end_time = Column(String(5), nullable=False)
    status = Column(String(20), nullable=False, default="pending")  # pending, declined
    notes = Column(String(2000), nullable=False, default="")
    responded_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())
