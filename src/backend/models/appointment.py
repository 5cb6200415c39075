"""
Appointment model for PostgreSQL storage.

An appointment is the poll definition: which scheduling method is used,
the date window, and how many participants are required.
"""

from datetime import date, datetime
from enum import Enum
from typing import Optional
from uuid import uuid4

from sqlalchemy import Date, DateTime, Index, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from db.base import Base


class AppointmentMethod(str, Enum):
    """Scheduling method chosen at creation. Immutable afterwards."""

    ALL_AVAILABLE = "all-available"  # Dates every participant can make
    MAX_AVAILABLE = "max-available"  # Date the most participants can make
    MINIMUM_REQUIRED = "minimum-required"  # Dates with at least N participants
    TIME_SCHEDULING = "time-scheduling"  # Dates plus half-hour time slots
    RECURRING = "recurring"  # Weekdays for a weekly meeting

    @property
    def vote_kind(self) -> str:
        """Shape of the vote records this method collects."""
        if self is AppointmentMethod.TIME_SCHEDULING:
            return "time"
        if self is AppointmentMethod.RECURRING:
            return "weekday"
        return "date"


class AppointmentStatus(str, Enum):
    """Appointment lifecycle status."""

    ACTIVE = "active"  # Accepting votes
    COMPLETED = "completed"  # Enough votes collected for the method's rule
    CANCELLED = "cancelled"  # Cancelled by the creator


class Appointment(Base):
    """Poll definition created by the organizer."""

    __tablename__ = "appointments"

    __table_args__ = (Index("ix_appointments_status_method", "status", "method"),)

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid4()),
    )

    title: Mapped[str] = mapped_column(String(200))
    share_token: Mapped[str] = mapped_column(
        String(64),
        unique=True,
        index=True,
        default=lambda: uuid4().hex,
    )

    method: Mapped[str] = mapped_column(String(30))
    required_participants: Mapped[int] = mapped_column(Integer, default=1)
    weekly_meetings: Mapped[int] = mapped_column(Integer, default=1)

    # Date window (absent for recurring)
    start_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    end_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)

    status: Mapped[str] = mapped_column(
        String(20),
        default=AppointmentStatus.ACTIVE.value,
        index=True,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
    )

    voters = relationship("Voter", back_populates="appointment", cascade="all, delete-orphan")

