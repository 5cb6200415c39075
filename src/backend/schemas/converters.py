"""
Schema converter functions.

Centralized helpers for converting SQLAlchemy models and result rows to
Pydantic schemas.
"""

from collections.abc import Iterable
from typing import TYPE_CHECKING, Any

from models.appointment import AppointmentMethod, AppointmentStatus
from schemas.appointment import Appointment
from schemas.vote import DateVoteRecord, TimeVoteRecord, WeekdayVoteRecord

if TYPE_CHECKING:
    from models.appointment import Appointment as AppointmentModel


def appointment_model_to_schema(appointment: "AppointmentModel") -> Appointment:
    """Convert an Appointment SQLAlchemy model to the schema the core reads."""
    return Appointment(
        id=str(appointment.id),
        title=appointment.title,
        share_token=appointment.share_token,
        method=AppointmentMethod(appointment.method),
        required_participants=appointment.required_participants or 1,
        weekly_meetings=appointment.weekly_meetings or 1,
        start_date=appointment.start_date,
        end_date=appointment.end_date,
        status=AppointmentStatus(appointment.status) if appointment.status else AppointmentStatus.ACTIVE,
        created_at=appointment.created_at,
    )


def date_vote_rows_to_records(rows: Iterable[Any]) -> list[DateVoteRecord]:
    """Rows of (name, vote_date) to date vote records."""
    return [DateVoteRecord(voter_name=row.name, date=row.vote_date) for row in rows]


def time_vote_rows_to_records(rows: Iterable[Any]) -> list[TimeVoteRecord]:
    """Rows of (name, vote_date, vote_time) to time vote records."""
    return [TimeVoteRecord(voter_name=row.name, date=row.vote_date, time=row.vote_time) for row in rows]


def weekday_vote_rows_to_records(rows: Iterable[Any]) -> list[WeekdayVoteRecord]:
    """Rows of (name, weekday) to weekday vote records."""
    return [WeekdayVoteRecord(voter_name=row.name, weekday=row.weekday) for row in rows]
