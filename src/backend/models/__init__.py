"""Database models module."""

from models.appointment import Appointment, AppointmentMethod, AppointmentStatus
from models.vote import DateVote, TimeVote, WeekdayVote
from models.voter import Voter

__all__ = [
    "Appointment",
    "AppointmentMethod",
    "AppointmentStatus",
    "Voter",
    "DateVote",
    "TimeVote",
    "WeekdayVote",
]
