"""Repository modules for database access."""

from repositories.appointment_repository import AppointmentRepository
from repositories.vote_repository import VoteRepository
from repositories.voter_repository import VoterRepository

__all__ = [
    "AppointmentRepository",
    "VoteRepository",
    "VoterRepository",
]
