"""
Results service.

Loads an appointment's votes and aggregates them. Results are recomputed on
every call so they always reflect the latest replace-votes.
"""

import structlog
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from core.exceptions import DataAccessError, NotFoundError, ValidationError
from models.appointment import AppointmentMethod
from repositories.appointment_repository import AppointmentRepository
from repositories.vote_repository import VoteRepository
from repositories.voter_repository import VoterRepository
from schemas.converters import appointment_model_to_schema
from schemas.results import CalculatedResults
from services.result_aggregator import calculate_results

logger = structlog.get_logger(__name__)


class ResultsService:
    """Aggregated results for an appointment."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.appointments = AppointmentRepository(db)
        self.voters = VoterRepository(db)
        self.votes = VoteRepository(db)

    async def get_results(self, appointment_id: str) -> CalculatedResults:
        """
        Aggregate every vote of an appointment under its method.

        Raises:
            NotFoundError: If the appointment does not exist.
            ValidationError: If the stored method is not a known one.
            DataAccessError: If reading votes fails.
        """
        try:
            appointment = await self.appointments.get_by_id(appointment_id)
            if appointment is None:
                raise NotFoundError("Appointment", appointment_id)

            try:
                method = AppointmentMethod(appointment.method)
            except ValueError as e:
                raise ValidationError(f"Unsupported scheduling method: {appointment.method}") from e

            total_voters = await self.voters.count_by_appointment(appointment_id)
            votes = await self.votes.list_votes(appointment_id, method)
        except SQLAlchemyError as e:
            logger.error("results_load_failed", appointment_id=appointment_id, error=str(e))
            raise DataAccessError(f"Failed to load votes for appointment {appointment_id}") from e

        return calculate_results(appointment_model_to_schema(appointment), votes, total_voters)
