"""
Voting completion detection.

Each scheduling method has a rule for when a poll has collected enough votes.
``evaluate_completion`` applies the rule to plain values; ``CompletionService``
loads those values for an appointment and optionally flips its status from
active to completed.
"""

from collections import Counter
from collections.abc import Sequence
from datetime import date
from typing import Optional

import structlog
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from core.exceptions import DataAccessError, NotFoundError, ValidationError
from models.appointment import AppointmentMethod, AppointmentStatus
from repositories.appointment_repository import AppointmentRepository
from repositories.vote_repository import VoteRepository
from repositories.voter_repository import VoterRepository
from schemas.results import VotingCompletionResult

logger = structlog.get_logger(__name__)

# Human-readable completion rules, shown next to the method picker
COMPLETION_RULES: dict[AppointmentMethod, dict[str, str]] = {
    AppointmentMethod.ALL_AVAILABLE: {
        "name": "All participants available",
        "description": "Completes once the required number of participants have voted",
        "condition": "total voters >= required participants",
    },
    AppointmentMethod.MAX_AVAILABLE: {
        "name": "Maximum availability",
        "description": "Completes once the required number of participants have voted",
        "condition": "total voters >= required participants",
    },
    AppointmentMethod.MINIMUM_REQUIRED: {
        "name": "Minimum participants",
        "description": "Completes as soon as one date reaches the required number of participants",
        "condition": "votes on a single date >= required participants",
    },
    AppointmentMethod.TIME_SCHEDULING: {
        "name": "Date and time",
        "description": "Completes once the required number of participants have voted",
        "condition": "total voters >= required participants",
    },
    AppointmentMethod.RECURRING: {
        "name": "Recurring weekly meeting",
        "description": "Completes once the required number of participants have voted",
        "condition": "total voters >= required participants",
    },
}


def evaluate_completion(
    method: AppointmentMethod | str,
    required_participants: Optional[int],
    total_voters: int,
    vote_dates: Sequence[date] = (),
) -> VotingCompletionResult:
    """
    Decide whether a poll is complete under its method's rule.

    Args:
        method: The appointment's scheduling method.
        required_participants: Headcount the organizer asked for. A missing or
            zero value falls back to "everyone who voted" (or 1 for
            minimum-required).
        total_voters: Distinct voters so far.
        vote_dates: One entry per date vote, in the order dates should be
            considered. Only used by minimum-required.

    Returns:
        The completion verdict.

    Raises:
        ValidationError: If ``method`` is not a known scheduling method.
    """
    try:
        method = AppointmentMethod(method)
    except ValueError as e:
        raise ValidationError(f"Unsupported scheduling method: {method}") from e

    if method is AppointmentMethod.MINIMUM_REQUIRED:
        required = required_participants or 1
        counts = Counter(vote_dates)
        # Counter keeps first-insertion order, so the earliest supplied date wins
        for day, count in counts.items():
            if count >= required:
                return VotingCompletionResult(
                    is_complete=True,
                    reason=f"{count} participants available on {day.isoformat()}",
                    completed_date=day,
                    participant_count=count,
                )
        return VotingCompletionResult(
            is_complete=False,
            reason=f"No date has reached {required} participants yet",
            participant_count=total_voters,
        )

    required = required_participants or total_voters
    if total_voters >= required:
        return VotingCompletionResult(
            is_complete=True,
            reason=f"{total_voters} of {required} required participants have voted",
            participant_count=total_voters,
        )
    return VotingCompletionResult(
        is_complete=False,
        reason=f"{required - total_voters} more voters needed",
        participant_count=total_voters,
    )


class CompletionService:
    """Loads appointment state and applies the completion rule."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.appointments = AppointmentRepository(db)
        self.voters = VoterRepository(db)
        self.votes = VoteRepository(db)

    async def check_voting_completion(self, appointment_id: str) -> VotingCompletionResult:
        """
        Evaluate completion for an appointment without changing it.

        An appointment already marked completed stays complete even if later
        edits would no longer satisfy the rule.

        Raises:
            NotFoundError: If the appointment does not exist.
            DataAccessError: If reading votes fails.
            ValidationError: If the stored method is not a known one.
        """
        try:
            appointment = await self.appointments.get_by_id(appointment_id)
            if appointment is None:
                raise NotFoundError("Appointment", appointment_id)

            total_voters = await self.voters.count_by_appointment(appointment_id)
            vote_dates: list[date] = []
            if appointment.method == AppointmentMethod.MINIMUM_REQUIRED.value:
                vote_dates = await self.votes.list_vote_dates(appointment_id)
        except SQLAlchemyError as e:
            logger.error("completion_check_failed", appointment_id=appointment_id, error=str(e))
            raise DataAccessError(f"Failed to load votes for appointment {appointment_id}") from e

        verdict = evaluate_completion(appointment.method, appointment.required_participants, total_voters, vote_dates)

        if not verdict.is_complete and appointment.status == AppointmentStatus.COMPLETED.value:
            return VotingCompletionResult(
                is_complete=True,
                reason="Appointment was already completed",
                participant_count=total_voters,
            )
        return verdict

    async def check_and_update(self, appointment_id: str) -> VotingCompletionResult:
        """
        Evaluate completion and mark the appointment completed when it is.

        The status write is best effort: a failure is logged and the verdict is
        still returned.
        """
        verdict = await self.check_voting_completion(appointment_id)
        if not verdict.is_complete:
            return verdict

        try:
            updated = await self.appointments.mark_completed_if_active(appointment_id)
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error("completion_status_update_failed", appointment_id=appointment_id, error=str(e))
            return verdict

        if updated:
            logger.info(
                "appointment_completed",
                appointment_id=appointment_id,
                participant_count=verdict.participant_count,
                completed_date=verdict.completed_date.isoformat() if verdict.completed_date else None,
            )
        return verdict
