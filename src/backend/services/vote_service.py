"""
Vote submission service.

A voter is identified by their trimmed name within an appointment. Submitting
again under the same name replaces every earlier vote of that voter; the
delete and insert happen in one transaction with the voter row locked.

After the votes are committed, completion is re-evaluated in a background
task on its own session, so the receipt never waits for it.
"""

import asyncio
from collections.abc import Callable
from typing import Optional

import structlog
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from core.config import settings
from core.exceptions import DataAccessError, NotFoundError, ValidationError, VotingClosedError
from db.session import get_session_factory
from models.appointment import AppointmentMethod
from models.voter import Voter
from repositories.appointment_repository import AppointmentRepository
from repositories.vote_repository import VoteRepository
from repositories.voter_repository import VoterRepository
from schemas.vote import VoteReceipt, VoteSubmission
from services.completion_service import CompletionService

logger = structlog.get_logger(__name__)

# Strong references to running completion checks until they finish
_pending_completion_checks: set[asyncio.Task] = set()


def _check_selection(method: AppointmentMethod, submission: VoteSubmission) -> None:
    """The submission must carry a non-empty selection of the method's kind and nothing else."""
    selections = {
        "date": bool(submission.dates),
        "time": any(s.times for s in submission.time_selections),
        "weekday": bool(submission.weekdays),
    }
    kind = method.vote_kind
    if not selections[kind]:
        raise ValidationError(f"A {method.value} appointment needs at least one {kind} selection")
    others = [k for k, present in selections.items() if present and k != kind]
    if others:
        raise ValidationError(f"A {method.value} appointment does not accept {', '.join(others)} selections")


def _log_completion_check_outcome(appointment_id: str, task: asyncio.Task) -> None:
    _pending_completion_checks.discard(task)
    if task.cancelled():
        logger.warning("completion_check_cancelled", appointment_id=appointment_id)
        return
    error = task.exception()
    if isinstance(error, asyncio.TimeoutError):
        logger.warning(
            "completion_check_timed_out",
            appointment_id=appointment_id,
            timeout=settings.COMPLETION_CHECK_TIMEOUT_SECONDS,
        )
    elif error is not None:
        logger.error("completion_check_failed", appointment_id=appointment_id, error=str(error))
    else:
        verdict = task.result()
        logger.debug("completion_checked", appointment_id=appointment_id, is_complete=verdict.is_complete)


async def wait_for_pending_completion_checks() -> None:
    """Wait until every scheduled completion check has finished (used at shutdown)."""
    if _pending_completion_checks:
        await asyncio.gather(*list(_pending_completion_checks), return_exceptions=True)


class VoteSubmissionService:
    """Records and replaces voter availability for an appointment."""

    def __init__(self, db: AsyncSession, session_factory: Optional[Callable[[], AsyncSession]] = None):
        self.db = db
        self.session_factory = session_factory
        self.appointments = AppointmentRepository(db)
        self.voters = VoterRepository(db)
        self.votes = VoteRepository(db)
        self.completion = CompletionService(db)

    async def resolve_voter(self, appointment_id: str, name: str) -> Optional[Voter]:
        """
        Find the voter already registered under ``name``.

        Returns:
            The existing voter, or None when the name is new to this appointment.
        """
        return await self.voters.get_by_name(appointment_id, name.strip())

    async def submit_vote(self, appointment_id: str, submission: VoteSubmission) -> VoteReceipt:
        """
        Store a voter's availability, replacing anything they submitted before.

        Args:
            appointment_id: Appointment being voted on.
            submission: Voter name plus the selection for the appointment's method.

        Returns:
            Receipt with the voter id and how many vote rows were stored.

        Raises:
            ValidationError: Empty name, or a selection that does not fit the method.
            NotFoundError: The appointment does not exist.
            VotingClosedError: The poll is complete and this is a new voter.
            DataAccessError: Reading or writing votes failed; nothing was changed.
        """
        name = submission.voter_name.strip()
        if not name:
            raise ValidationError("Voter name must not be empty")

        try:
            appointment = await self.appointments.get_by_id(appointment_id)
            if appointment is None:
                raise NotFoundError("Appointment", appointment_id)

            try:
                method = AppointmentMethod(appointment.method)
            except ValueError as e:
                raise ValidationError(f"Unsupported scheduling method: {appointment.method}") from e
            _check_selection(method, submission)

            # Completed polls stay open for edits by existing voters; minimum-required never closes
            if method is not AppointmentMethod.MINIMUM_REQUIRED:
                existing = await self.resolve_voter(appointment_id, name)
                if existing is None:
                    verdict = await self.completion.check_voting_completion(appointment_id)
                    if verdict.is_complete:
                        logger.info("vote_rejected_poll_complete", appointment_id=appointment_id, method=method.value)
                        raise VotingClosedError(appointment_id, name)
        except SQLAlchemyError as e:
            logger.error("vote_lookup_failed", appointment_id=appointment_id, error=str(e))
            raise DataAccessError(f"Failed to read appointment {appointment_id}") from e

        try:
            voter = await self.voters.get_by_name(appointment_id, name, for_update=True)
            is_new_voter = voter is None
            if voter is None:
                voter = await self.voters.create(appointment_id, name)
            else:
                await self.voters.touch(voter)

            removed = await self.votes.delete_for_voter(voter.id, appointment_id)
            saved = await self._insert_selection(method, voter.id, appointment_id, submission)
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error("vote_submission_failed", appointment_id=appointment_id, error=str(e))
            raise DataAccessError(f"Failed to save votes for appointment {appointment_id}") from e

        logger.info(
            "vote_submitted",
            appointment_id=appointment_id,
            voter_id=voter.id,
            is_new_voter=is_new_voter,
            records_removed=removed,
            records_saved=saved,
        )

        self._schedule_completion_check(appointment_id)

        return VoteReceipt(
            appointment_id=appointment_id,
            voter_id=voter.id,
            voter_name=name,
            is_new_voter=is_new_voter,
            records_saved=saved,
        )

    async def _insert_selection(
        self,
        method: AppointmentMethod,
        voter_id: str,
        appointment_id: str,
        submission: VoteSubmission,
    ) -> int:
        kind = method.vote_kind
        if kind == "time":
            return await self.votes.add_time_votes(voter_id, appointment_id, submission.unique_slots())
        if kind == "weekday":
            return await self.votes.add_weekday_votes(voter_id, appointment_id, submission.unique_weekdays())
        return await self.votes.add_date_votes(voter_id, appointment_id, submission.unique_dates())

    def _schedule_completion_check(self, appointment_id: str) -> asyncio.Task:
        task = asyncio.create_task(self._run_completion_check(appointment_id))
        _pending_completion_checks.add(task)
        task.add_done_callback(lambda t: _log_completion_check_outcome(appointment_id, t))
        return task

    async def _run_completion_check(self, appointment_id: str):
        """Re-evaluate completion on a fresh session, bounded by the configured timeout."""
        session_factory = self.session_factory or get_session_factory()
        async with session_factory() as db:
            return await asyncio.wait_for(
                CompletionService(db).check_and_update(appointment_id),
                timeout=settings.COMPLETION_CHECK_TIMEOUT_SECONDS,
            )
