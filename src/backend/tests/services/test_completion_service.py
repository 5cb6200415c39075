"""
Tests for voting completion detection.

Covers the per-method rules, the monotonic "already completed" behaviour and
the best-effort status update.
"""

from datetime import date
from unittest.mock import AsyncMock

import pytest
from sqlalchemy.exc import OperationalError

JUL_1 = date(2024, 7, 1)
JUL_2 = date(2024, 7, 2)
JUL_3 = date(2024, 7, 3)


@pytest.mark.unit
class TestEvaluateCompletion:
    """Test the pure completion rule."""

    @pytest.mark.parametrize(
        "method",
        ["all-available", "max-available", "time-scheduling", "recurring"],
    )
    def test_voter_count_methods(self, method: str) -> None:
        from services.completion_service import evaluate_completion

        assert evaluate_completion(method, 3, 2).is_complete is False

        verdict = evaluate_completion(method, 3, 3)
        assert verdict.is_complete is True
        assert verdict.participant_count == 3
        assert verdict.reason

    def test_missing_requirement_falls_back_to_voter_count(self) -> None:
        from services.completion_service import evaluate_completion

        assert evaluate_completion("all-available", None, 0).is_complete is True
        assert evaluate_completion("all-available", 0, 4).is_complete is True

    def test_minimum_required_after_second_vote(self) -> None:
        """Alice votes Jul 1 and 2, then Bob votes Jul 1."""
        from services.completion_service import evaluate_completion

        verdict = evaluate_completion("minimum-required", 2, 2, [JUL_1, JUL_1, JUL_2])

        assert verdict.is_complete is True
        assert verdict.completed_date == JUL_1
        assert verdict.participant_count == 2

    def test_minimum_required_not_reached(self) -> None:
        from services.completion_service import evaluate_completion

        verdict = evaluate_completion("minimum-required", 2, 2, [JUL_1, JUL_2])

        assert verdict.is_complete is False
        assert verdict.completed_date is None
        assert verdict.reason == "No date has reached 2 participants yet"
        assert verdict.participant_count == 2

    def test_incomplete_reports_voters_still_needed(self) -> None:
        from services.completion_service import evaluate_completion

        verdict = evaluate_completion("recurring", 5, 2)

        assert verdict.is_complete is False
        assert verdict.reason == "3 more voters needed"
        assert verdict.participant_count == 2

    def test_minimum_required_takes_first_qualifying_date(self) -> None:
        from services.completion_service import evaluate_completion

        verdict = evaluate_completion("minimum-required", 2, 3, [JUL_2, JUL_2, JUL_3, JUL_3, JUL_3])

        assert verdict.completed_date == JUL_2
        assert verdict.participant_count == 2

    def test_minimum_required_defaults_to_one(self) -> None:
        from services.completion_service import evaluate_completion

        assert evaluate_completion("minimum-required", None, 1, [JUL_3]).completed_date == JUL_3
        assert evaluate_completion("minimum-required", None, 0, []).is_complete is False

    def test_unknown_method(self) -> None:
        from core.exceptions import ValidationError
        from services.completion_service import evaluate_completion

        with pytest.raises(ValidationError):
            evaluate_completion("first-come", 1, 1)

    def test_rules_cover_every_method(self) -> None:
        from models.appointment import AppointmentMethod
        from services.completion_service import COMPLETION_RULES

        assert set(COMPLETION_RULES) == set(AppointmentMethod)


def make_service(mock_db_session, appointment, total_voters=0, vote_dates=None):
    from services.completion_service import CompletionService

    service = CompletionService(mock_db_session)
    service.appointments.get_by_id = AsyncMock(return_value=appointment)
    service.appointments.mark_completed_if_active = AsyncMock(return_value=True)
    service.voters.count_by_appointment = AsyncMock(return_value=total_voters)
    service.votes.list_vote_dates = AsyncMock(return_value=vote_dates or [])
    return service


@pytest.mark.unit
class TestCheckVotingCompletion:
    """Test CompletionService.check_voting_completion."""

    async def test_complete(self, mock_db_session, appointment_factory) -> None:
        service = make_service(mock_db_session, appointment_factory(required_participants=2), total_voters=2)

        verdict = await service.check_voting_completion("appt-123")

        assert verdict.is_complete is True
        service.votes.list_vote_dates.assert_not_awaited()

    async def test_minimum_required_reads_dates(self, mock_db_session, appointment_factory) -> None:
        appointment = appointment_factory(method="minimum-required", required_participants=2)
        service = make_service(mock_db_session, appointment, total_voters=2, vote_dates=[JUL_1, JUL_1])

        verdict = await service.check_voting_completion("appt-123")

        assert verdict.completed_date == JUL_1
        service.votes.list_vote_dates.assert_awaited_once_with("appt-123")

    async def test_not_found(self, mock_db_session) -> None:
        from core.exceptions import NotFoundError

        service = make_service(mock_db_session, None)

        with pytest.raises(NotFoundError, match="Appointment not found: missing"):
            await service.check_voting_completion("missing")

    async def test_storage_failure(self, mock_db_session, appointment_factory) -> None:
        from core.exceptions import DataAccessError

        service = make_service(mock_db_session, appointment_factory(method="minimum-required"))
        service.votes.list_vote_dates = AsyncMock(side_effect=OperationalError("SELECT", {}, Exception("down")))

        with pytest.raises(DataAccessError):
            await service.check_voting_completion("appt-123")

    async def test_unknown_stored_method(self, mock_db_session, appointment_factory) -> None:
        from core.exceptions import ValidationError

        service = make_service(mock_db_session, appointment_factory(method="legacy"))

        with pytest.raises(ValidationError):
            await service.check_voting_completion("appt-123")

    async def test_completed_appointment_stays_complete(self, mock_db_session, appointment_factory) -> None:
        """Votes moved away from the winning date do not reopen the poll."""
        appointment = appointment_factory(method="minimum-required", required_participants=2, status="completed")
        service = make_service(mock_db_session, appointment, total_voters=2, vote_dates=[JUL_1, JUL_2])

        verdict = await service.check_voting_completion("appt-123")

        assert verdict.is_complete is True


@pytest.mark.unit
class TestCheckAndUpdate:
    """Test CompletionService.check_and_update."""

    async def test_marks_completed(self, mock_db_session, appointment_factory) -> None:
        service = make_service(mock_db_session, appointment_factory(required_participants=1), total_voters=1)

        verdict = await service.check_and_update("appt-123")

        assert verdict.is_complete is True
        service.appointments.mark_completed_if_active.assert_awaited_once_with("appt-123")
        mock_db_session.commit.assert_awaited_once()

    async def test_incomplete_leaves_status(self, mock_db_session, appointment_factory) -> None:
        service = make_service(mock_db_session, appointment_factory(required_participants=5), total_voters=1)

        verdict = await service.check_and_update("appt-123")

        assert verdict.is_complete is False
        service.appointments.mark_completed_if_active.assert_not_awaited()
        mock_db_session.commit.assert_not_awaited()

    async def test_update_failure_is_swallowed(self, mock_db_session, appointment_factory) -> None:
        service = make_service(mock_db_session, appointment_factory(required_participants=1), total_voters=1)
        service.appointments.mark_completed_if_active = AsyncMock(
            side_effect=OperationalError("UPDATE", {}, Exception("locked"))
        )

        verdict = await service.check_and_update("appt-123")

        assert verdict.is_complete is True
        mock_db_session.rollback.assert_awaited_once()
