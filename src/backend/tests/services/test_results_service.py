"""
Tests for the results service.
"""

from datetime import date
from unittest.mock import AsyncMock

import pytest
from sqlalchemy.exc import OperationalError

from schemas.vote import DateVoteRecord, WeekdayVoteRecord


def make_service(mock_db_session, appointment, total_voters=0, votes=None):
    from services.results_service import ResultsService

    service = ResultsService(mock_db_session)
    service.appointments.get_by_id = AsyncMock(return_value=appointment)
    service.voters.count_by_appointment = AsyncMock(return_value=total_voters)
    service.votes.list_votes = AsyncMock(return_value=votes or [])
    return service


@pytest.mark.unit
class TestResultsService:
    """Test ResultsService.get_results."""

    async def test_date_results(self, mock_db_session, appointment_factory) -> None:
        votes = [
            DateVoteRecord(voter_name="Alice", date=date(2024, 7, 1)),
            DateVoteRecord(voter_name="Bob", date=date(2024, 7, 1)),
        ]
        service = make_service(mock_db_session, appointment_factory(), total_voters=2, votes=votes)

        results = await service.get_results("appt-123")

        assert results.all_available[0].date == date(2024, 7, 1)
        assert results.statistics.total_voters == 2

    async def test_reads_votes_for_method(self, mock_db_session, appointment_factory) -> None:
        from models.appointment import AppointmentMethod

        votes = [WeekdayVoteRecord(voter_name="Alice", weekday=4)]
        service = make_service(mock_db_session, appointment_factory(method="recurring"), total_voters=1, votes=votes)

        results = await service.get_results("appt-123")

        service.votes.list_votes.assert_awaited_once_with("appt-123", AppointmentMethod.RECURRING)
        assert results.statistics.most_popular_option == "Thursday"

    async def test_not_found(self, mock_db_session) -> None:
        from core.exceptions import NotFoundError

        service = make_service(mock_db_session, None)

        with pytest.raises(NotFoundError):
            await service.get_results("missing")

    async def test_unknown_method(self, mock_db_session, appointment_factory) -> None:
        from core.exceptions import ValidationError

        service = make_service(mock_db_session, appointment_factory(method="legacy"))

        with pytest.raises(ValidationError):
            await service.get_results("appt-123")

    async def test_storage_failure(self, mock_db_session, appointment_factory) -> None:
        from core.exceptions import DataAccessError

        service = make_service(mock_db_session, appointment_factory())
        service.voters.count_by_appointment = AsyncMock(side_effect=OperationalError("SELECT", {}, Exception("down")))

        with pytest.raises(DataAccessError):
            await service.get_results("appt-123")
