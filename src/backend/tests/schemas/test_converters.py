"""Tests for the schema converters."""

from datetime import date, datetime, timezone
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

from models.appointment import AppointmentMethod, AppointmentStatus
from schemas.converters import (
    appointment_model_to_schema,
    date_vote_rows_to_records,
    time_vote_rows_to_records,
    weekday_vote_rows_to_records,
)


class TestAppointmentModelToSchema:
    """Tests for appointment_model_to_schema converter."""

    @pytest.fixture
    def mock_appointment(self):
        """Create a mock appointment with all required fields."""
        appointment = MagicMock()
        appointment.id = "appt-1"
        appointment.title = "Quarterly planning"
        appointment.share_token = "token"
        appointment.method = "minimum-required"
        appointment.required_participants = 4
        appointment.weekly_meetings = 1
        appointment.start_date = date(2024, 7, 1)
        appointment.end_date = date(2024, 7, 14)
        appointment.status = "completed"
        appointment.created_at = datetime.now(timezone.utc)
        return appointment

    def test_converts_fields(self, mock_appointment):
        """Test that enums and dates are carried over."""
        result = appointment_model_to_schema(mock_appointment)

        assert result.id == "appt-1"
        assert result.method is AppointmentMethod.MINIMUM_REQUIRED
        assert result.status is AppointmentStatus.COMPLETED
        assert result.required_participants == 4
        assert result.end_date == date(2024, 7, 14)

    def test_missing_counts_default_to_one(self, mock_appointment):
        """Test that null headcounts from old rows become 1."""
        mock_appointment.required_participants = None
        mock_appointment.weekly_meetings = None
        mock_appointment.status = None

        result = appointment_model_to_schema(mock_appointment)

        assert result.required_participants == 1
        assert result.weekly_meetings == 1
        assert result.status is AppointmentStatus.ACTIVE


class TestVoteRowConverters:
    """Tests for the joined-row converters."""

    def test_date_rows(self):
        rows = [SimpleNamespace(name="Alice", vote_date=date(2024, 7, 1))]

        records = date_vote_rows_to_records(rows)

        assert records[0].kind == "date"
        assert records[0].voter_name == "Alice"
        assert records[0].date == date(2024, 7, 1)

    def test_time_rows(self):
        rows = [SimpleNamespace(name="Bob", vote_date=date(2024, 7, 1), vote_time="09:30")]

        records = time_vote_rows_to_records(rows)

        assert (records[0].kind, records[0].time) == ("time", "09:30")

    def test_weekday_rows(self):
        rows = [SimpleNamespace(name="Carol", weekday=6)]

        records = weekday_vote_rows_to_records(rows)

        assert (records[0].kind, records[0].weekday) == ("weekday", 6)

    def test_empty(self):
        assert date_vote_rows_to_records([]) == []
