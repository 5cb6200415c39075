"""
Pytest fixtures for MeetPoll backend tests.
"""

import os
from datetime import date
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

# Set test environment variables before importing settings
os.environ.setdefault("POSTGRES_PASSWORD", "test-password")
os.environ.setdefault("POSTGRES_HOST", "localhost")
os.environ.setdefault("POSTGRES_DB", "meetpoll_test")
os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("DEBUG", "false")
os.environ.setdefault("LOG_LEVEL", "DEBUG")


@pytest.fixture(scope="session", autouse=True)
def configure_test_logging() -> None:
    """Key=value log output so failures are readable."""
    from core.logging_config import configure_logging

    configure_logging(is_development=True, log_level="DEBUG")


@pytest.fixture
def mock_db_session() -> AsyncMock:
    """Create mock database session."""
    session = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.refresh = AsyncMock()
    session.add = MagicMock()
    session.add_all = MagicMock()
    return session


def make_appointment(**overrides: Any) -> MagicMock:
    """Stand-in for an Appointment ORM row."""
    values = {
        "id": "appt-123",
        "title": "Team offsite",
        "share_token": "abc123",
        "method": "all-available",
        "required_participants": 3,
        "weekly_meetings": 1,
        "start_date": date(2024, 7, 1),
        "end_date": date(2024, 7, 7),
        "status": "active",
        "created_at": None,
    }
    values.update(overrides)
    appointment = MagicMock()
    for key, value in values.items():
        setattr(appointment, key, value)
    return appointment


@pytest.fixture
def appointment_factory():
    """Build Appointment ORM stand-ins with per-test overrides."""
    return make_appointment
