"""Schemas module initialization."""

from schemas.appointment import Appointment, AppointmentCreate
from schemas.results import (
    NO_OPTION,
    CalculatedResults,
    ResultStatistics,
    TimeRange,
    VoteBucket,
    VoteResult,
    VotingCompletionResult,
)
from schemas.vote import (
    DateVoteRecord,
    TimeSelection,
    TimeVoteRecord,
    VoteReceipt,
    VoteRecord,
    VoteSubmission,
    WeekdayVoteRecord,
)

__all__ = [
    "Appointment",
    "AppointmentCreate",
    "NO_OPTION",
    "CalculatedResults",
    "ResultStatistics",
    "TimeRange",
    "VoteBucket",
    "VoteResult",
    "VotingCompletionResult",
    "DateVoteRecord",
    "TimeVoteRecord",
    "WeekdayVoteRecord",
    "VoteRecord",
    "TimeSelection",
    "VoteSubmission",
    "VoteReceipt",
]
