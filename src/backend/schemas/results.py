"""
Result and completion Pydantic schemas.

Everything here is derived from vote records on every query; nothing is
persisted.
"""

import datetime as dt
import math
from typing import Optional

from pydantic import BaseModel, Field

# mostPopularOption when there is nothing to rank
NO_OPTION = "none"


def round_half_up(value: float, digits: int = 0) -> float:
    """Round halves away from zero for non-negative values (2.5 -> 3, not 2)."""
    factor = 10**digits
    return math.floor(value * factor + 0.5) / factor


def percentage_of(count: int, total_voters: int) -> int:
    """Whole-number share of ``total_voters``; 0 when nobody has voted."""
    if total_voters <= 0:
        return 0
    return min(100, int(round_half_up(count / total_voters * 100)))


class VoteBucket(BaseModel):
    """
    Votes grouped under one key: a date, a weekday, or a date + time slot.

    ``count`` always equals ``len(voters)``.
    """

    date: Optional[dt.date] = None
    time: Optional[str] = None
    weekday: Optional[int] = None
    count: int = 0
    voters: list[str] = Field(default_factory=list)


class VoteResult(VoteBucket):
    """A bucket with its share of all voters."""

    percentage: int = Field(0, ge=0, le=100)


class TimeRange(BaseModel):
    """
    Run of adjacent half-hour slots on one date.

    ``end_time`` is the label of the last slot in the run, not the moment the
    run ends; ``duration_minutes`` includes that last slot.
    """

    date: dt.date
    start_time: str
    end_time: str
    count: int
    voters: list[str] = Field(default_factory=list)
    duration_minutes: int
    percentage: int = 0


class ResultStatistics(BaseModel):
    """Summary figures for the results page."""

    total_voters: int = 0
    total_votes: int = 0
    avg_votes_per_voter: float = 0.0
    completion_rate: int = Field(
        0, description="100 when any option received a vote; not the poll completion verdict"
    )
    most_popular_option: str = NO_OPTION


class CalculatedResults(BaseModel):
    """Ranked subsets of the aggregated results."""

    all_available: list[VoteResult] = Field(default_factory=list)
    required_available: list[VoteResult] = Field(default_factory=list)
    max_available: list[VoteResult] = Field(default_factory=list)
    optimal_slots: Optional[list[TimeRange]] = Field(
        None, description="Top contiguous ranges with identical voters (time-scheduling only)"
    )
    best_range: Optional[TimeRange] = Field(
        None, description="Longest range sustaining the highest headcount (time-scheduling only)"
    )
    statistics: ResultStatistics = Field(default_factory=ResultStatistics)


class VotingCompletionResult(BaseModel):
    """Whether a poll has collected enough votes under its method's rule."""

    is_complete: bool
    reason: Optional[str] = None
    completed_date: Optional[dt.date] = None
    participant_count: Optional[int] = None
