"""
Vote aggregation for appointment results.

Raw vote records are grouped into buckets (per date, per date + time slot,
or per weekday), turned into percentages and ranked into the subsets the
results page shows. Everything is recomputed from the records on each call.

Ranking is count descending everywhere. Ties:
- dates keep the order they were first seen in (stable sort);
- time slots go by date, then time of day;
- weekdays go by weekday number, Sunday (0) first.
"""

from collections.abc import Callable, Hashable, Sequence
from typing import Union

import structlog

from core.exceptions import ValidationError
from models.appointment import AppointmentMethod
from schemas.appointment import Appointment
from schemas.results import (
    NO_OPTION,
    CalculatedResults,
    ResultStatistics,
    VoteBucket,
    VoteResult,
    percentage_of,
    round_half_up,
)
from schemas.vote import DateVoteRecord, TimeVoteRecord, WeekdayVoteRecord
from services.slot_merger import find_best_range, merge_identical_ranges, time_to_minutes

logger = structlog.get_logger(__name__)

WEEKDAY_NAMES = ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]

AnyVoteRecord = Union[DateVoteRecord, TimeVoteRecord, WeekdayVoteRecord]


def _ensure_kind(votes: Sequence[AnyVoteRecord], kind: str) -> None:
    for vote in votes:
        if vote.kind != kind:
            raise ValidationError(f"expected {kind} vote records, got a {vote.kind} record")


def _group(
    votes: Sequence[AnyVoteRecord],
    key_of: Callable[[AnyVoteRecord], Hashable],
    make_bucket: Callable[[Hashable], VoteBucket],
) -> list[VoteBucket]:
    """Single pass over the records; buckets come back in first-seen order."""
    buckets: dict[Hashable, VoteBucket] = {}
    seen: dict[Hashable, set[str]] = {}
    for vote in votes:
        key = key_of(vote)
        bucket = buckets.get(key)
        if bucket is None:
            bucket = buckets[key] = make_bucket(key)
            seen[key] = set()
        if vote.voter_name in seen[key]:
            continue
        seen[key].add(vote.voter_name)
        bucket.count += 1
        bucket.voters.append(vote.voter_name)
    return list(buckets.values())


def group_date_votes(votes: Sequence[DateVoteRecord]) -> list[VoteBucket]:
    """Group date votes into one bucket per date."""
    _ensure_kind(votes, "date")
    return _group(votes, lambda v: v.date, lambda day: VoteBucket(date=day))


def group_time_votes(votes: Sequence[TimeVoteRecord]) -> list[VoteBucket]:
    """Group time votes into one bucket per (date, time slot)."""
    _ensure_kind(votes, "time")
    return _group(
        votes,
        lambda v: (v.date, v.time),
        lambda key: VoteBucket(date=key[0], time=key[1]),
    )


def group_weekday_votes(votes: Sequence[WeekdayVoteRecord]) -> list[VoteBucket]:
    """Group weekday votes into one bucket per weekday, Sunday first."""
    _ensure_kind(votes, "weekday")
    buckets = _group(votes, lambda v: v.weekday, lambda day: VoteBucket(weekday=day))
    return sorted(buckets, key=lambda b: b.weekday)


def _to_results(buckets: Sequence[VoteBucket], total_voters: int) -> list[VoteResult]:
    return [
        VoteResult(**bucket.model_dump(), percentage=percentage_of(bucket.count, total_voters))
        for bucket in buckets
    ]


def _statistics(results: Sequence[VoteResult], total_voters: int, top_label: str) -> ResultStatistics:
    total_votes = sum(r.count for r in results)
    if total_voters > 0:
        avg_votes = round_half_up(total_votes / total_voters, 2)
        completion_rate = 100 if results else 0
    else:
        avg_votes = 0.0
        completion_rate = 0

    return ResultStatistics(
        total_voters=total_voters,
        total_votes=total_votes,
        avg_votes_per_voter=avg_votes,
        completion_rate=completion_rate,
        most_popular_option=top_label if total_voters > 0 and results else NO_OPTION,
    )


def _ranked_subsets(
    ranked: list[VoteResult],
    total_voters: int,
    required_participants: int,
    max_size: int,
) -> dict[str, list[VoteResult]]:
    return {
        # Unanimity needs at least one voter; an empty poll is never "everyone"
        "all_available": [r for r in ranked if total_voters > 0 and r.count == total_voters],
        "required_available": [r for r in ranked if r.count >= required_participants],
        "max_available": ranked[:max_size],
    }


def calculate_date_results(
    votes: Sequence[DateVoteRecord],
    total_voters: int,
    required_participants: int,
) -> CalculatedResults:
    """Results for the all-available, max-available and minimum-required methods."""
    results = _to_results(group_date_votes(votes), total_voters)
    results.sort(key=lambda r: -r.count)

    top_label = results[0].date.isoformat() if results else NO_OPTION
    return CalculatedResults(
        **_ranked_subsets(results, total_voters, required_participants, max_size=1),
        statistics=_statistics(results, total_voters, top_label),
    )


def calculate_time_results(
    votes: Sequence[TimeVoteRecord],
    total_voters: int,
    required_participants: int,
) -> CalculatedResults:
    """
    Results for the time-scheduling method.

    Besides the per-slot subsets this fills ``optimal_slots`` (Top-N ranges of
    adjacent slots with identical voters) and ``best_range`` (the block that
    sustains the highest headcount longest).
    """
    results = _to_results(group_time_votes(votes), total_voters)
    results.sort(key=lambda r: (-r.count, r.date, time_to_minutes(r.time)))

    top_label = f"{results[0].date.isoformat()} {results[0].time}" if results else NO_OPTION
    return CalculatedResults(
        **_ranked_subsets(results, total_voters, required_participants, max_size=1),
        optimal_slots=merge_identical_ranges(results, total_voters),
        best_range=find_best_range(results, total_voters),
        statistics=_statistics(results, total_voters, top_label),
    )


def calculate_weekday_results(
    votes: Sequence[WeekdayVoteRecord],
    total_voters: int,
    required_participants: int,
    weekly_meetings: int,
) -> CalculatedResults:
    """Results for the recurring method; ``max_available`` holds ``weekly_meetings`` weekdays."""
    results = _to_results(group_weekday_votes(votes), total_voters)
    results.sort(key=lambda r: -r.count)

    top_label = WEEKDAY_NAMES[results[0].weekday] if results else NO_OPTION
    return CalculatedResults(
        **_ranked_subsets(results, total_voters, required_participants, max_size=max(weekly_meetings, 0)),
        statistics=_statistics(results, total_voters, top_label),
    )


def calculate_results(
    appointment: Appointment,
    votes: Sequence[AnyVoteRecord],
    total_voters: int,
) -> CalculatedResults:
    """Aggregate ``votes`` according to the appointment's method."""
    method = AppointmentMethod(appointment.method)
    logger.debug(
        "calculating_results",
        appointment_id=appointment.id,
        method=method.value,
        records=len(votes),
        total_voters=total_voters,
    )

    if method is AppointmentMethod.TIME_SCHEDULING:
        return calculate_time_results(votes, total_voters, appointment.required_participants)
    if method is AppointmentMethod.RECURRING:
        return calculate_weekday_results(
            votes,
            total_voters,
            appointment.required_participants,
            appointment.weekly_meetings,
        )
    return calculate_date_results(votes, total_voters, appointment.required_participants)
