"""
Contiguous time range detection for time-scheduling polls.

Two questions are answered from the same per-slot buckets:

- Which runs of adjacent half-hour slots are shared by exactly the same
  people? (``merge_identical_ranges``, the Top-N list.)
- What is the single best block: the highest headcount that can be held,
  for as long as possible? (``find_best_range``, the headline figure.)
"""

import datetime as dt
from collections.abc import Sequence
from typing import Optional

from core.config import settings
from schemas.results import TimeRange, VoteBucket, percentage_of
from schemas.vote import SLOT_MINUTES


def time_to_minutes(label: str) -> int:
    """Convert an "HH:MM" label to minutes after midnight."""
    hours, minutes = label.split(":")
    return int(hours) * 60 + int(minutes)


def minutes_to_time(minutes: int) -> str:
    """Convert minutes after midnight to an "HH:MM" label."""
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def _is_next_slot(current: VoteBucket, following: VoteBucket) -> bool:
    return time_to_minutes(following.time) - time_to_minutes(current.time) == SLOT_MINUTES


def _slots_by_date(slots: Sequence[VoteBucket]) -> dict[dt.date, list[VoteBucket]]:
    """Group slots by date (dates ascending), each day's slots in time order."""
    by_date: dict[dt.date, list[VoteBucket]] = {}
    for slot in slots:
        if slot.date is None or slot.time is None:
            continue
        by_date.setdefault(slot.date, []).append(slot)

    for day_slots in by_date.values():
        day_slots.sort(key=lambda s: time_to_minutes(s.time))
    return dict(sorted(by_date.items()))


def _make_range(
    day: dt.date,
    first: VoteBucket,
    last: VoteBucket,
    count: int,
    voters: list[str],
    total_voters: int,
) -> TimeRange:
    start = time_to_minutes(first.time)
    end = time_to_minutes(last.time)
    return TimeRange(
        date=day,
        start_time=first.time,
        end_time=last.time,
        count=count,
        voters=voters,
        duration_minutes=end - start + SLOT_MINUTES,
        percentage=percentage_of(count, total_voters),
    )


def _range_rank_key(time_range: TimeRange) -> tuple:
    return (
        -time_range.count,
        -time_range.duration_minutes,
        time_range.date,
        time_to_minutes(time_range.start_time),
    )


def merge_identical_ranges(
    slots: Sequence[VoteBucket],
    total_voters: int,
    limit: Optional[int] = None,
) -> list[TimeRange]:
    """
    Merge adjacent slots that share exactly the same voters into ranges.

    A range is extended to the next slot only when that slot starts 30 minutes
    later and its voter set equals the current one (order ignored). Ranges are
    ranked by headcount, then duration (longest first), then date and start
    time, and truncated to ``limit`` (default ``settings.RESULTS_TOP_RANGES``).
    """
    if limit is None:
        limit = settings.RESULTS_TOP_RANGES

    ranges: list[TimeRange] = []
    for day, day_slots in _slots_by_date(slots).items():
        run = [day_slots[0]]
        for slot in day_slots[1:]:
            previous = run[-1]
            if _is_next_slot(previous, slot) and set(slot.voters) == set(previous.voters):
                run.append(slot)
                continue
            ranges.append(_make_range(day, run[0], run[-1], run[0].count, list(run[0].voters), total_voters))
            run = [slot]
        ranges.append(_make_range(day, run[0], run[-1], run[0].count, list(run[0].voters), total_voters))

    ranges.sort(key=_range_rank_key)
    return ranges[:limit]


def find_best_range(slots: Sequence[VoteBucket], total_voters: int) -> Optional[TimeRange]:
    """
    Find the block of adjacent slots that sustains the highest headcount longest.

    Voter sets may shrink along the block; it is scored by the minimum
    headcount across its slots, then by duration. Extension from a start slot
    stops once that minimum drops below the best found so far. Ties go to the
    earliest date and start time.

    The returned ``count`` is the sustained minimum; ``voters`` lists only the
    people available for the whole block, so it may be shorter than ``count``.
    """
    best: Optional[TimeRange] = None

    for day, day_slots in _slots_by_date(slots).items():
        for i, first in enumerate(day_slots):
            sustained = first.count
            shared = set(first.voters)
            j = i
            while True:
                last = day_slots[j]
                duration = time_to_minutes(last.time) - time_to_minutes(first.time) + SLOT_MINUTES
                if best is None or (sustained, duration) > (best.count, best.duration_minutes):
                    voters = [name for name in first.voters if name in shared]
                    best = _make_range(day, first, last, sustained, voters, total_voters)

                if j + 1 >= len(day_slots) or not _is_next_slot(last, day_slots[j + 1]):
                    break
                j += 1
                sustained = min(sustained, day_slots[j].count)
                shared &= set(day_slots[j].voters)
                if sustained < best.count:
                    break

    return best
