"""
Calendar grid mapping for results display.

Maps aggregated buckets onto per-date calendar cells and a shading tier.
Rendering (colors, CSS) belongs to the frontend; this only decides the tier.
"""

import datetime as dt
from collections.abc import Sequence

from pydantic import BaseModel, Field

from models.appointment import AppointmentMethod
from schemas.results import VoteBucket

# Lower bounds (percent of the busiest cell) for tiers 7 down to 1; tier 0 is "no votes"
INTENSITY_THRESHOLDS = (90, 75, 60, 45, 30, 15, 0)
MAX_INTENSITY = len(INTENSITY_THRESHOLDS)


class CalendarCell(BaseModel):
    """One date on the results calendar."""

    date: dt.date
    count: int = 0
    voters: list[str] = Field(default_factory=list)
    max_slot_count: int | None = None  # busiest slot of the day (time-scheduling only)


def calculate_calendar_data(
    date_buckets: Sequence[VoteBucket],
    time_buckets: Sequence[VoteBucket],
    method: AppointmentMethod,
) -> dict[dt.date, CalendarCell]:
    """
    Build calendar cells keyed by date.

    Date methods map their buckets one to one. For time-scheduling a day's
    ``count`` is its busiest slot and ``voters`` everyone who picked any slot
    that day.
    """
    if method is not AppointmentMethod.TIME_SCHEDULING:
        return {
            b.date: CalendarCell(date=b.date, count=b.count, voters=list(b.voters))
            for b in date_buckets
            if b.date is not None
        }

    cells: dict[dt.date, CalendarCell] = {}
    for bucket in time_buckets:
        if bucket.date is None:
            continue
        cell = cells.setdefault(bucket.date, CalendarCell(date=bucket.date, max_slot_count=0))
        if bucket.count > cell.max_slot_count:
            cell.max_slot_count = bucket.count
            cell.count = bucket.count
        for voter in bucket.voters:
            if voter not in cell.voters:
                cell.voters.append(voter)
    return cells


def color_intensity(count: int, max_count: int) -> int:
    """Shading tier 0..7 for a cell: 0 when empty, 7 at 90% or more of ``max_count``."""
    if count <= 0:
        return 0
    percentage = count / max_count * 100 if max_count > 0 else 0
    for tier, threshold in zip(range(MAX_INTENSITY, 0, -1), INTENSITY_THRESHOLDS):
        if percentage >= threshold:
            return tier
    return 1
