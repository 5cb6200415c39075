"""
Vote-related Pydantic schemas.

Vote records are a tagged union on ``kind`` so each aggregation function
only ever sees the shape its method produces.
"""

import datetime as dt
from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field, TypeAdapter, field_validator

# Half-hour slots offered to voters: 07:00 through 23:30
FIRST_SLOT_HOUR = 7
LAST_SLOT_HOUR = 23
SLOT_MINUTES = 30

Weekday = Annotated[int, Field(ge=0, le=6, description="0 = Sunday ... 6 = Saturday")]


def validate_time_label(value: str) -> str:
    """Check that ``value`` is a half-hour aligned "HH:MM" label in the voting window."""
    parts = value.split(":")
    if len(parts) != 2 or not all(p.isdigit() and len(p) == 2 for p in parts):
        raise ValueError(f"time must be formatted HH:MM, got {value!r}")
    hour, minute = int(parts[0]), int(parts[1])
    if not FIRST_SLOT_HOUR <= hour <= LAST_SLOT_HOUR:
        raise ValueError(f"time must be between {FIRST_SLOT_HOUR:02d}:00 and {LAST_SLOT_HOUR:02d}:30")
    if minute % SLOT_MINUTES != 0:
        raise ValueError(f"time must be aligned to {SLOT_MINUTES}-minute slots, got {value!r}")
    return value


class DateVoteRecord(BaseModel):
    """A voter can make this date."""

    kind: Literal["date"] = "date"
    voter_name: str
    date: dt.date

    model_config = {"frozen": True}


class TimeVoteRecord(BaseModel):
    """A voter can make this half-hour slot on this date."""

    kind: Literal["time"] = "time"
    voter_name: str
    date: dt.date
    time: str

    model_config = {"frozen": True}

    @field_validator("time")
    @classmethod
    def check_time(cls, v: str) -> str:
        return validate_time_label(v)


class WeekdayVoteRecord(BaseModel):
    """A voter can make this weekday every week."""

    kind: Literal["weekday"] = "weekday"
    voter_name: str
    weekday: Weekday

    model_config = {"frozen": True}


VoteRecord = Annotated[
    Union[DateVoteRecord, TimeVoteRecord, WeekdayVoteRecord],
    Field(discriminator="kind"),
]

_vote_records_adapter = TypeAdapter(list[VoteRecord])


def parse_vote_records(rows: list[dict]) -> list[Union[DateVoteRecord, TimeVoteRecord, WeekdayVoteRecord]]:
    """Validate raw denormalized rows (each with a ``kind`` key) into vote records."""
    return _vote_records_adapter.validate_python(rows)


class TimeSelection(BaseModel):
    """Slots selected on one date."""

    date: dt.date
    times: list[str] = Field(default_factory=list)

    @field_validator("times")
    @classmethod
    def check_times(cls, v: list[str]) -> list[str]:
        return list(dict.fromkeys(validate_time_label(t) for t in v))


class VoteSubmission(BaseModel):
    """
    One voter's complete availability for an appointment.

    Only the selection matching the appointment's method is used; it replaces
    whatever the voter submitted before.
    """

    voter_name: str = Field(..., max_length=100)
    dates: list[dt.date] = Field(default_factory=list)
    time_selections: list[TimeSelection] = Field(default_factory=list)
    weekdays: list[Weekday] = Field(default_factory=list)

    @field_validator("voter_name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        return v.strip()

    def unique_dates(self) -> list[dt.date]:
        return list(dict.fromkeys(self.dates))

    def unique_slots(self) -> list[tuple[dt.date, str]]:
        slots = [(s.date, t) for s in self.time_selections for t in s.times]
        return list(dict.fromkeys(slots))

    def unique_weekdays(self) -> list[int]:
        return list(dict.fromkeys(self.weekdays))


class VoteReceipt(BaseModel):
    """Acknowledgment returned to the voter after a successful submission."""

    appointment_id: str
    voter_id: str
    voter_name: str
    is_new_voter: bool
    records_saved: int
