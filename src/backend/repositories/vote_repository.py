"""
Vote repository for database operations.

Reads return denormalized vote records (voter name plus the method's
dimension values). Writes only ever replace a voter's whole vote set.
"""

from collections.abc import Sequence
from datetime import date
from typing import Any, Union
from uuid import uuid4

from sqlalchemy import and_, delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from models.appointment import AppointmentMethod
from models.vote import DateVote, TimeVote, WeekdayVote
from models.voter import Voter
from schemas.converters import (
    date_vote_rows_to_records,
    time_vote_rows_to_records,
    weekday_vote_rows_to_records,
)
from schemas.vote import DateVoteRecord, TimeVoteRecord, WeekdayVoteRecord

VoteRecords = Union[list[DateVoteRecord], list[TimeVoteRecord], list[WeekdayVoteRecord]]


class VoteRepository:
    """Repository for date, time and weekday vote rows."""

    def __init__(self, db: AsyncSession):
        self.db = db

    def _get_rowcount(self, result: Any) -> int:
        """Safely get rowcount from result."""
        return getattr(result, "rowcount", 0) or 0

    async def list_date_votes(self, appointment_id: str) -> list[DateVoteRecord]:
        """Date votes of an appointment in date order."""
        result = await self.db.execute(
            select(Voter.name, DateVote.vote_date)
            .join(Voter, Voter.id == DateVote.voter_id)
            .where(DateVote.appointment_id == appointment_id)
            .order_by(DateVote.vote_date.asc(), Voter.voted_at.asc(), Voter.name)
        )
        return date_vote_rows_to_records(result.all())

    async def list_time_votes(self, appointment_id: str) -> list[TimeVoteRecord]:
        """Time votes of an appointment in (date, time) order."""
        result = await self.db.execute(
            select(Voter.name, TimeVote.vote_date, TimeVote.vote_time)
            .join(Voter, Voter.id == TimeVote.voter_id)
            .where(TimeVote.appointment_id == appointment_id)
            .order_by(
                TimeVote.vote_date.asc(),
                TimeVote.vote_time.asc(),
                Voter.voted_at.asc(),
                Voter.name,
            )
        )
        return time_vote_rows_to_records(result.all())

    async def list_weekday_votes(self, appointment_id: str) -> list[WeekdayVoteRecord]:
        """Weekday votes of an appointment, Sunday first."""
        result = await self.db.execute(
            select(Voter.name, WeekdayVote.weekday)
            .join(Voter, Voter.id == WeekdayVote.voter_id)
            .where(WeekdayVote.appointment_id == appointment_id)
            .order_by(WeekdayVote.weekday.asc(), Voter.voted_at.asc(), Voter.name)
        )
        return weekday_vote_rows_to_records(result.all())

    async def list_votes(self, appointment_id: str, method: AppointmentMethod) -> VoteRecords:
        """Vote records in the shape the appointment's method collects."""
        kind = method.vote_kind
        if kind == "time":
            return await self.list_time_votes(appointment_id)
        if kind == "weekday":
            return await self.list_weekday_votes(appointment_id)
        return await self.list_date_votes(appointment_id)

    async def list_vote_dates(self, appointment_id: str) -> list[date]:
        """One entry per date vote (dates repeat once per voter), in date order."""
        result = await self.db.execute(
            select(DateVote.vote_date)
            .where(DateVote.appointment_id == appointment_id)
            .order_by(DateVote.vote_date.asc())
        )
        return list(result.scalars().all())

    async def delete_for_voter(self, voter_id: str, appointment_id: str) -> int:
        """
        Delete every vote row of every kind for a voter in an appointment.

        Returns the number of rows removed.
        """
        removed = 0
        for model in (DateVote, TimeVote, WeekdayVote):
            result = await self.db.execute(
                delete(model).where(
                    and_(
                        model.voter_id == voter_id,
                        model.appointment_id == appointment_id,
                    )
                )
            )
            removed += self._get_rowcount(result)
        return removed

    async def add_date_votes(self, voter_id: str, appointment_id: str, dates: Sequence[date]) -> int:
        """Insert one row per date."""
        self.db.add_all(
            [
                DateVote(id=str(uuid4()), voter_id=voter_id, appointment_id=appointment_id, vote_date=day)
                for day in dates
            ]
        )
        await self.db.flush()
        return len(dates)

    async def add_time_votes(
        self,
        voter_id: str,
        appointment_id: str,
        slots: Sequence[tuple[date, str]],
    ) -> int:
        """Insert one row per (date, "HH:MM") slot."""
        self.db.add_all(
            [
                TimeVote(
                    id=str(uuid4()),
                    voter_id=voter_id,
                    appointment_id=appointment_id,
                    vote_date=day,
                    vote_time=time_label,
                )
                for day, time_label in slots
            ]
        )
        await self.db.flush()
        return len(slots)

    async def add_weekday_votes(self, voter_id: str, appointment_id: str, weekdays: Sequence[int]) -> int:
        """Insert one row per weekday."""
        self.db.add_all(
            [
                WeekdayVote(id=str(uuid4()), voter_id=voter_id, appointment_id=appointment_id, weekday=weekday)
                for weekday in weekdays
            ]
        )
        await self.db.flush()
        return len(weekdays)
