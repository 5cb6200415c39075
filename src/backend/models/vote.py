"""
Vote models for PostgreSQL storage.

Each row is one atomic availability assertion by one voter. The table used
depends on the appointment method: dates, date + half-hour time slots, or
weekdays. A voter's rows are always replaced as a whole set on re-vote.
"""

from datetime import date
from uuid import uuid4

from sqlalchemy import Date, ForeignKey, Index, SmallInteger, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from db.base import Base


class DateVote(Base):
    """Voter is available on a date."""

    __tablename__ = "date_votes"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid4()),
    )
    voter_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("voters.id", ondelete="CASCADE"),
        index=True,
    )
    appointment_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("appointments.id", ondelete="CASCADE"),
    )
    vote_date: Mapped[date] = mapped_column(Date)

    voter = relationship("Voter")

    __table_args__ = (
        UniqueConstraint("voter_id", "vote_date", name="uq_date_votes_voter_date"),
        Index("ix_date_votes_appointment_date", "appointment_id", "vote_date"),
    )


class TimeVote(Base):
    """Voter is available in a half-hour slot ("HH:MM") on a date."""

    __tablename__ = "time_votes"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid4()),
    )
    voter_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("voters.id", ondelete="CASCADE"),
        index=True,
    )
    appointment_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("appointments.id", ondelete="CASCADE"),
    )
    vote_date: Mapped[date] = mapped_column(Date)
    vote_time: Mapped[str] = mapped_column(String(5))

    voter = relationship("Voter")

    __table_args__ = (
        UniqueConstraint("voter_id", "vote_date", "vote_time", name="uq_time_votes_voter_slot"),
        Index("ix_time_votes_appointment_slot", "appointment_id", "vote_date", "vote_time"),
    )


class WeekdayVote(Base):
    """Voter is available on a weekday (0 = Sunday ... 6 = Saturday)."""

    __tablename__ = "weekday_votes"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid4()),
    )
    voter_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("voters.id", ondelete="CASCADE"),
        index=True,
    )
    appointment_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("appointments.id", ondelete="CASCADE"),
    )
    weekday: Mapped[int] = mapped_column(SmallInteger)

    voter = relationship("Voter")

    __table_args__ = (
        UniqueConstraint("voter_id", "weekday", name="uq_weekday_votes_voter_weekday"),
        Index("ix_weekday_votes_appointment_weekday", "appointment_id", "weekday"),
    )
