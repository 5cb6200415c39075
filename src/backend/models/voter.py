"""
Voter model.

One named participant of one appointment. The (appointment_id, name) pair is
the identity key, so re-voting under the same name updates this row.
"""

from datetime import datetime
from uuid import uuid4

from sqlalchemy import DateTime, ForeignKey, String, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from db.base import Base


class Voter(Base):
    """Named participant; created on first vote, touched on re-vote."""

    __tablename__ = "voters"

    __table_args__ = (UniqueConstraint("appointment_id", "name", name="uq_voters_appointment_name"),)

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid4()),
    )

    appointment_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("appointments.id", ondelete="CASCADE"),
        index=True,
    )

    name: Mapped[str] = mapped_column(String(100))

    voted_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
    )

    appointment = relationship("Appointment", back_populates="voters")

    def __repr__(self) -> str:
        return f"<Voter(id={self.id}, appointment_id={self.appointment_id}, name={self.name})>"
