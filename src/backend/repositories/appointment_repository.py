"""
Appointment repository for database operations.
"""

from datetime import datetime, timezone
from typing import Any, Optional
from uuid import uuid4

from sqlalchemy import and_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from models.appointment import Appointment, AppointmentStatus
from schemas.appointment import AppointmentCreate


class AppointmentRepository:
    """Repository for appointment database operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    def _get_rowcount(self, result: Any) -> int:
        """Safely get rowcount from result."""
        return getattr(result, "rowcount", 0) or 0

    async def get_by_id(self, appointment_id: str) -> Optional[Appointment]:
        """Get an appointment by ID."""
        result = await self.db.execute(select(Appointment).where(Appointment.id == appointment_id))
        return result.scalar_one_or_none()

    async def get_by_share_token(self, share_token: str) -> Optional[Appointment]:
        """Get an appointment by the token used in its share link."""
        result = await self.db.execute(select(Appointment).where(Appointment.share_token == share_token))
        return result.scalar_one_or_none()

    async def create(self, data: AppointmentCreate) -> Appointment:
        """Create a new appointment in the active state."""
        appointment = Appointment(
            id=str(uuid4()),
            title=data.title,
            share_token=uuid4().hex,
            method=data.method.value,
            required_participants=data.required_participants,
            weekly_meetings=data.weekly_meetings,
            start_date=data.start_date,
            end_date=data.end_date,
            status=AppointmentStatus.ACTIVE.value,
        )

        self.db.add(appointment)
        await self.db.flush()
        await self.db.refresh(appointment)

        return appointment

    async def mark_completed_if_active(self, appointment_id: str) -> bool:
        """
        Move an appointment from active to completed.

        Only an active appointment is updated, so repeated calls are no-ops
        and a completed or cancelled appointment is never changed.
        """
        result = await self.db.execute(
            update(Appointment)
            .where(
                and_(
                    Appointment.id == appointment_id,
                    Appointment.status == AppointmentStatus.ACTIVE.value,
                )
            )
            .values(
                status=AppointmentStatus.COMPLETED.value,
                updated_at=datetime.now(timezone.utc),
            )
        )
        return self._get_rowcount(result) > 0
