"""
Voter repository for database operations.

Voters are identified by (appointment_id, name); names are trimmed by the
caller before they reach this layer.
"""

from datetime import datetime, timezone
from typing import Optional
from uuid import uuid4

from sqlalchemy import and_, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from models.voter import Voter


class VoterRepository:
    """Repository for voter database operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_name(
        self,
        appointment_id: str,
        name: str,
        for_update: bool = False,
    ) -> Optional[Voter]:
        """
        Get the voter registered under ``name`` for an appointment.

        With ``for_update`` the row is locked until the transaction ends, which
        serializes concurrent re-votes under the same name.
        """
        query = select(Voter).where(
            and_(
                Voter.appointment_id == appointment_id,
                Voter.name == name,
            )
        )
        if for_update:
            query = query.with_for_update()

        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def count_by_appointment(self, appointment_id: str) -> int:
        """Number of distinct voters of an appointment."""
        result = await self.db.execute(select(func.count(Voter.id)).where(Voter.appointment_id == appointment_id))
        return result.scalar() or 0

    async def create(self, appointment_id: str, name: str) -> Voter:
        """Register a new voter."""
        voter = Voter(
            id=str(uuid4()),
            appointment_id=appointment_id,
            name=name,
            voted_at=datetime.now(timezone.utc),
        )

        self.db.add(voter)
        await self.db.flush()
        await self.db.refresh(voter)

        return voter

    async def touch(self, voter: Voter) -> Voter:
        """Bump the voter's timestamp after a re-vote."""
        voter.voted_at = datetime.now(timezone.utc)
        await self.db.flush()
        return voter
