"""
CompletionMarker repository.

Data access layer for CompletionMarker model.
"""

from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from fuel_ledger.models.completion_marker import CompletionMarker
from fuel_ledger.repositories.base import BaseRepository


class CompletionMarkerRepository(BaseRepository[CompletionMarker]):
    """CompletionMarker repository with specific queries."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize completion marker repository."""
        super().__init__(CompletionMarker, session)

    async def insert_if_absent(
        self, user_id: str, action_id: str, amount: int, now: datetime
    ) -> bool:
        """
        Insert the marker unless the (user, action) pair already has one.

        Args:
            user_id: User ID
            action_id: Marker key
            amount: Amount paid with the claim
            now: Claim timestamp

        Returns:
            True if this call inserted the marker
        """
        stmt = (
            self.upsert()
            .values(user_id=user_id, action_id=action_id, amount=amount, created_at=now)
            .on_conflict_do_nothing(index_elements=["user_id", "action_id"])
            .returning(self.table.c.id)
        )
        result = await self.session.execute(stmt)
        return result.first() is not None

    async def exists_for(self, user_id: str, action_id: str) -> bool:
        """
        Check if the pair was already paid.

        Args:
            user_id: User ID
            action_id: Marker key

        Returns:
            True if a marker exists
        """
        return await self.count(user_id=user_id, action_id=action_id) > 0
