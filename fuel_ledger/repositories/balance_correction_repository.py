"""
BalanceCorrection repository.

Data access layer for the reconciliation audit trail.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from fuel_ledger.models.balance_correction import BalanceCorrection
from fuel_ledger.repositories.base import BaseRepository


class BalanceCorrectionRepository(BaseRepository[BalanceCorrection]):
    """BalanceCorrection repository with specific queries."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize balance correction repository."""
        super().__init__(BalanceCorrection, session)

    async def get_by_user(self, user_id: str) -> list[BalanceCorrection]:
        """
        Get corrections applied to a user's balance.

        Args:
            user_id: User ID

        Returns:
            Corrections, oldest first
        """
        return await self.find_all(user_id=user_id)
