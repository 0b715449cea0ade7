"""
CreditTransaction repository.

Data access layer for the append-only transaction log.
"""

from datetime import datetime

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from fuel_ledger.models.credit_transaction import CreditTransaction
from fuel_ledger.models.enums import FuelPool
from fuel_ledger.repositories.base import BaseRepository


class CreditTransactionRepository(BaseRepository[CreditTransaction]):
    """CreditTransaction repository with specific queries."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize credit transaction repository."""
        super().__init__(CreditTransaction, session)

    async def append(
        self,
        user_id: str,
        amount: int,
        pool: FuelPool,
        action_type: str,
        description: str,
        created_at: datetime,
    ) -> CreditTransaction:
        """
        Append one record to the log.

        Args:
            user_id: Balance owner
            amount: Signed amount
            pool: Affected pool
            action_type: Cause of the change
            description: Human-readable explanation
            created_at: Timestamp shared with the balance update

        Returns:
            Created record
        """
        return await self.create(
            user_id=user_id,
            amount=amount,
            pool=pool.value,
            action_type=action_type,
            description=description,
            created_at=created_at,
        )

    async def sum_by_pool(self, user_id: str) -> dict[FuelPool, int]:
        """
        Sum the log per pool in a single query.

        Args:
            user_id: Balance owner

        Returns:
            Dict mapping every pool to its ledger sum (0 if no records)
        """
        stmt = (
            select(
                CreditTransaction.pool,
                func.coalesce(func.sum(CreditTransaction.amount), 0).label("total"),
            )
            .where(CreditTransaction.user_id == user_id)
            .group_by(CreditTransaction.pool)
        )
        result = await self.session.execute(stmt)

        sums = {pool: 0 for pool in FuelPool}
        for row in result.all():
            sums[FuelPool(row.pool)] = int(row.total)
        return sums

    async def get_history(
        self, user_id: str, limit: int = 50, offset: int = 0
    ) -> tuple[list[CreditTransaction], int]:
        """
        Get a user's records newest first with the total count.

        Args:
            user_id: Balance owner
            limit: Page size
            offset: Records to skip

        Returns:
            Tuple of (records, total_count)
        """
        total = await self.count(user_id=user_id)

        stmt = (
            select(CreditTransaction)
            .where(CreditTransaction.user_id == user_id)
            .order_by(CreditTransaction.created_at.desc(), CreditTransaction.id.desc())
            .offset(offset)
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all()), total
