"""
UserBalance repository.

Data access layer for UserBalance model. Only LedgerCore may call the
mutating methods.
"""

from datetime import datetime

from sqlalchemy import or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from fuel_ledger.models.enums import FuelPool
from fuel_ledger.models.user_balance import UserBalance
from fuel_ledger.repositories.base import BaseRepository


POOL_COLUMNS = {
    FuelPool.EPHEMERAL: UserBalance.ephemeral_pool,
    FuelPool.PERMANENT: UserBalance.permanent_pool,
}


class UserBalanceRepository(BaseRepository[UserBalance]):
    """UserBalance repository with specific queries."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize user balance repository."""
        super().__init__(UserBalance, session)

    async def get_by_user(self, user_id: str) -> UserBalance | None:
        """
        Get balance by external user ID.

        Args:
            user_id: User ID

        Returns:
            Balance or None if never provisioned
        """
        # Pool updates bypass the identity map, so always reload
        stmt = (
            select(UserBalance)
            .where(UserBalance.user_id == user_id)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_for_update(self, user_id: str) -> UserBalance | None:
        """
        Get active balance and lock its row until the transaction ends.

        Args:
            user_id: User ID

        Returns:
            Locked balance or None
        """
        stmt = (
            select(UserBalance)
            .where(UserBalance.user_id == user_id, UserBalance.is_active.is_(True))
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_referral_code(self, code: str) -> UserBalance | None:
        """
        Get active balance owning a referral code.

        Args:
            code: Referral code

        Returns:
            Balance or None if the code is unknown or its owner is disabled
        """
        stmt = select(UserBalance).where(
            UserBalance.referral_code == code,
            UserBalance.is_active.is_(True),
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def insert_if_absent(
        self, user_id: str, referral_code: str, now: datetime
    ) -> bool:
        """
        Provision an empty balance unless one exists.

        Conflicts on either unique key (user or referral code) are
        swallowed by the statement itself.

        Args:
            user_id: User ID
            referral_code: Freshly generated referral code
            now: Creation timestamp

        Returns:
            True if this call created the row
        """
        stmt = (
            self.upsert()
            .values(
                user_id=user_id,
                referral_code=referral_code,
                ephemeral_pool=0,
                permanent_pool=0,
                is_active=True,
                created_at=now,
                updated_at=now,
            )
            .on_conflict_do_nothing()
            .returning(self.table.c.id)
        )
        result = await self.session.execute(stmt)
        return result.first() is not None

    async def change_pools(
        self,
        user_id: str,
        now: datetime,
        ephemeral_delta: int = 0,
        permanent_delta: int = 0,
    ) -> tuple[int, int] | None:
        """
        Atomically add signed deltas to the pools of an active balance.

        Args:
            user_id: User ID
            now: Update timestamp
            ephemeral_delta: Change of the ephemeral pool
            permanent_delta: Change of the permanent pool

        Returns:
            (ephemeral_pool, permanent_pool) after the change,
            or None if there is no active balance
        """
        stmt = (
            update(UserBalance)
            .where(UserBalance.user_id == user_id, UserBalance.is_active.is_(True))
            .values(
                ephemeral_pool=UserBalance.ephemeral_pool + ephemeral_delta,
                permanent_pool=UserBalance.permanent_pool + permanent_delta,
                updated_at=now,
            )
            .returning(UserBalance.ephemeral_pool, UserBalance.permanent_pool)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        row = result.first()
        if row is None:
            return None
        return row.ephemeral_pool, row.permanent_pool

    async def set_pool(
        self, user_id: str, pool: FuelPool, value: int, now: datetime
    ) -> None:
        """
        Overwrite one pool (reconciliation only).

        Args:
            user_id: User ID
            pool: Pool to overwrite
            value: New value
            now: Update timestamp
        """
        stmt = (
            update(UserBalance)
            .where(UserBalance.user_id == user_id)
            .values({POOL_COLUMNS[pool]: value, UserBalance.updated_at: now})
            .execution_options(synchronize_session=False)
        )
        await self.session.execute(stmt)

    async def mark_refilled(self, user_id: str, day: str) -> None:
        """
        Record the date of the last ephemeral refill.

        Args:
            user_id: User ID
            day: YYYY-MM-DD
        """
        stmt = (
            update(UserBalance)
            .where(UserBalance.user_id == user_id)
            .values(last_refill_date=day)
            .execution_options(synchronize_session=False)
        )
        await self.session.execute(stmt)

    async def claim_window_period(self, user_id: str, period_key: str) -> bool:
        """
        Move the monthly rollover marker to period_key if it is elsewhere.

        The conditional UPDATE lets exactly one concurrent caller win the
        rollover for a period.

        Args:
            user_id: User ID
            period_key: Current YYYY-MM

        Returns:
            True if this call performed the rollover
        """
        stmt = (
            update(UserBalance)
            .where(
                UserBalance.user_id == user_id,
                or_(
                    UserBalance.last_window_reset_period.is_(None),
                    UserBalance.last_window_reset_period != period_key,
                ),
            )
            .values(last_window_reset_period=period_key)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount > 0

    async def deactivate(self, user_id: str, now: datetime) -> bool:
        """
        Soft-disable an active balance.

        Args:
            user_id: User ID
            now: Disable timestamp

        Returns:
            True if a balance was disabled
        """
        stmt = (
            update(UserBalance)
            .where(UserBalance.user_id == user_id, UserBalance.is_active.is_(True))
            .values(is_active=False, disabled_at=now, updated_at=now)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount > 0

    async def get_active_user_ids(
        self, after_id: int = 0, limit: int = 500
    ) -> list[tuple[int, str]]:
        """
        Page through active balances by primary key.

        Args:
            after_id: Last primary key of the previous page
            limit: Page size

        Returns:
            List of (id, user_id) pairs
        """
        stmt = (
            select(UserBalance.id, UserBalance.user_id)
            .where(UserBalance.is_active.is_(True), UserBalance.id > after_id)
            .order_by(UserBalance.id)
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return [(row.id, row.user_id) for row in result.all()]
