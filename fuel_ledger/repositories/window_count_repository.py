"""
WindowCount repository.

Data access layer for WindowCount model.
"""

from datetime import datetime

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from fuel_ledger.models.enums import PeriodKind
from fuel_ledger.models.window_count import WindowCount
from fuel_ledger.repositories.base import BaseRepository


class WindowCountRepository(BaseRepository[WindowCount]):
    """WindowCount repository with specific queries."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize window count repository."""
        super().__init__(WindowCount, session)

    async def increment_below(
        self,
        user_id: str,
        action_id: str,
        period_kind: PeriodKind,
        period_key: str,
        cap: int,
        now: datetime,
    ) -> int | None:
        """
        Increment the period counter only while it is below cap.

        Inserts the row at 1 when absent; otherwise adds 1 guarded by
        ``count < cap``. One statement, so the check and the increment
        cannot interleave with another caller.

        Args:
            user_id: User ID
            action_id: Capped action
            period_kind: Daily or monthly
            period_key: YYYY-MM-DD or YYYY-MM
            cap: Maximum admissions in the period (>= 1)
            now: Admission timestamp

        Returns:
            New count, or None if the cap was already reached
        """
        table = self.table
        insert_stmt = self.upsert().values(
            user_id=user_id,
            action_id=action_id,
            period_kind=period_kind.value,
            period_key=period_key,
            count=1,
            updated_at=now,
        )
        stmt = insert_stmt.on_conflict_do_update(
            index_elements=["user_id", "action_id", "period_key"],
            set_={"count": table.c["count"] + 1, "updated_at": now},
            where=table.c["count"] < cap,
        ).returning(table.c["count"])

        result = await self.session.execute(stmt)
        row = result.first()
        return None if row is None else row[0]

    async def get_count(self, user_id: str, action_id: str, period_key: str) -> int:
        """
        Current admissions in a period.

        Args:
            user_id: User ID
            action_id: Capped action
            period_key: YYYY-MM-DD or YYYY-MM

        Returns:
            Count (0 if the period has no row)
        """
        stmt = select(WindowCount.count).where(
            WindowCount.user_id == user_id,
            WindowCount.action_id == action_id,
            WindowCount.period_key == period_key,
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none() or 0

    async def reset_other_periods(
        self, user_id: str, period_kind: PeriodKind, keep_period_key: str
    ) -> int:
        """
        Zero a user's counters of one kind outside the current period.

        Args:
            user_id: User ID
            period_kind: Counter kind to reset
            keep_period_key: Period left untouched

        Returns:
            Number of counters reset
        """
        stmt = (
            update(WindowCount)
            .where(
                WindowCount.user_id == user_id,
                WindowCount.period_kind == period_kind.value,
                WindowCount.period_key != keep_period_key,
                WindowCount.count > 0,
            )
            .values(count=0)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount
