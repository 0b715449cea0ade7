"""
Referral repository.

Data access layer for Referral model.
"""

from datetime import datetime

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from fuel_ledger.models.referral import Referral
from fuel_ledger.repositories.base import BaseRepository


class ReferralRepository(BaseRepository[Referral]):
    """Referral repository with specific queries."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize referral repository."""
        super().__init__(Referral, session)

    async def insert_if_absent(
        self, referrer_id: str, referred_id: str, now: datetime
    ) -> bool:
        """
        Record the relationship unless the referred user already has one.

        Args:
            referrer_id: Code owner
            referred_id: New user
            now: Redemption timestamp

        Returns:
            True if this call created the record
        """
        stmt = (
            self.upsert()
            .values(
                referrer_id=referrer_id,
                referred_id=referred_id,
                referrer_rewarded=False,
                referred_rewarded=False,
                created_at=now,
            )
            .on_conflict_do_nothing(index_elements=["referred_id"])
            .returning(self.table.c.id)
        )
        result = await self.session.execute(stmt)
        return result.first() is not None

    async def get_by_referred(self, referred_id: str) -> Referral | None:
        """
        Get the relationship of a referred user.

        Args:
            referred_id: Referred user ID

        Returns:
            Referral or None
        """
        stmt = (
            select(Referral)
            .where(Referral.referred_id == referred_id)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def mark_rewarded(
        self,
        referred_id: str,
        referrer: bool = False,
        referred: bool = False,
    ) -> None:
        """
        Flip payment flags.

        Args:
            referred_id: Referred user ID
            referrer: Set referrer_rewarded
            referred: Set referred_rewarded
        """
        values: dict[str, bool] = {}
        if referrer:
            values["referrer_rewarded"] = True
        if referred:
            values["referred_rewarded"] = True
        if not values:
            return

        stmt = (
            update(Referral)
            .where(Referral.referred_id == referred_id)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        await self.session.execute(stmt)

    async def count_by_referrer(self, referrer_id: str) -> int:
        """
        Count users attributed to a referrer.

        Args:
            referrer_id: Referrer user ID

        Returns:
            Number of referrals
        """
        return await self.count(referrer_id=referrer_id)
