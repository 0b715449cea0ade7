"""
Idempotency guard.

Proves a one-time reward was paid by the existence of a completion
marker. The unique (user_id, action_id) key is enforced by the store, so
of any number of concurrent claims for one pair exactly one wins.
"""

from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from fuel_ledger.repositories.completion_marker_repository import (
    CompletionMarkerRepository,
)
from fuel_ledger.services.base_service import BaseService


class IdempotencyGuard(BaseService):
    """Claims (user, action) pairs exactly once."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)
        self.marker_repo = CompletionMarkerRepository(session)

    async def try_claim(
        self, user_id: str, action_id: str, amount: int, now: datetime
    ) -> bool:
        """
        Claim the pair for payment.

        The marker becomes visible to other requests only when the
        surrounding transaction commits, together with the credit it
        guards.

        Args:
            user_id: User being paid
            action_id: Marker key (action id or derived key such as
                ``referral:<user>``)
            amount: Amount about to be paid
            now: Claim timestamp

        Returns:
            True if claimed, False if the pair was already paid
        """
        claimed = await self.marker_repo.insert_if_absent(
            user_id=user_id, action_id=action_id, amount=amount, now=now
        )
        if not claimed:
            self.logger.info(
                "Completion already recorded",
                extra={"user_id": user_id, "action_id": action_id},
            )
        return claimed

    async def is_claimed(self, user_id: str, action_id: str) -> bool:
        """Whether the pair was already paid."""
        return await self.marker_repo.exists_for(user_id, action_id)
