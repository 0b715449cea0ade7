"""Fixtures shared by the integration tests."""

from dataclasses import dataclass

import pytest

from fuel_ledger.models.enums import FuelPool
from fuel_ledger.repositories.credit_transaction_repository import (
    CreditTransactionRepository,
)
from fuel_ledger.repositories.user_balance_repository import UserBalanceRepository


@dataclass
class LedgerState:
    """Cached pools next to the sums of the transaction log."""

    ephemeral: int
    permanent: int
    log_ephemeral: int
    log_permanent: int
    transactions: int

    @property
    def consistent(self) -> bool:
        return (
            self.ephemeral == self.log_ephemeral
            and self.permanent == self.log_permanent
        )


@pytest.fixture
def ledger_state(session_maker):
    """
    Read one user's committed ledger state in a throwaway session.

    Usage:
        state = await ledger_state("alice")
    """

    async def _read(user_id: str) -> LedgerState:
        async with session_maker() as session:
            balance = await UserBalanceRepository(session).get_by_user(user_id)
            transaction_repo = CreditTransactionRepository(session)
            sums = await transaction_repo.sum_by_pool(user_id)
            transactions = await transaction_repo.count(user_id=user_id)

            assert balance is not None, f"No balance for {user_id}"
            # Copy the pools out before rollback expires the instance
            state = LedgerState(
                ephemeral=balance.ephemeral_pool,
                permanent=balance.permanent_pool,
                log_ephemeral=sums[FuelPool.EPHEMERAL],
                log_permanent=sums[FuelPool.PERMANENT],
                transactions=transactions,
            )
            await session.rollback()

        return state

    return _read
