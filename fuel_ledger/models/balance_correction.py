"""
BalanceCorrection model.

Audit trail of reconciliation fixes: every time a cached pool is rewritten
from the transaction log, one row explains why.
"""

from datetime import UTC, datetime

from sqlalchemy import BigInteger, DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from fuel_ledger.models.base import Base


class BalanceCorrection(Base):
    """
    BalanceCorrection entity.

    Attributes:
        id: Primary key
        user_id: Corrected balance owner
        pool: FuelPool value that diverged
        cached_before: Pool value before the correction
        ledger_sum: Sum of the transaction log for the pool
        delta: ledger_sum - cached_before
        reason: Why the correction was made
        created_at: When it was applied
    """

    __tablename__ = "balance_corrections"

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    pool: Mapped[str] = mapped_column(String(16), nullable=False)
    cached_before: Mapped[int] = mapped_column(BigInteger, nullable=False)
    ledger_sum: Mapped[int] = mapped_column(BigInteger, nullable=False)
    delta: Mapped[int] = mapped_column(BigInteger, nullable=False)
    reason: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        nullable=False,
    )

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<BalanceCorrection(user_id={self.user_id}, pool={self.pool}, "
            f"delta={self.delta})>"
        )
