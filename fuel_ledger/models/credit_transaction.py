"""
CreditTransaction model.

Append-only log of every pool change. This log is the source of truth;
UserBalance pools are derived from it.
"""

from datetime import UTC, datetime

from sqlalchemy import BigInteger, DateTime, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from fuel_ledger.models.base import Base


# BIGINT primary keys only autoincrement on SQLite when declared INTEGER
IdType = BigInteger().with_variant(Integer, "sqlite")


class CreditTransaction(Base):
    """
    CreditTransaction entity.

    Attributes:
        id: Primary key
        user_id: Owner of the affected balance
        amount: Signed amount (credits positive, spends negative)
        pool: FuelPool value the amount applies to
        action_type: Catalog action or system operation that caused it
        description: Human-readable explanation
        created_at: When the change happened
    """

    __tablename__ = "credit_transactions"
    __table_args__ = (
        Index("idx_credit_transactions_user_created", "user_id", "created_at"),
        Index("idx_credit_transactions_user_pool", "user_id", "pool"),
    )

    id: Mapped[int] = mapped_column(
        IdType, primary_key=True, autoincrement=True
    )

    user_id: Mapped[str] = mapped_column(String(64), nullable=False)

    amount: Mapped[int] = mapped_column(BigInteger, nullable=False)
    pool: Mapped[str] = mapped_column(String(16), nullable=False)
    action_type: Mapped[str] = mapped_column(String(64), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        nullable=False,
    )

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<CreditTransaction(id={self.id}, user_id={self.user_id}, "
            f"amount={self.amount}, pool={self.pool}, action={self.action_type})>"
        )
