"""
UserBalance model.

One row per user holding the two fuel pools.
"""

from datetime import UTC, datetime

from sqlalchemy import (
    BigInteger,
    Boolean,
    CheckConstraint,
    DateTime,
    Integer,
    String,
    true,
)
from sqlalchemy.orm import Mapped, mapped_column

from fuel_ledger.models.base import Base


class UserBalance(Base):
    """
    UserBalance entity.

    The pools are a cache of the transaction log: for every user and pool
    the sum of CreditTransaction amounts equals the stored value. Only
    LedgerCore writes this table.

    Attributes:
        id: Primary key
        user_id: External user identifier
        ephemeral_pool: Short-lived fuel, refilled daily
        permanent_pool: Fuel that never expires
        last_window_reset_period: YYYY-MM of the last monthly counter rollover
        last_refill_date: YYYY-MM-DD of the last ephemeral refill
        referral_code: Code other users redeem to be attributed to this user
        is_active: False once the account is deleted (soft-disable)
        disabled_at: When the balance was disabled
        created_at: When the balance was provisioned
        updated_at: Last pool change
    """

    __tablename__ = "user_balances"
    __table_args__ = (
        CheckConstraint("ephemeral_pool >= 0", name="ephemeral_non_negative"),
        CheckConstraint("permanent_pool >= 0", name="permanent_non_negative"),
    )

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )

    user_id: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
        unique=True,
    )

    ephemeral_pool: Mapped[int] = mapped_column(
        BigInteger,
        nullable=False,
        default=0,
        server_default="0",
    )
    permanent_pool: Mapped[int] = mapped_column(
        BigInteger,
        nullable=False,
        default=0,
        server_default="0",
    )

    last_window_reset_period: Mapped[str | None] = mapped_column(
        String(7),
        nullable=True,
        comment="YYYY-MM of the last monthly window rollover",
    )
    last_refill_date: Mapped[str | None] = mapped_column(
        String(10),
        nullable=True,
        comment="YYYY-MM-DD of the last ephemeral refill",
    )

    referral_code: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        unique=True,
    )

    is_active: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=True,
        server_default=true(),
    )
    disabled_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        nullable=False,
    )

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<UserBalance(user_id={self.user_id}, ephemeral={self.ephemeral_pool}, "
            f"permanent={self.permanent_pool}, active={self.is_active})>"
        )

    @property
    def total(self) -> int:
        """Fuel available across both pools."""
        return self.ephemeral_pool + self.permanent_pool
