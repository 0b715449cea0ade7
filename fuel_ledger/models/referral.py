"""
Referral model.

Referrer -> referred relationship. A user can be referred at most once.
"""

from datetime import UTC, datetime

from sqlalchemy import Boolean, DateTime, Integer, String, false
from sqlalchemy.orm import Mapped, mapped_column

from fuel_ledger.models.base import Base


class Referral(Base):
    """
    Referral entity.

    Attributes:
        id: Primary key
        referrer_id: User whose code was redeemed
        referred_id: New user who redeemed it (unique)
        referrer_rewarded: Referrer bonus has been paid
        referred_rewarded: Welcome bonus has been paid
        created_at: When the code was redeemed
    """

    __tablename__ = "referrals"

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )
    referrer_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    referred_id: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)
    referrer_rewarded: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=false()
    )
    referred_rewarded: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=false()
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        nullable=False,
    )

    def __repr__(self) -> str:
        """String representation."""
        return f"<Referral(referrer_id={self.referrer_id}, referred_id={self.referred_id})>"

    @property
    def is_settled(self) -> bool:
        """Both payout flags are set."""
        return self.referrer_rewarded and self.referred_rewarded
