"""
CompletionMarker model.

Proof that a one-time reward was paid. One row per (user, action), ever.
"""

from datetime import UTC, datetime

from sqlalchemy import BigInteger, DateTime, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from fuel_ledger.models.base import Base


class CompletionMarker(Base):
    """
    CompletionMarker entity.

    Attributes:
        id: Primary key
        user_id: User who was paid
        action_id: One-time action, or a derived key such as referral:<user>
        amount: Amount awarded with the claim
        created_at: When the claim was made
    """

    __tablename__ = "completion_markers"
    __table_args__ = (
        UniqueConstraint("user_id", "action_id", name="uq_completion_markers_user_action"),
    )

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )
    user_id: Mapped[str] = mapped_column(String(64), nullable=False)
    action_id: Mapped[str] = mapped_column(String(128), nullable=False)
    amount: Mapped[int] = mapped_column(BigInteger, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        nullable=False,
    )

    def __repr__(self) -> str:
        """String representation."""
        return f"<CompletionMarker(user_id={self.user_id}, action_id={self.action_id})>"
