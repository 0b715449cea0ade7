"""
WindowCount model.

Admissions of a capped recurring action per user per calendar period.
"""

from datetime import UTC, datetime

from sqlalchemy import DateTime, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from fuel_ledger.models.base import Base


class WindowCount(Base):
    """
    WindowCount entity.

    Attributes:
        id: Primary key
        user_id: Counted user
        action_id: Capped action
        period_kind: PeriodKind value (daily / monthly)
        period_key: YYYY-MM-DD or YYYY-MM
        count: Admissions in the period
        updated_at: Last admission
    """

    __tablename__ = "window_counts"
    __table_args__ = (
        UniqueConstraint(
            "user_id", "action_id", "period_key", name="uq_window_counts_user_action_period"
        ),
        Index("idx_window_counts_user_kind", "user_id", "period_kind"),
    )

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )
    user_id: Mapped[str] = mapped_column(String(64), nullable=False)
    action_id: Mapped[str] = mapped_column(String(64), nullable=False)
    period_kind: Mapped[str] = mapped_column(String(16), nullable=False)
    period_key: Mapped[str] = mapped_column(String(10), nullable=False)
    count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        nullable=False,
    )

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<WindowCount(user_id={self.user_id}, action_id={self.action_id}, "
            f"period={self.period_key}, count={self.count})>"
        )
