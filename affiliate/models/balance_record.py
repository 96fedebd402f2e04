"""
BalanceRecord model.

One row per participant. Every change is an additive increment so
concurrent credits never overwrite each other:
total_earnings == pending_balance + available_balance.
"""

from datetime import UTC, datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from affiliate.config.tiers import TierType
from affiliate.models.base import Base
from affiliate.models.types import MoneyType

if TYPE_CHECKING:
    from affiliate.models.participant import Participant


class BalanceRecord(Base):
    """Running commission totals for a participant."""

    __tablename__ = "balance_records"
    __table_args__ = (
        CheckConstraint(
            'total_earnings >= 0',
            name='check_balance_total_earnings_non_negative'
        ),
        CheckConstraint(
            'pending_balance >= 0',
            name='check_balance_pending_non_negative'
        ),
        CheckConstraint(
            'available_balance >= 0',
            name='check_balance_available_non_negative'
        ),
    )

    participant_id: Mapped[str] = mapped_column(
        ForeignKey("participants.id", ondelete="CASCADE"),
        primary_key=True,
    )

    total_earnings: Mapped[Decimal] = mapped_column(
        MoneyType, default=Decimal("0"), nullable=False
    )
    pending_balance: Mapped[Decimal] = mapped_column(
        MoneyType, default=Decimal("0"), nullable=False
    )
    available_balance: Mapped[Decimal] = mapped_column(
        MoneyType, default=Decimal("0"), nullable=False
    )

    # Snapshot of the participant tier, refreshed on tier changes
    tier: Mapped[str] = mapped_column(
        String(16), nullable=False, default=TierType.BASIC.value
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC),
        nullable=False,
    )

    participant: Mapped["Participant"] = relationship(
        "Participant", back_populates="balance"
    )

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<BalanceRecord(participant_id={self.participant_id!r}, "
            f"total={self.total_earnings}, pending={self.pending_balance}, "
            f"available={self.available_balance})>"
        )
