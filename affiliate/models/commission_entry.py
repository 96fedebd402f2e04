"""
CommissionEntry model.

One commission earned by one beneficiary at one chain level of a sale.
Lifecycle: pending -> approved, once, after hold_until has passed.
"""

from datetime import UTC, datetime
from decimal import Decimal

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from affiliate.models.base import Base
from affiliate.models.types import MoneyType, PercentType


class CommissionStatus:
    """Commission status constants."""

    PENDING = "pending"  # Held for the refund window
    APPROVED = "approved"  # Released to the available balance


class CommissionEntry(Base):
    """Commission ledger entry."""

    __tablename__ = "commission_entries"
    __table_args__ = (
        UniqueConstraint("sale_id", "level", name="uq_commission_sale_level"),
        CheckConstraint(
            "level >= 1 AND level <= 4", name="check_commission_level_range"
        ),
        CheckConstraint("amount >= 0", name="check_commission_amount_non_negative"),
        Index(
            "idx_commission_beneficiary_status_hold",
            "beneficiary_id",
            "status",
            "hold_until",
        ),
    )

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )

    sale_id: Mapped[str] = mapped_column(
        ForeignKey("sales.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    beneficiary_id: Mapped[str] = mapped_column(
        ForeignKey("participants.id", ondelete="CASCADE"),
        nullable=False,
    )

    level: Mapped[int] = mapped_column(Integer, nullable=False)
    percent: Mapped[Decimal] = mapped_column(PercentType, nullable=False)
    amount: Mapped[Decimal] = mapped_column(MoneyType, nullable=False)

    status: Mapped[str] = mapped_column(
        String(16), nullable=False, default=CommissionStatus.PENDING
    )
    hold_until: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
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
    released_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<CommissionEntry(id={self.id}, sale={self.sale_id!r}, "
            f"beneficiary={self.beneficiary_id!r}, level={self.level}, "
            f"amount={self.amount}, status={self.status})>"
        )
