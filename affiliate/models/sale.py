"""
Sale model.

A paid purchase keyed by its idempotency key. A key produces exactly one
row, and the row is only ever written together with its commissions.
"""

from datetime import UTC, datetime
from decimal import Decimal

from sqlalchemy import DateTime, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from affiliate.config.business_constants import REFERRAL_CODE_MAX_LENGTH
from affiliate.models.base import Base
from affiliate.models.types import MoneyType


class SaleStatus:
    """Sale status constants."""

    PAID = "paid"  # Terminal, refunds are not modeled


class Sale(Base):
    """Recorded purchase."""

    __tablename__ = "sales"
    __table_args__ = (
        Index("idx_sales_referrer", "referrer_id"),
    )

    # Idempotency key (external id or generated)
    id: Mapped[str] = mapped_column(String(128), primary_key=True)

    buyer_ref: Mapped[str] = mapped_column(String(255), nullable=False)

    gross_amount: Mapped[Decimal] = mapped_column(
        MoneyType,
        nullable=False,
        comment="Amount in the source currency (PEN)",
    )
    settlement_amount: Mapped[Decimal] = mapped_column(
        MoneyType,
        nullable=False,
        comment="Amount converted to the settlement currency (USD)",
    )

    # Only well-formed codes are kept; anything else is stored as NULL
    referral_code: Mapped[str | None] = mapped_column(
        String(REFERRAL_CODE_MAX_LENGTH), nullable=True
    )
    # Plain column: a removed referrer must not rewrite sale history
    referrer_id: Mapped[str | None] = mapped_column(
        String(128), nullable=True
    )

    status: Mapped[str] = mapped_column(
        String(16), nullable=False, default=SaleStatus.PAID
    )
    source: Mapped[str] = mapped_column(
        String(64), nullable=False, default="manual"
    )

    hold_until: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        nullable=False,
    )

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<Sale(id={self.id!r}, amount={self.settlement_amount}, "
            f"referrer={self.referrer_id!r}, status={self.status})>"
        )
