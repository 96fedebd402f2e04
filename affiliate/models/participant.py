"""
Participant model.

A registered affiliate. The referrer link is written once at creation and
never changed afterwards; together the links form a forest.
"""

from datetime import UTC, datetime
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from affiliate.config.business_constants import REFERRAL_CODE_MAX_LENGTH
from affiliate.config.tiers import TierType, parse_tier
from affiliate.config.tiers import tier_label as get_tier_label
from affiliate.models.base import Base

if TYPE_CHECKING:
    from affiliate.models.balance_record import BalanceRecord


class Participant(Base):
    """Participant model - affiliates identified by an opaque id."""

    __tablename__ = "participants"
    __table_args__ = (
        Index("idx_participants_created", "created_at", "id"),
    )

    # Opaque identity from the authentication provider
    id: Mapped[str] = mapped_column(String(128), primary_key=True)

    email: Mapped[str] = mapped_column(
        String(255), nullable=False, default=""
    )
    full_name: Mapped[str] = mapped_column(
        String(255), nullable=False, default=""
    )

    tier: Mapped[str] = mapped_column(
        String(16), nullable=False, default=TierType.BASIC.value
    )

    referral_code: Mapped[str] = mapped_column(
        String(REFERRAL_CODE_MAX_LENGTH), nullable=False, unique=True, index=True
    )
    referrer_id: Mapped[str | None] = mapped_column(
        ForeignKey("participants.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    disabled: Mapped[bool] = mapped_column(
        Boolean, default=False, nullable=False
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC),
        nullable=False,
    )

    balance: Mapped["BalanceRecord | None"] = relationship(
        "BalanceRecord",
        back_populates="participant",
        uselist=False,
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<Participant(id={self.id!r}, tier={self.tier}, "
            f"code={self.referral_code}, referrer={self.referrer_id!r})>"
        )

    @property
    def tier_type(self) -> TierType:
        """Tier as enum."""
        return parse_tier(self.tier)

    @property
    def tier_label(self) -> str:
        """Tier display name (raw value when the stored tier is unknown)."""
        try:
            return get_tier_label(self.tier_type)
        except ValueError:
            return self.tier

    @property
    def display_name(self) -> str:
        """Name shown to other participants."""
        return self.full_name or self.email or "Unnamed"
