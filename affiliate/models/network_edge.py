"""
NetworkEdge model.

Denormalized read cache: one row per (ancestor, recruit) pair up to four
levels deep. The referrer_id on Participant stays the source of truth.
"""

from datetime import UTC, datetime

from sqlalchemy import (
    DateTime,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from affiliate.models.base import Base


class NetworkEdge(Base):
    """Recruit as seen from one of its ancestors."""

    __tablename__ = "network_edges"
    __table_args__ = (
        UniqueConstraint("owner_id", "member_id", name="uq_network_edge"),
    )

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )

    owner_id: Mapped[str] = mapped_column(
        ForeignKey("participants.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    member_id: Mapped[str] = mapped_column(
        ForeignKey("participants.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    member_name: Mapped[str] = mapped_column(String(255), nullable=False)
    member_tier: Mapped[str] = mapped_column(String(16), nullable=False)
    level: Mapped[int] = mapped_column(Integer, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        nullable=False,
    )

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<NetworkEdge(owner={self.owner_id!r}, member={self.member_id!r}, "
            f"level={self.level})>"
        )
