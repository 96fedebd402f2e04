"""
ActivityNote model.

Display-only feed entries for a participant dashboard. Not ledger facts.
"""

from datetime import UTC, datetime

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from affiliate.models.base import Base


class ActivityNote(Base):
    """Dashboard activity feed entry."""

    __tablename__ = "activity_notes"
    __table_args__ = (
        Index("idx_activity_participant_created", "participant_id", "created_at"),
    )

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )

    participant_id: Mapped[str] = mapped_column(
        ForeignKey("participants.id", ondelete="CASCADE"),
        nullable=False,
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    action: Mapped[str] = mapped_column(String(255), nullable=False)
    label: Mapped[str] = mapped_column(String(64), nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        nullable=False,
    )

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<ActivityNote(participant={self.participant_id!r}, "
            f"action={self.action!r})>"
        )
