"""
Activity repository.

Data access layer for ActivityNote model.
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from affiliate.models.activity_note import ActivityNote
from affiliate.repositories.base import BaseRepository


class ActivityRepository(BaseRepository[ActivityNote]):
    """Activity feed repository."""

    def __init__(self, session: AsyncSession, timeout: float | None = None) -> None:
        """Initialize activity repository."""
        super().__init__(ActivityNote, session, timeout)

    async def get_recent(
        self, participant_id: str, limit: int
    ) -> list[ActivityNote]:
        """
        Get newest activity notes first.

        Args:
            participant_id: Participant id
            limit: Max number of notes

        Returns:
            List of notes
        """
        stmt = (
            select(ActivityNote)
            .where(ActivityNote.participant_id == participant_id)
            .order_by(ActivityNote.created_at.desc(), ActivityNote.id.desc())
            .limit(limit)
        )
        result = await self._execute(stmt, "activity_notes.recent")
        return list(result.scalars().all())
