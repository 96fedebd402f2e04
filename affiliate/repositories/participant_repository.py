"""
Participant repository.

Data access layer for Participant model.
"""

from datetime import datetime

from sqlalchemy import and_, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from affiliate.models.participant import Participant
from affiliate.repositories.base import BaseRepository


class ParticipantRepository(BaseRepository[Participant]):
    """Participant repository with specific queries."""

    def __init__(self, session: AsyncSession, timeout: float | None = None) -> None:
        """Initialize participant repository."""
        super().__init__(Participant, session, timeout)

    async def get_by_referral_code(
        self, referral_code: str
    ) -> Participant | None:
        """
        Get participant by referral code (exact match).

        Args:
            referral_code: Normalized referral code

        Returns:
            Participant or None
        """
        return await self.get_by(referral_code=referral_code)

    async def get_by_referrer_ids(
        self, referrer_ids: list[str]
    ) -> list[Participant]:
        """
        Get participants whose referrer is one of the given ids.

        Callers keep the id list within the membership query limit.

        Args:
            referrer_ids: Referrer ids

        Returns:
            Participants ordered by creation time
        """
        if not referrer_ids:
            return []

        stmt = (
            select(Participant)
            .where(Participant.referrer_id.in_(referrer_ids))
            .order_by(Participant.created_at.asc(), Participant.id.asc())
        )
        result = await self._execute(stmt, "participants.by_referrers")
        return list(result.scalars().all())

    async def get_many(self, ids: list[str]) -> dict[str, Participant]:
        """
        Get participants by id.

        Args:
            ids: Participant ids

        Returns:
            Dict mapping id to participant (missing ids omitted)
        """
        if not ids:
            return {}

        stmt = select(Participant).where(Participant.id.in_(ids))
        result = await self._execute(stmt, "participants.get_many")
        return {p.id: p for p in result.scalars().all()}

    async def list_page(
        self,
        limit: int,
        after: tuple[datetime, str] | None = None,
    ) -> list[Participant]:
        """
        List participants newest first using keyset pagination.

        Args:
            limit: Page size
            after: (created_at, id) of the last row of the previous page

        Returns:
            Page of participants
        """
        stmt = select(Participant).order_by(
            Participant.created_at.desc(), Participant.id.desc()
        )

        if after is not None:
            created_at, last_id = after
            stmt = stmt.where(
                or_(
                    Participant.created_at < created_at,
                    and_(
                        Participant.created_at == created_at,
                        Participant.id < last_id,
                    ),
                )
            )

        result = await self._execute(stmt.limit(limit), "participants.list_page")
        return list(result.scalars().all())

    async def set_fields(self, participant_id: str, **data: object) -> bool:
        """
        Merge fields into a participant row.

        Args:
            participant_id: Participant id
            **data: Column values

        Returns:
            True if a row was updated
        """
        stmt = (
            update(Participant)
            .where(Participant.id == participant_id)
            .values(**data)
        )
        result = await self._execute(stmt, "participants.set_fields")
        return (result.rowcount or 0) > 0
