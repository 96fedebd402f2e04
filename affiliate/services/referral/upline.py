"""
Upline walker.

Follows referrer links upward from a participant.
"""

from dataclasses import dataclass

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from affiliate.config.business_constants import MAX_COMMISSION_LEVEL
from affiliate.models.participant import Participant
from affiliate.repositories.participant_repository import ParticipantRepository


@dataclass(frozen=True)
class UplineSummary:
    """Public view of a participant's direct referrer."""

    id: str
    name: str
    tier: str
    referral_code: str


class UplineWalker:
    """Walks the referrer chain of a participant."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize upline walker."""
        self.session = session
        self.participant_repo = ParticipantRepository(session)

    async def get_immediate_upline(
        self, participant_id: str
    ) -> UplineSummary | None:
        """
        Get the direct referrer's public summary.

        Args:
            participant_id: Participant id

        Returns:
            UplineSummary or None if there is no (existing) referrer
        """
        participant = await self.participant_repo.get_by_id(participant_id)
        if participant is None or not participant.referrer_id:
            return None

        referrer = await self.participant_repo.get_by_id(participant.referrer_id)
        if referrer is None:
            return None

        return UplineSummary(
            id=referrer.id,
            name=referrer.full_name or referrer.email or "",
            tier=referrer.tier_label,
            referral_code=referrer.referral_code,
        )

    async def walk_from(
        self, first: Participant, max_level: int = MAX_COMMISSION_LEVEL
    ) -> list[tuple[int, Participant]]:
        """
        Build a chain where `first` is level 1.

        Args:
            first: Participant at level 1
            max_level: Deepest level to include

        Returns:
            [(level, participant)] with increasing level
        """
        chain: list[tuple[int, Participant]] = []
        current: Participant | None = first
        seen: set[str] = set()

        for level in range(1, max_level + 1):
            if current is None or current.id in seen:
                break

            chain.append((level, current))
            seen.add(current.id)

            if not current.referrer_id or level == max_level:
                break

            next_id = current.referrer_id
            current = await self.participant_repo.get_by_id(next_id)
            if current is None:
                logger.warning(
                    "Upline chain truncated: referrer missing",
                    extra={"missing_id": next_id, "level": level + 1},
                )

        return chain

    async def walk_upline_chain(
        self, start_id: str, max_level: int = MAX_COMMISSION_LEVEL
    ) -> list[tuple[int, Participant]]:
        """
        Get the ancestors of a participant.

        Starts at the direct referrer (level 1) and follows referrer links
        for at most max_level hops, stopping early at a root or at a
        missing document.

        Args:
            start_id: Participant id
            max_level: Maximum number of hops

        Returns:
            [(level, participant)] with increasing level
        """
        start = await self.participant_repo.get_by_id(start_id)
        if start is None or not start.referrer_id:
            return []

        referrer = await self.participant_repo.get_by_id(start.referrer_id)
        if referrer is None:
            return []

        chain = await self.walk_from(referrer, max_level)

        logger.debug(
            "Upline chain retrieved",
            extra={
                "participant_id": start_id,
                "max_level": max_level,
                "chain_length": len(chain),
            },
        )

        return chain
