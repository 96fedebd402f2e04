"""
Downline builder.

Breadth-first expansion of a participant's recruits, level by level.
"""

from dataclasses import dataclass, field
from decimal import Decimal

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from affiliate.config.business_constants import MAX_COMMISSION_LEVEL
from affiliate.config.settings import settings
from affiliate.models.participant import Participant
from affiliate.repositories.participant_repository import ParticipantRepository


@dataclass(frozen=True)
class DownlineMember:
    """Recruit row as shown in the network view."""

    id: str
    name: str
    tier: str
    level: int
    earnings: Decimal = Decimal("0")


@dataclass
class Downline:
    """Result of a downline expansion."""

    members: list[DownlineMember] = field(default_factory=list)
    counts: dict[int, int] = field(default_factory=dict)

    @property
    def total(self) -> int:
        """Number of members across all levels."""
        return len(self.members)


def chunked(ids: list[str], size: int) -> list[list[str]]:
    """Split ids into batches that fit a membership query."""
    return [ids[i:i + size] for i in range(0, len(ids), size)]


class DownlineBuilder:
    """Builds the recruit tree below a participant."""

    def __init__(
        self,
        session: AsyncSession,
        batch_size: int | None = None,
    ) -> None:
        """Initialize downline builder."""
        self.session = session
        self.participant_repo = ParticipantRepository(session)
        self.batch_size = batch_size or settings.store_in_query_limit

    async def _fetch_recruits(self, referrer_ids: list[str]) -> list[Participant]:
        """Fetch direct recruits of several referrers, batch by batch."""
        recruits: list[Participant] = []
        for batch in chunked(referrer_ids, self.batch_size):
            recruits.extend(
                await self.participant_repo.get_by_referrer_ids(batch)
            )
        return recruits

    async def build_downline(
        self, root_id: str, max_level: int = MAX_COMMISSION_LEVEL
    ) -> Downline:
        """
        Build the downline of a participant.

        Level 1 holds the root's direct recruits. Expansion stops at
        max_level or at the first empty level.

        Args:
            root_id: Participant id
            max_level: Deepest level to include

        Returns:
            Downline with flat members and per-level counts
        """
        downline = Downline()
        current_ids = [root_id]
        seen = {root_id}
        level = 1

        while level <= max_level and current_ids:
            recruits = [
                p for p in await self._fetch_recruits(current_ids)
                if p.id not in seen
            ]
            downline.counts[level] = len(recruits)

            for recruit in recruits:
                seen.add(recruit.id)
                downline.members.append(
                    DownlineMember(
                        id=recruit.id,
                        name=recruit.display_name,
                        tier=recruit.tier_label,
                        level=level,
                    )
                )

            current_ids = [p.id for p in recruits]
            level += 1

        logger.debug(
            "Downline built",
            extra={
                "root_id": root_id,
                "levels": len(downline.counts),
                "members": downline.total,
            },
        )

        return downline
