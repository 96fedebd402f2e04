"""
Network edge repository.

Data access layer for the denormalized NetworkEdge read cache.
"""

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from affiliate.config.tiers import TierType
from affiliate.models.network_edge import NetworkEdge
from affiliate.repositories.base import BaseRepository


class NetworkEdgeRepository(BaseRepository[NetworkEdge]):
    """Network edge repository."""

    def __init__(self, session: AsyncSession, timeout: float | None = None) -> None:
        """Initialize network edge repository."""
        super().__init__(NetworkEdge, session, timeout)

    async def get_level_counts(self, owner_id: str) -> dict[int, int]:
        """
        Get cached recruit counts per level in a single query.

        Args:
            owner_id: Ancestor participant id

        Returns:
            Dict mapping level to count
        """
        stmt = (
            select(NetworkEdge.level, func.count(NetworkEdge.id).label("count"))
            .where(NetworkEdge.owner_id == owner_id)
            .group_by(NetworkEdge.level)
        )
        result = await self._execute(stmt, "network_edges.level_counts")
        return {row.level: row.count for row in result.all()}

    async def update_member(
        self,
        member_id: str,
        member_tier: TierType | None = None,
        member_name: str | None = None,
    ) -> int:
        """
        Refresh the cached tier/name of a member in every ancestor's cache.

        Args:
            member_id: Recruit id
            member_tier: New tier
            member_name: New display name

        Returns:
            Number of edges updated
        """
        values: dict[str, str] = {}
        if member_tier is not None:
            values["member_tier"] = member_tier.value
        if member_name is not None:
            values["member_name"] = member_name
        if not values:
            return 0

        stmt = (
            update(NetworkEdge)
            .where(NetworkEdge.member_id == member_id)
            .values(**values)
        )
        result = await self._execute(stmt, "network_edges.update_member")
        return result.rowcount or 0
