"""
Commission repository.

Data access layer for CommissionEntry model.
"""

from datetime import datetime

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from affiliate.models.commission_entry import CommissionEntry, CommissionStatus
from affiliate.repositories.base import BaseRepository


class CommissionRepository(BaseRepository[CommissionEntry]):
    """Commission repository with settlement queries."""

    def __init__(self, session: AsyncSession, timeout: float | None = None) -> None:
        """Initialize commission repository."""
        super().__init__(CommissionEntry, session, timeout)

    async def get_by_sale(self, sale_id: str) -> list[CommissionEntry]:
        """
        Get commissions of a sale ordered by level.

        Args:
            sale_id: Sale id

        Returns:
            List of entries
        """
        stmt = (
            select(CommissionEntry)
            .where(CommissionEntry.sale_id == sale_id)
            .order_by(CommissionEntry.level.asc())
        )
        result = await self._execute(stmt, "commission_entries.by_sale")
        return list(result.scalars().all())

    async def get_releasable(
        self, beneficiary_id: str, now: datetime
    ) -> list[CommissionEntry]:
        """
        Get pending entries whose hold has expired.

        Rows are locked (SKIP LOCKED) so two concurrent settlements never
        release the same entry twice.

        Args:
            beneficiary_id: Participant id
            now: Current time

        Returns:
            Releasable entries
        """
        stmt = (
            select(CommissionEntry)
            .where(
                CommissionEntry.beneficiary_id == beneficiary_id,
                CommissionEntry.status == CommissionStatus.PENDING,
                CommissionEntry.hold_until <= now,
            )
            .order_by(CommissionEntry.id.asc())
            .with_for_update(skip_locked=True)
        )
        result = await self._execute(stmt, "commission_entries.releasable")
        return list(result.scalars().all())

    async def mark_approved(
        self, entry_ids: list[int], now: datetime
    ) -> int:
        """
        Flip pending entries to approved.

        Args:
            entry_ids: Entry ids
            now: Release timestamp

        Returns:
            Number of entries flipped
        """
        if not entry_ids:
            return 0

        stmt = (
            update(CommissionEntry)
            .where(
                CommissionEntry.id.in_(entry_ids),
                CommissionEntry.status == CommissionStatus.PENDING,
            )
            .values(
                status=CommissionStatus.APPROVED,
                released_at=now,
                updated_at=now,
            )
        )
        result = await self._execute(stmt, "commission_entries.approve")
        return result.rowcount or 0
