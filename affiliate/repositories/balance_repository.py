"""
Balance repository.

Data access layer for BalanceRecord model. Balance fields are only ever
changed with in-database increments.
"""

from decimal import Decimal

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from affiliate.config.tiers import TierType
from affiliate.models.balance_record import BalanceRecord
from affiliate.repositories.base import BaseRepository
from affiliate.utils.datetime_utils import utc_now


ZERO = Decimal("0")


class BalanceRepository(BaseRepository[BalanceRecord]):
    """Balance repository with atomic increments."""

    def __init__(self, session: AsyncSession, timeout: float | None = None) -> None:
        """Initialize balance repository."""
        super().__init__(BalanceRecord, session, timeout)

    async def increment(
        self,
        participant_id: str,
        total: Decimal = ZERO,
        pending: Decimal = ZERO,
        available: Decimal = ZERO,
        tier: TierType | None = None,
    ) -> None:
        """
        Add deltas to a participant's balance in the current transaction.

        Uses UPDATE ... SET col = col + delta so concurrent credits to the
        same participant compose. A missing record is created with the
        deltas as its initial values.

        Args:
            participant_id: Participant id
            total: Delta for total earnings
            pending: Delta for pending balance
            available: Delta for available balance
            tier: Tier snapshot for a newly created record
        """
        stmt = (
            update(BalanceRecord)
            .where(BalanceRecord.participant_id == participant_id)
            .values(
                total_earnings=BalanceRecord.total_earnings + total,
                pending_balance=BalanceRecord.pending_balance + pending,
                available_balance=BalanceRecord.available_balance + available,
                updated_at=utc_now(),
            )
        )
        result = await self._execute(stmt, "balance_records.increment")

        if result.rowcount == 0:
            self.session.add(
                BalanceRecord(
                    participant_id=participant_id,
                    total_earnings=total,
                    pending_balance=pending,
                    available_balance=available,
                    tier=(tier or TierType.BASIC).value,
                )
            )

    async def ensure(
        self, participant_id: str, tier: TierType
    ) -> BalanceRecord:
        """
        Get or stage an empty balance record.

        Args:
            participant_id: Participant id
            tier: Current tier snapshot

        Returns:
            BalanceRecord
        """
        record = await self.get_by_id(participant_id)
        if record is not None:
            return record

        return await self.create(
            participant_id=participant_id,
            total_earnings=ZERO,
            pending_balance=ZERO,
            available_balance=ZERO,
            tier=tier.value,
        )

    async def set_tier(self, participant_id: str, tier: TierType) -> None:
        """Refresh the tier snapshot."""
        stmt = (
            update(BalanceRecord)
            .where(BalanceRecord.participant_id == participant_id)
            .values(tier=tier.value, updated_at=utc_now())
        )
        await self._execute(stmt, "balance_records.set_tier")
