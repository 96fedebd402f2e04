"""
Hold-release resolver.

Moves a participant's commissions from pending to available once their
refund hold has passed. Runs when the participant's dashboard or network
view is read; there is no background sweep.
"""

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from affiliate.config.settings import settings
from affiliate.repositories.balance_repository import BalanceRepository
from affiliate.repositories.commission_repository import CommissionRepository
from affiliate.utils.datetime_utils import utc_now
from affiliate.utils.db_decorators import with_rollback_on_error
from affiliate.utils.exceptions import TransientStoreError
from affiliate.utils.timeouts import bounded


@dataclass(frozen=True)
class SettlementResult:
    """Outcome of one settlement pass."""

    released_count: int
    released_total: Decimal


class HoldReleaseResolver:
    """Releases matured commissions into the available balance."""

    def __init__(
        self,
        session: AsyncSession,
        clock: Callable[[], datetime] = utc_now,
        timeout: float | None = None,
    ) -> None:
        """Initialize hold-release resolver."""
        self.session = session
        self.clock = clock
        self.timeout = timeout or settings.store_timeout_seconds
        self.commission_repo = CommissionRepository(session, self.timeout)
        self.balance_repo = BalanceRepository(session, self.timeout)

    @with_rollback_on_error
    async def settle_pending(self, participant_id: str) -> SettlementResult:
        """
        Release every pending commission whose hold has expired.

        Entry updates and the balance move are one transaction.

        Args:
            participant_id: Beneficiary id

        Returns:
            SettlementResult (zero when nothing was due)
        """
        now = self.clock()
        entries = await self.commission_repo.get_releasable(participant_id, now)

        if not entries:
            return SettlementResult(released_count=0, released_total=Decimal("0"))

        released_total = sum((e.amount for e in entries), Decimal("0"))
        entry_ids = [e.id for e in entries]

        flipped = await self.commission_repo.mark_approved(entry_ids, now)
        if flipped != len(entry_ids):
            raise TransientStoreError(
                "settle_pending",
                f"Expected to release {len(entry_ids)} commissions, "
                f"released {flipped}; another settlement is running",
            )

        await self.balance_repo.increment(
            participant_id,
            pending=-released_total,
            available=released_total,
        )

        await bounded(self.session.commit(), self.timeout, "settlement.commit")

        logger.info(
            "Pending commissions released",
            extra={
                "participant_id": participant_id,
                "released_count": len(entry_ids),
                "released_total": str(released_total),
            },
        )

        return SettlementResult(
            released_count=len(entry_ids), released_total=released_total
        )
