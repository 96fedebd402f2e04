"""
Commission ledger.

Turns a paid sale into pending commissions for the referrer chain. The sale
row, every commission entry and every balance increment are committed as
one transaction: either the whole distribution exists or none of it does.
"""

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal

from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from affiliate.config.business_constants import (
    SALE_OUTCOME_NO_REFERRER,
    SALE_OUTCOME_RECORDED,
)
from affiliate.config.settings import settings
from affiliate.config.tiers import DEFAULT_TIER, TierType, parse_tier
from affiliate.models.activity_note import ActivityNote
from affiliate.models.commission_entry import CommissionEntry, CommissionStatus
from affiliate.models.participant import Participant
from affiliate.models.sale import Sale, SaleStatus
from affiliate.repositories.balance_repository import BalanceRepository
from affiliate.services.commission.calculator import (
    PlannedCommission,
    plan_distribution,
)
from affiliate.services.commission.config import CommissionConfig
from affiliate.services.referral.upline import UplineWalker
from affiliate.utils.datetime_utils import hold_until, utc_now
from affiliate.utils.db_decorators import with_rollback_on_error
from affiliate.utils.exceptions import StoreTimeoutError
from affiliate.utils.timeouts import bounded


@dataclass
class DistributionResult:
    """Result of distributing one sale."""

    sale_id: str
    status: str
    settlement_amount: Decimal
    hold_until: datetime
    referrer_id: str | None = None
    commissions: list[PlannedCommission] = field(default_factory=list)

    @property
    def total_distributed(self) -> Decimal:
        """Sum of all commissions of the sale."""
        return sum((c.amount for c in self.commissions), Decimal("0"))


def current_tier(participant: Participant) -> TierType:
    """
    Tier of a beneficiary at distribution time.

    Unreadable stored tiers count as the lowest tier.
    """
    try:
        return parse_tier(participant.tier)
    except ValueError:
        logger.warning(
            "Unknown stored tier, treating as default",
            extra={"participant_id": participant.id, "tier": participant.tier},
        )
        return DEFAULT_TIER


class CommissionLedger:
    """Distributes commissions for paid sales."""

    def __init__(
        self,
        session: AsyncSession,
        config: CommissionConfig,
        clock: Callable[[], datetime] = utc_now,
        timeout: float | None = None,
    ) -> None:
        """
        Initialize commission ledger.

        Args:
            session: Async database session
            config: Commission configuration
            clock: Source of the current time
            timeout: Store operation bound in seconds
        """
        self.session = session
        self.config = config
        self.clock = clock
        self.timeout = timeout or settings.store_timeout_seconds
        self.balance_repo = BalanceRepository(session, self.timeout)
        self.upline_walker = UplineWalker(session)

    @with_rollback_on_error
    async def distribute(
        self,
        sale_id: str,
        buyer_ref: str,
        gross_amount: Decimal,
        settlement_amount: Decimal,
        referrer: Participant | None,
        referral_code: str | None = None,
        source: str = "manual",
    ) -> DistributionResult:
        """
        Record a paid sale and credit the referrer chain.

        The referrer is chain level 1, its referrer level 2, and so on.
        A level is paid only when the beneficiary's own tier unlocks it.

        Args:
            sale_id: Idempotency key of the sale
            buyer_ref: Buyer reference
            gross_amount: Amount in the source currency
            settlement_amount: Amount in the settlement currency
            referrer: Owner of the referral code used, or None
            referral_code: Code as received
            source: Origin of the sale

        Returns:
            DistributionResult

        Raises:
            IntegrityError: If a sale with this key was committed meanwhile
            TransientStoreError: On store connectivity failures
        """
        now = self.clock()
        deadline = hold_until(now, self.config.hold_days)
        # Plain id: ORM state is expired if the activity note rolls back
        referrer_id = referrer.id if referrer else None

        sale = Sale(
            id=sale_id,
            buyer_ref=buyer_ref,
            gross_amount=gross_amount,
            settlement_amount=settlement_amount,
            referral_code=referral_code,
            referrer_id=referrer_id,
            status=SaleStatus.PAID,
            source=source,
            hold_until=deadline,
            created_at=now,
        )
        self.session.add(sale)
        await bounded(self.session.flush(), self.timeout, "sales.create")

        if referrer is None:
            await bounded(self.session.commit(), self.timeout, "ledger.commit")
            logger.info(
                "Sale recorded without referrer",
                extra={"sale_id": sale_id, "amount": str(settlement_amount)},
            )
            return DistributionResult(
                sale_id=sale_id,
                status=SALE_OUTCOME_NO_REFERRER,
                settlement_amount=settlement_amount,
                hold_until=deadline,
            )

        chain = await self.upline_walker.walk_from(referrer, self.config.max_level)
        tiers = {p.id: current_tier(p) for _, p in chain}
        planned = plan_distribution(
            settlement_amount,
            [(level, p.id, tiers[p.id]) for level, p in chain],
            self.config,
        )

        for commission in planned:
            self.session.add(
                CommissionEntry(
                    sale_id=sale_id,
                    beneficiary_id=commission.beneficiary_id,
                    level=commission.level,
                    percent=commission.percent,
                    amount=commission.amount,
                    status=CommissionStatus.PENDING,
                    hold_until=deadline,
                    created_at=now,
                    updated_at=now,
                )
            )
            await self.balance_repo.increment(
                commission.beneficiary_id,
                total=commission.amount,
                pending=commission.amount,
                tier=tiers[commission.beneficiary_id],
            )

            logger.info(
                "Commission staged",
                extra={
                    "sale_id": sale_id,
                    "beneficiary_id": commission.beneficiary_id,
                    "level": commission.level,
                    "percent": str(commission.percent),
                    "amount": str(commission.amount),
                },
            )

        await bounded(self.session.commit(), self.timeout, "ledger.commit")

        result = DistributionResult(
            sale_id=sale_id,
            status=SALE_OUTCOME_RECORDED,
            settlement_amount=settlement_amount,
            hold_until=deadline,
            referrer_id=referrer_id,
            commissions=planned,
        )

        logger.info(
            "Sale distributed",
            extra={
                "sale_id": sale_id,
                "referrer_id": referrer_id,
                "chain_length": len(chain),
                "commissions": len(planned),
                "total_distributed": str(result.total_distributed),
            },
        )

        await self._append_sale_note(referrer_id, buyer_ref, now)

        return result

    async def _append_sale_note(
        self, referrer_id: str, buyer_ref: str, now: datetime
    ) -> None:
        """
        Add a display note for the direct referrer.

        Runs after the ledger commit; a failure here is logged and leaves
        the distribution untouched.
        """
        try:
            self.session.add(
                ActivityNote(
                    participant_id=referrer_id,
                    name=buyer_ref,
                    action="bought the bundle",
                    label="Sale",
                    created_at=now,
                )
            )
            await bounded(self.session.commit(), self.timeout, "activity.create")
        except (SQLAlchemyError, StoreTimeoutError) as e:
            await self.session.rollback()
            logger.bind(referrer_id=referrer_id).warning(
                "Failed to append sale activity note: {}", e
            )
