"""
Sale intake service.

Entry point for purchase notifications (payment webhooks and manual
intake). Deduplicates by idempotency key before handing the sale to the
commission ledger.
"""

import uuid
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal

from loguru import logger
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from affiliate.config.business_constants import MAX_MONEY_AMOUNT, SALE_OUTCOME_EXISTS
from affiliate.models.sale import Sale
from affiliate.repositories.commission_repository import CommissionRepository
from affiliate.repositories.sale_repository import SaleRepository
from affiliate.services.commission.calculator import convert_to_settlement
from affiliate.services.commission.config import CommissionConfig
from affiliate.services.commission.ledger import CommissionLedger
from affiliate.services.referral.directory import (
    ReferralDirectory,
    normalize_code,
    validate_code,
)
from affiliate.utils.datetime_utils import utc_now
from affiliate.utils.db_decorators import with_rollback_on_error
from affiliate.utils.exceptions import InputValidationError, TransientStoreError
from affiliate.validators.common import (
    validate_amount,
    validate_buyer_ref,
    validate_idempotency_key,
)


@dataclass(frozen=True)
class CommissionLine:
    """Commission of a sale as reported to the caller."""

    level: int
    beneficiary_id: str
    percent: Decimal
    amount: Decimal


@dataclass
class SaleOutcome:
    """What happened to a sale notification."""

    sale_id: str
    status: str  # recorded | no-referrer | exists
    settlement_amount: Decimal
    referrer_id: str | None = None
    commissions: list[CommissionLine] = field(default_factory=list)

    @property
    def total_distributed(self) -> Decimal:
        """Sum of commissions paid for the sale."""
        return sum((c.amount for c in self.commissions), Decimal("0"))


class SaleIntakeService:
    """Records sales exactly once per idempotency key."""

    def __init__(
        self,
        session: AsyncSession,
        config: CommissionConfig,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        """
        Initialize sale intake service.

        Args:
            session: Async database session
            config: Commission configuration
            clock: Source of the current time
        """
        self.session = session
        self.config = config
        self.sale_repo = SaleRepository(session)
        self.commission_repo = CommissionRepository(session)
        self.directory = ReferralDirectory(session)
        self.ledger = CommissionLedger(session, config, clock=clock)

    @with_rollback_on_error
    async def record_sale(
        self,
        idempotency_key: str | None,
        buyer_ref: str,
        gross_amount: str | int | float | Decimal,
        referral_code: str | None = None,
        source: str = "manual",
    ) -> SaleOutcome:
        """
        Record a paid sale and distribute its commissions once.

        A key that was already recorded returns the earlier outcome with
        status "exists" and changes nothing. Unknown or malformed referral
        codes record the sale without a referrer.

        Args:
            idempotency_key: External sale id; generated when None
            buyer_ref: Buyer reference (email)
            gross_amount: Amount in the source currency
            referral_code: Referral code used at checkout
            source: Origin of the sale

        Returns:
            SaleOutcome

        Raises:
            InputValidationError: On malformed input, before any write
            TransientStoreError: On store failures; safe to retry
        """
        if idempotency_key is None:
            sale_id = uuid.uuid4().hex
        else:
            is_valid, sale_id, error = validate_idempotency_key(idempotency_key)
            if not is_valid:
                raise InputValidationError("idempotency_key", error)

        is_valid, buyer, error = validate_buyer_ref(buyer_ref)
        if not is_valid:
            raise InputValidationError("buyer_ref", error)

        is_valid, amount, error = validate_amount(gross_amount)
        if not is_valid:
            raise InputValidationError("gross_amount", error)

        existing = await self.sale_repo.get_by_key(sale_id)
        if existing is not None:
            logger.info(
                "Duplicate sale notification ignored",
                extra={"sale_id": sale_id},
            )
            return await self._existing_outcome(existing)

        referrer = None
        if referral_code:
            referrer = await self.directory.lookup(referral_code)
            if referrer is None:
                logger.info(
                    "Referral code did not resolve",
                    extra={"sale_id": sale_id, "referral_code": referral_code},
                )

        settlement_amount = convert_to_settlement(amount, self.config.fx_rate)
        if settlement_amount > MAX_MONEY_AMOUNT:
            raise InputValidationError(
                "gross_amount", "Converted amount exceeds the supported maximum"
            )

        stored_code = (
            normalize_code(referral_code) if validate_code(referral_code) else None
        )

        try:
            result = await self.ledger.distribute(
                sale_id=sale_id,
                buyer_ref=buyer,
                gross_amount=amount,
                settlement_amount=settlement_amount,
                referrer=referrer,
                referral_code=stored_code,
                source=source,
            )
        except IntegrityError:
            # Same key committed by a concurrent delivery
            existing = await self.sale_repo.get_by_key(sale_id)
            if existing is None:
                raise TransientStoreError(
                    "record_sale", f"Conflicting write for sale {sale_id}"
                )
            logger.info(
                "Concurrent duplicate sale resolved",
                extra={"sale_id": sale_id},
            )
            return await self._existing_outcome(existing)

        return SaleOutcome(
            sale_id=result.sale_id,
            status=result.status,
            settlement_amount=result.settlement_amount,
            referrer_id=result.referrer_id,
            commissions=[
                CommissionLine(
                    level=c.level,
                    beneficiary_id=c.beneficiary_id,
                    percent=c.percent,
                    amount=c.amount,
                )
                for c in result.commissions
            ],
        )

    async def _existing_outcome(self, sale: Sale) -> SaleOutcome:
        """Rebuild the outcome of an already recorded sale."""
        entries = await self.commission_repo.get_by_sale(sale.id)
        return SaleOutcome(
            sale_id=sale.id,
            status=SALE_OUTCOME_EXISTS,
            settlement_amount=sale.settlement_amount,
            referrer_id=sale.referrer_id,
            commissions=[
                CommissionLine(
                    level=e.level,
                    beneficiary_id=e.beneficiary_id,
                    percent=e.percent,
                    amount=e.amount,
                )
                for e in entries
            ],
        )
