"""
Commission arithmetic.

Pure functions, no I/O: rounding, currency conversion and the per-level
distribution plan.
"""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from affiliate.config.business_constants import MONEY_QUANTUM
from affiliate.config.tiers import TierType, tier_max_level
from affiliate.services.commission.config import CommissionConfig


@dataclass(frozen=True)
class PlannedCommission:
    """One commission the ledger is about to stage."""

    level: int
    beneficiary_id: str
    percent: Decimal
    amount: Decimal


def round2(value: Decimal) -> Decimal:
    """
    Round half-up to cents.

    Args:
        value: Amount

    Returns:
        Amount with two decimal places
    """
    return value.quantize(MONEY_QUANTUM, rounding=ROUND_HALF_UP)


def convert_to_settlement(gross_amount: Decimal, fx_rate: Decimal) -> Decimal:
    """
    Convert a source-currency amount to the settlement currency.

    Args:
        gross_amount: Amount in the source currency
        fx_rate: Units of settlement currency per source unit

    Returns:
        Rounded settlement amount
    """
    return round2(gross_amount * fx_rate)


def level_commission(amount: Decimal, percent: Decimal) -> Decimal:
    """
    Commission for one level, rounded on its own.

    Args:
        amount: Sale amount in the settlement currency
        percent: Percentage for the level (50 means 50%)

    Returns:
        Rounded commission amount
    """
    return round2(amount * percent / Decimal("100"))


def is_level_unlocked(tier: TierType, level: int) -> bool:
    """Whether a beneficiary of this tier may receive this chain level."""
    return level <= tier_max_level(tier)


def plan_distribution(
    sale_amount: Decimal,
    chain: list[tuple[int, str, TierType]],
    config: CommissionConfig,
) -> list[PlannedCommission]:
    """
    Decide who is paid what for one sale.

    Only the beneficiary's own tier gates its level; the tiers of the
    participants below it in the chain do not matter.

    Args:
        sale_amount: Sale amount in the settlement currency
        chain: (level, beneficiary id, beneficiary tier), level ascending
        config: Commission configuration

    Returns:
        Planned commissions, level ascending
    """
    planned: list[PlannedCommission] = []

    for level, beneficiary_id, tier in chain:
        if level > config.max_level:
            break

        if not is_level_unlocked(tier, level):
            continue

        percent = config.percent_for(level)
        if percent <= 0:
            continue

        planned.append(
            PlannedCommission(
                level=level,
                beneficiary_id=beneficiary_id,
                percent=percent,
                amount=level_commission(sale_amount, percent),
            )
        )

    return planned
