"""
Commission services package.

- config: immutable CommissionConfig
- calculator: rounding and per-level distribution plan
- ledger: atomic sale distribution
- settlement: lazy pending -> available release
"""

from affiliate.services.commission.calculator import (
    PlannedCommission,
    convert_to_settlement,
    level_commission,
    plan_distribution,
    round2,
)
from affiliate.services.commission.config import CommissionConfig
from affiliate.services.commission.ledger import CommissionLedger, DistributionResult
from affiliate.services.commission.settlement import (
    HoldReleaseResolver,
    SettlementResult,
)


__all__ = [
    "CommissionConfig",
    "CommissionLedger",
    "DistributionResult",
    "HoldReleaseResolver",
    "PlannedCommission",
    "SettlementResult",
    "convert_to_settlement",
    "level_commission",
    "plan_distribution",
    "round2",
]
