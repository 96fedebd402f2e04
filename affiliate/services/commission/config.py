"""
Commission engine configuration.

An immutable value built once from settings and passed to the ledger, the
sale intake and the settlement resolver.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from decimal import Decimal
from types import MappingProxyType

from affiliate.config.business_constants import (
    COMMISSION_BY_LEVEL,
    MAX_COMMISSION_LEVEL,
)
from affiliate.config.settings import Settings


@dataclass(frozen=True)
class CommissionConfig:
    """Economic parameters of commission distribution."""

    hold_days: int = 14
    fx_rate: Decimal = Decimal("0.27")
    payout_min: Decimal = Decimal("100")
    max_level: int = MAX_COMMISSION_LEVEL
    level_percentages: Mapping[int, Decimal] = field(
        default_factory=lambda: MappingProxyType(dict(COMMISSION_BY_LEVEL))
    )

    def __post_init__(self) -> None:
        if self.hold_days < 0:
            raise ValueError("hold_days must be >= 0")
        if self.fx_rate <= 0:
            raise ValueError("fx_rate must be > 0")
        if not 1 <= self.max_level <= MAX_COMMISSION_LEVEL:
            raise ValueError(f"max_level must be within 1..{MAX_COMMISSION_LEVEL}")
        if not isinstance(self.level_percentages, MappingProxyType):
            object.__setattr__(
                self,
                "level_percentages",
                MappingProxyType(dict(self.level_percentages)),
            )

    @classmethod
    def from_settings(cls, settings: Settings) -> "CommissionConfig":
        """Build configuration from application settings."""
        return cls(
            hold_days=settings.refund_hold_days,
            fx_rate=settings.fx_pen_to_usd,
            payout_min=settings.payout_min_usd,
        )

    def percent_for(self, level: int) -> Decimal:
        """Commission percentage for a chain level (0 when unpaid)."""
        return self.level_percentages.get(level, Decimal("0"))
