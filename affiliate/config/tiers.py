"""
Single source of truth for subscription tiers.

A tier decides which tools a participant can use and how deep in the
referral chain they can receive commissions.
"""

from decimal import Decimal
from enum import Enum
from typing import NamedTuple


class TierType(str, Enum):
    """Subscription tiers, ordered from lowest to highest."""

    BASIC = "basic"
    PRO = "pro"
    ELITE = "elite"


class TierConfig(NamedTuple):
    """Tier configuration."""

    tier_type: TierType
    rank: int  # Ordering key, 0 is the lowest tier
    max_level: int  # Deepest chain level this tier may receive
    display_name: str
    price_usd: Decimal
    description: str


TIERS: dict[TierType, TierConfig] = {
    TierType.BASIC: TierConfig(
        tier_type=TierType.BASIC,
        rank=0,
        max_level=1,
        display_name="Basic",
        price_usd=Decimal("50"),
        description="Start with the core tools and earn level 1 commissions.",
    ),
    TierType.PRO: TierConfig(
        tier_type=TierType.PRO,
        rank=1,
        max_level=2,
        display_name="Pro",
        price_usd=Decimal("75"),
        description="Unlocks level 2 commissions and advanced reports.",
    ),
    TierType.ELITE: TierConfig(
        tier_type=TierType.ELITE,
        rank=2,
        max_level=4,
        display_name="Elite",
        price_usd=Decimal("99"),
        description="Unlocks all four commission levels.",
    ),
}

TIER_ORDER: list[TierType] = sorted(TIERS, key=lambda t: TIERS[t].rank)

DEFAULT_TIER = TierType.BASIC


def parse_tier(value: str | TierType | None) -> TierType:
    """
    Parse a stored or user supplied tier value.

    Stored documents may carry no tier at all; those count as the default
    tier. Anything else that is not a known tier raises ValueError.

    Args:
        value: Raw tier value

    Returns:
        TierType
    """
    if value is None or value == "":
        return DEFAULT_TIER
    if isinstance(value, TierType):
        return value
    return TierType(str(value).strip().lower())


def tier_rank(tier: TierType) -> int:
    """Numeric rank of a tier."""
    return TIERS[tier].rank


def tier_max_level(tier: TierType) -> int:
    """Deepest commission level a tier can receive."""
    return TIERS[tier].max_level


def tier_label(tier: TierType) -> str:
    """Display name of a tier."""
    return TIERS[tier].display_name


def unlock_tier_for_level(level: int) -> TierType:
    """Lowest tier that can receive commissions at the given level."""
    for tier in TIER_ORDER:
        if TIERS[tier].max_level >= level:
            return tier
    return TIER_ORDER[-1]
