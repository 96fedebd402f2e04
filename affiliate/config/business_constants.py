"""
Business logic constants.

Central location for business rules shared by services and the HTTP layer.
"""

from decimal import Decimal

from affiliate.config.tiers import TierType


# Commission percentage per chain level, shared by every tier
COMMISSION_BY_LEVEL: dict[int, Decimal] = {
    1: Decimal("50"),
    2: Decimal("20"),
    3: Decimal("10"),
    4: Decimal("5"),
}

# Deepest chain level that can ever be paid
MAX_COMMISSION_LEVEL = 4

# Sum of every level percentage (85%)
TOTAL_COMMISSION_POTENTIAL = sum(COMMISSION_BY_LEVEL.values(), Decimal("0"))

# Referral codes: "AF-" + 6 characters without 0/O/1/I
REFERRAL_CODE_PREFIX = "AF-"
REFERRAL_CODE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
REFERRAL_CODE_LENGTH = 6
REFERRAL_CODE_PATTERN = r"^AF-[A-Z0-9]{4,17}$"
# Column width of stored codes; the pattern never matches anything longer
REFERRAL_CODE_MAX_LENGTH = 20

# Money rounding unit (cents)
MONEY_QUANTUM = Decimal("0.01")

# Largest value a DECIMAL(18, 8) money column holds
MAX_MONEY_AMOUNT = Decimal("9999999999.99999999")

# Activity feed size on the dashboard
RECENT_ACTIVITY_LIMIT = 8

# Admin listing page size bounds
ADMIN_PAGE_DEFAULT = 50
ADMIN_PAGE_MAX = 200

# Sale statuses
SALE_STATUS_PAID = "paid"

# Outcomes reported back to the sale intake caller
SALE_OUTCOME_RECORDED = "recorded"
SALE_OUTCOME_NO_REFERRER = "no-referrer"
SALE_OUTCOME_EXISTS = "exists"

# Tool catalog: tool id -> (name, description, minimum tier)
TOOLS: dict[str, tuple[str, str, TierType]] = {
    "contapp": (
        "ContApp",
        "Smart bookkeeping for freelancers and small businesses.",
        TierType.BASIC,
    ),
    "fastpage": (
        "Fast Page",
        "Professional landing pages in minutes, no code.",
        TierType.BASIC,
    ),
    "leadwidget": (
        "Lead Widget",
        "Capture leads from your site or social networks.",
        TierType.BASIC,
    ),
}

# Feature bullets shown for each plan in the subscription view
PLAN_FEATURES: dict[TierType, tuple[str, ...]] = {
    TierType.BASIC: (
        "Access to 3 apps (ContApp, Fast Page, Lead Widget)",
        "Level 1 commission: 50%",
        "Email support",
        "Basic affiliate dashboard",
    ),
    TierType.PRO: (
        "Everything in Basic",
        "Level 2 commission: 20% (total: 70%)",
        "Advanced reports",
        "Priority support",
        "Exclusive Pro badge",
    ),
    TierType.ELITE: (
        "Everything in Pro",
        "Levels 3 and 4 commission: 10% + 5% (total: 85%)",
        "Dedicated account manager",
        "Early access to new tools",
    ),
}
