"""
Referral services package.

- directory: referral code generation, syntax check and lookup
- upline: referrer chain walking
- downline: breadth-first recruit tree
"""

from affiliate.services.referral.directory import (
    ReferralDirectory,
    generate_code,
    normalize_code,
    validate_code,
)
from affiliate.services.referral.downline import (
    Downline,
    DownlineBuilder,
    DownlineMember,
)
from affiliate.services.referral.upline import UplineSummary, UplineWalker


__all__ = [
    "Downline",
    "DownlineBuilder",
    "DownlineMember",
    "ReferralDirectory",
    "UplineSummary",
    "UplineWalker",
    "generate_code",
    "normalize_code",
    "validate_code",
]
