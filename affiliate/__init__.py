"""
Affiliate commission engine.

Tracks a referral tree of participants, records purchase events and
distributes multi-level commissions with a refund hold window.
"""

__version__ = "1.0.0"
