"""
Validators package.

Provides common validation functions for caller input.
"""

from affiliate.validators.common import (
    validate_amount,
    validate_buyer_ref,
    validate_idempotency_key,
    validate_tier,
)


__all__ = [
    "validate_amount",
    "validate_buyer_ref",
    "validate_idempotency_key",
    "validate_tier",
]
