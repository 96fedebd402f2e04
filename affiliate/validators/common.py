"""
Common validators for caller input.

Each validator returns a tuple of (is_valid, parsed_value, error_message).
"""

import re
from decimal import Decimal, InvalidOperation

from affiliate.config.business_constants import MAX_MONEY_AMOUNT
from affiliate.config.tiers import TierType, parse_tier


IDEMPOTENCY_KEY_PATTERN = re.compile(r"^[A-Za-z0-9_.:\-]{3,128}$")


def validate_amount(
    value: str | int | float | Decimal | None,
    min_exclusive: Decimal = Decimal("0"),
    max_inclusive: Decimal = MAX_MONEY_AMOUNT,
) -> tuple[bool, Decimal | None, str | None]:
    """
    Validate a monetary amount.

    Args:
        value: Amount as received from the caller
        min_exclusive: Amount must be strictly greater than this
        max_inclusive: Largest accepted amount (money column capacity)

    Returns:
        Tuple of (is_valid, parsed_amount, error_message)

    Examples:
        >>> validate_amount("100.50")
        (True, Decimal('100.50'), None)
        >>> validate_amount("0")
        (False, None, 'Amount must be > 0')
    """
    if value is None or isinstance(value, bool):
        return False, None, "Amount is empty"

    if isinstance(value, float):
        # str() keeps the shortest repr, so 0.1 stays 0.1
        value = str(value)

    if isinstance(value, str):
        value = value.strip().replace(",", ".")
        if not value:
            return False, None, "Amount is empty"

    try:
        amount = Decimal(value)
    except (InvalidOperation, TypeError, ValueError):
        return False, None, "Invalid amount format"

    if not amount.is_finite():
        return False, None, "Amount must be a finite number"

    if amount <= min_exclusive:
        return False, None, f"Amount must be > {min_exclusive}"

    if amount > max_inclusive:
        return False, None, f"Amount must be <= {max_inclusive}"

    if amount.as_tuple().exponent < -8:
        return False, None, "Amount has too many decimal places (maximum 8)"

    return True, amount, None


def validate_idempotency_key(
    value: str | None,
) -> tuple[bool, str | None, str | None]:
    """
    Validate a sale idempotency key.

    Args:
        value: External sale id

    Returns:
        Tuple of (is_valid, normalized_key, error_message)
    """
    if value is None or not isinstance(value, str):
        return False, None, "Idempotency key is empty"

    value = value.strip()
    if not IDEMPOTENCY_KEY_PATTERN.match(value):
        return (
            False,
            None,
            "Idempotency key must be 3-128 characters of letters, digits, '_.:-'",
        )

    return True, value, None


def validate_buyer_ref(
    value: str | None,
) -> tuple[bool, str | None, str | None]:
    """
    Validate the buyer reference (usually the buyer email).

    Args:
        value: Buyer reference

    Returns:
        Tuple of (is_valid, normalized_value, error_message)
    """
    if value is None or not isinstance(value, str):
        return False, None, "Buyer reference is empty"

    value = value.strip()
    if not value:
        return False, None, "Buyer reference is empty"

    if len(value) > 255:
        return False, None, "Buyer reference is too long (maximum 255 characters)"

    return True, value, None


def validate_tier(
    value: str | None,
) -> tuple[bool, TierType | None, str | None]:
    """
    Validate a tier name.

    Args:
        value: Tier id, e.g. "pro"

    Returns:
        Tuple of (is_valid, tier, error_message)
    """
    if value is None or not isinstance(value, str) or not value.strip():
        return False, None, "Tier is empty"

    try:
        return True, parse_tier(value), None
    except ValueError:
        allowed = ", ".join(t.value for t in TierType)
        return False, None, f"Unknown tier '{value}'. Allowed: {allowed}"
