"""Unit tests for input validators."""

from decimal import Decimal

import pytest

from affiliate.config.tiers import TierType
from affiliate.validators import (
    validate_amount,
    validate_buyer_ref,
    validate_idempotency_key,
    validate_tier,
)


class TestAmountValidation:
    """Tests for validate_amount."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("100.50", Decimal("100.50")),
            ("100,50", Decimal("100.50")),
            (100, Decimal("100")),
            (0.1, Decimal("0.1")),
            (Decimal("0.00000001"), Decimal("0.00000001")),
            ("9999999999.99999999", Decimal("9999999999.99999999")),
        ],
    )
    def test_valid_amounts(self, value, expected):
        is_valid, amount, error = validate_amount(value)

        assert is_valid
        assert amount == expected
        assert error is None

    @pytest.mark.parametrize(
        "value",
        [
            None, "", "   ", "abc", "0", "-5", "NaN", "Infinity", True, "1.123456789",
            "1e15", "10000000000",
        ],
    )
    def test_invalid_amounts(self, value):
        is_valid, amount, error = validate_amount(value)

        assert not is_valid
        assert amount is None
        assert error


class TestIdempotencyKeyValidation:
    """Tests for validate_idempotency_key."""

    @pytest.mark.parametrize("key", ["abc", "ORDER-2026:001", "chg_3Nx.a-b"])
    def test_valid_keys(self, key):
        is_valid, value, _ = validate_idempotency_key(f"  {key} ")
        assert is_valid
        assert value == key

    @pytest.mark.parametrize("key", [None, "", "ab", "has space", "x" * 129, "bad/slash"])
    def test_invalid_keys(self, key):
        is_valid, value, error = validate_idempotency_key(key)
        assert not is_valid
        assert value is None
        assert error


class TestBuyerRefValidation:
    """Tests for validate_buyer_ref."""

    def test_trimmed(self):
        assert validate_buyer_ref(" buyer@example.com ") == (True, "buyer@example.com", None)

    @pytest.mark.parametrize("value", [None, "", "   ", "x" * 256])
    def test_invalid(self, value):
        assert validate_buyer_ref(value)[0] is False


class TestTierValidation:
    """Tests for validate_tier."""

    def test_valid(self):
        assert validate_tier("Elite") == (True, TierType.ELITE, None)

    @pytest.mark.parametrize("value", [None, "", "gold"])
    def test_invalid(self, value):
        is_valid, tier, error = validate_tier(value)
        assert not is_valid
        assert tier is None
        assert error
