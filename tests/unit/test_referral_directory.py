"""Unit tests for referral code handling."""

import re
from unittest.mock import AsyncMock, MagicMock

import pytest

from affiliate.config.business_constants import REFERRAL_CODE_ALPHABET
from affiliate.services.referral.directory import (
    ReferralDirectory,
    generate_code,
    normalize_code,
    validate_code,
)
from affiliate.services.referral.downline import chunked
from affiliate.utils.exceptions import ReferralCodeExhaustedError


class TestCodeSyntax:
    """Tests for code normalization and syntax checks."""

    def test_normalize(self):
        assert normalize_code("  af-abc234 ") == "AF-ABC234"
        assert normalize_code(None) == ""

    @pytest.mark.parametrize("code", ["AF-ABC234", "af-abcd", " AF-7KQ2XM ", "AF-" + "A" * 17])
    def test_valid_codes(self, code):
        assert validate_code(code)

    @pytest.mark.parametrize(
        "code",
        [
            "", None, "garbage", "AF-", "AF-12", "XX-ABC234", "AF-AB C234", "AF-ABC$34",
            "AF-" + "A" * 18,
        ],
    )
    def test_invalid_codes(self, code):
        assert not validate_code(code)

    def test_generated_code_format(self):
        for _ in range(50):
            code = generate_code()
            assert re.fullmatch(r"AF-[A-Z0-9]{6}", code)
            assert all(ch in REFERRAL_CODE_ALPHABET for ch in code[3:])
            assert validate_code(code)

    def test_generated_code_excludes_ambiguous_characters(self):
        for ch in "01IO":
            assert ch not in REFERRAL_CODE_ALPHABET


class TestReferralDirectory:
    """Tests for directory lookups with a mocked store."""

    @pytest.mark.asyncio
    async def test_malformed_code_does_not_query_store(self, mock_session):
        """Malformed codes resolve to None without any store access."""
        directory = ReferralDirectory(mock_session)

        assert await directory.lookup("garbage") is None
        assert await directory.lookup("") is None
        assert await directory.lookup(None) is None

        mock_session.execute.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_lookup_uses_normalized_code(self, mock_session):
        directory = ReferralDirectory(mock_session)
        owner = MagicMock()
        directory.participant_repo.get_by_referral_code = AsyncMock(return_value=owner)

        assert await directory.lookup(" af-abc234 ") is owner
        directory.participant_repo.get_by_referral_code.assert_awaited_once_with("AF-ABC234")

    @pytest.mark.asyncio
    async def test_unique_code_retries_on_collision(self, mock_session):
        directory = ReferralDirectory(mock_session, max_attempts=3)
        directory.participant_repo.get_by_referral_code = AsyncMock(
            side_effect=[MagicMock(), None]
        )

        code = await directory.generate_unique_code()

        assert validate_code(code)
        assert directory.participant_repo.get_by_referral_code.await_count == 2

    @pytest.mark.asyncio
    async def test_unique_code_exhausted(self, mock_session):
        directory = ReferralDirectory(mock_session, max_attempts=3)
        directory.participant_repo.get_by_referral_code = AsyncMock(
            return_value=MagicMock()
        )

        with pytest.raises(ReferralCodeExhaustedError) as exc_info:
            await directory.generate_unique_code()

        assert exc_info.value.attempts == 3
        assert directory.participant_repo.get_by_referral_code.await_count == 3


class TestChunking:
    """Tests for membership query batching."""

    def test_chunked(self):
        assert chunked(["a", "b", "c", "d", "e"], 2) == [["a", "b"], ["c", "d"], ["e"]]

    def test_chunked_empty(self):
        assert chunked([], 10) == []
