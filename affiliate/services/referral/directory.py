"""
Referral directory.

Maps referral codes to participants, draws new codes and checks code syntax.
"""

import re
import secrets

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from affiliate.config.business_constants import (
    REFERRAL_CODE_ALPHABET,
    REFERRAL_CODE_LENGTH,
    REFERRAL_CODE_PATTERN,
    REFERRAL_CODE_PREFIX,
)
from affiliate.config.settings import settings
from affiliate.models.participant import Participant
from affiliate.repositories.participant_repository import ParticipantRepository
from affiliate.utils.exceptions import ReferralCodeExhaustedError


_CODE_RE = re.compile(REFERRAL_CODE_PATTERN)


def normalize_code(code: str | None) -> str:
    """Trim and upper-case a referral code."""
    if not code:
        return ""
    return code.strip().upper()


def validate_code(code: str | None) -> bool:
    """
    Check referral code syntax (prefix, length, character set).

    Syntax only: a valid code may still belong to nobody.

    Args:
        code: Referral code as typed

    Returns:
        True if the normalized code is well formed
    """
    normalized = normalize_code(code)
    return bool(normalized) and _CODE_RE.match(normalized) is not None


def generate_code() -> str:
    """
    Draw a random referral code.

    Returns:
        Code like "AF-7KQ2XM"
    """
    body = "".join(
        secrets.choice(REFERRAL_CODE_ALPHABET)
        for _ in range(REFERRAL_CODE_LENGTH)
    )
    return f"{REFERRAL_CODE_PREFIX}{body}"


class ReferralDirectory:
    """Referral code lookups backed by the participant store."""

    def __init__(
        self,
        session: AsyncSession,
        max_attempts: int | None = None,
    ) -> None:
        """Initialize referral directory."""
        self.session = session
        self.participant_repo = ParticipantRepository(session)
        self.max_attempts = max_attempts or settings.referral_code_max_attempts

    async def lookup(self, code: str | None) -> Participant | None:
        """
        Resolve a referral code to its owner.

        Malformed codes resolve to None without touching the store.

        Args:
            code: Referral code, any case

        Returns:
            Owning participant or None
        """
        if not validate_code(code):
            return None

        return await self.participant_repo.get_by_referral_code(
            normalize_code(code)
        )

    async def generate_unique_code(self) -> str:
        """
        Draw a code that no participant owns yet.

        The unique index still guards the final insert; this check only
        makes a collision at commit time very unlikely.

        Returns:
            Unused referral code

        Raises:
            ReferralCodeExhaustedError: If every attempt collided
        """
        for attempt in range(1, self.max_attempts + 1):
            code = generate_code()
            owner = await self.participant_repo.get_by_referral_code(code)
            if owner is None:
                return code

            logger.warning(
                "Referral code collision",
                extra={"code": code, "attempt": attempt},
            )

        raise ReferralCodeExhaustedError(self.max_attempts)
