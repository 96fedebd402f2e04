"""
Sale repository.

Data access layer for Sale model.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from affiliate.models.sale import Sale
from affiliate.repositories.base import BaseRepository


class SaleRepository(BaseRepository[Sale]):
    """Sale repository."""

    def __init__(self, session: AsyncSession, timeout: float | None = None) -> None:
        """Initialize sale repository."""
        super().__init__(Sale, session, timeout)

    async def get_by_key(self, idempotency_key: str) -> Sale | None:
        """
        Get sale by idempotency key.

        Args:
            idempotency_key: Sale key

        Returns:
            Sale or None
        """
        return await self.get_by_id(idempotency_key)
