"""
Base repository.

Shared store access for the ledger tables. Every statement runs under the
configured store timeout so a stalled database surfaces as StoreTimeoutError.
"""

from typing import Any, Generic, TypeVar

from sqlalchemy import delete, select
from sqlalchemy.engine import Result
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import Executable

from affiliate.config.settings import settings
from affiliate.models.base import Base
from affiliate.utils.timeouts import bounded

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """
    Timeout-bounded access to one mapped table.

    Subclasses bind the model and add table-specific queries:

        class SaleRepository(BaseRepository[Sale]):
            def __init__(self, session: AsyncSession):
                super().__init__(Sale, session)

    Writes are staged on the caller's session; committing is the service's
    job so several repositories can share one transaction.
    """

    def __init__(
        self,
        model: type[ModelType],
        session: AsyncSession,
        timeout: float | None = None,
    ) -> None:
        self.model = model
        self.session = session
        self.timeout = timeout or settings.store_timeout_seconds

    @property
    def table(self) -> str:
        return self.model.__tablename__

    async def _execute(self, stmt: Executable, operation: str) -> Result[Any]:
        """Run a statement, labelled for timeout errors."""
        return await bounded(self.session.execute(stmt), self.timeout, operation)

    async def get_by_id(self, id: Any) -> ModelType | None:
        """Primary-key lookup; served from the identity map when loaded."""
        return await bounded(
            self.session.get(self.model, id), self.timeout, f"{self.table}.get"
        )

    async def get_by(self, **filters: Any) -> ModelType | None:
        """First row matching equality filters, or None."""
        stmt = select(self.model).filter_by(**filters).limit(1)
        result = await self._execute(stmt, f"{self.table}.get_by")
        return result.scalar_one_or_none()

    async def create(self, **data: Any) -> ModelType:
        """
        Add a row to the current transaction and flush it.

        The flush surfaces unique-key violations here instead of at commit.
        """
        entity = self.model(**data)
        self.session.add(entity)
        await bounded(self.session.flush(), self.timeout, f"{self.table}.create")
        return entity

    async def delete_where(self, *criteria: Any) -> int:
        """Delete matching rows; returns the number removed."""
        result = await self._execute(
            delete(self.model).where(*criteria), f"{self.table}.delete"
        )
        return result.rowcount or 0
