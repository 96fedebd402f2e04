"""
Session rollback decorator for service methods.

A service method that stages several writes commits once at the end. When
anything raises before that commit, the staged writes are discarded here so
no partial ledger state survives and the session stays usable.
"""

from collections.abc import Callable
from functools import wraps
from typing import Any, TypeVar

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from affiliate.utils.exceptions import DRIVER_ERRORS, TransientStoreError


T = TypeVar("T")


def _find_session(args: tuple[Any, ...], kwargs: dict[str, Any]) -> AsyncSession | None:
    session = kwargs.get("session")
    if isinstance(session, AsyncSession):
        return session

    if not args:
        return None

    first = args[0]
    if isinstance(first, AsyncSession):
        return first
    # bound method: the service keeps its session on self
    return getattr(first, "session", None)


def with_rollback_on_error(func: Callable[..., T]) -> Callable[..., T]:
    """
    Roll the session back when the wrapped coroutine raises.

    Driver connectivity failures are re-raised as TransientStoreError so
    callers can retry the whole operation; every other exception propagates
    unchanged after the rollback.

    Example:
        class SaleIntakeService:
            @with_rollback_on_error
            async def record_sale(self, ...):
                ...
    """

    @wraps(func)
    async def wrapper(*args: Any, **kwargs: Any) -> T:
        session = _find_session(args, kwargs)
        if session is None:
            logger.bind(operation=func.__name__).warning(
                "{}: no session to roll back", func.__name__
            )
            return await func(*args, **kwargs)

        try:
            return await func(*args, **kwargs)
        except Exception as e:
            try:
                await session.rollback()
            except Exception as rollback_error:
                logger.opt(exception=True).error(
                    "{}: rollback failed: {}", func.__name__, rollback_error
                )
            else:
                logger.bind(operation=func.__name__).info(
                    "{}: rolled back after {}", func.__name__, type(e).__name__
                )

            if isinstance(e, DRIVER_ERRORS):
                raise TransientStoreError(func.__name__, str(e)) from e
            raise

    return wrapper
