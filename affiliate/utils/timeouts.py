"""
Time bounds for store calls.
"""

import asyncio
from collections.abc import Awaitable
from typing import TypeVar

from loguru import logger

from affiliate.utils.exceptions import StoreTimeoutError


T = TypeVar("T")


async def bounded(
    awaitable: Awaitable[T], timeout: float, operation: str
) -> T:
    """
    Await a store call with an upper time bound.

    Args:
        awaitable: Store call
        timeout: Seconds to wait
        operation: Name used in logs and in the raised error

    Returns:
        Result of the awaitable

    Raises:
        StoreTimeoutError: If the call did not finish in time
    """
    try:
        return await asyncio.wait_for(awaitable, timeout=timeout)
    except TimeoutError as e:
        logger.warning(
            "Store operation timed out",
            extra={"operation": operation, "timeout": timeout},
        )
        raise StoreTimeoutError(operation, timeout) from e
