"""
Datetime utilities.

Provides timezone-aware datetime functions.
"""

from datetime import UTC, datetime, timedelta


def utc_now() -> datetime:
    """
    Get current UTC datetime with timezone info.

    Returns:
        Current datetime in UTC with timezone awareness
    """
    return datetime.now(UTC)


def hold_until(now: datetime, hold_days: int) -> datetime:
    """
    Compute the end of a refund hold window.

    Args:
        now: Start of the window
        hold_days: Window length in days

    Returns:
        Moment the hold expires
    """
    return now + timedelta(days=hold_days)
