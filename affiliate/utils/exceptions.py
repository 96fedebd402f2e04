"""
Exception handling utilities.

Defines categorized exception types for proper error handling.
"""

from sqlalchemy.exc import InterfaceError, OperationalError


class AffiliateError(Exception):
    """Base class for errors raised by the commission engine."""

    pass


class InputValidationError(AffiliateError):
    """Raised when caller input is malformed. Nothing has been written."""

    def __init__(self, field: str, message: str) -> None:
        self.field = field
        self.message = message
        super().__init__(f"{field}: {message}")


class ParticipantNotFoundError(AffiliateError):
    """Raised when a view is requested for an unknown participant."""

    def __init__(self, participant_id: str) -> None:
        self.participant_id = participant_id
        super().__init__(f"Participant not found: {participant_id}")


class ReferralCodeExhaustedError(AffiliateError):
    """Raised when no unused referral code was drawn within the attempt limit."""

    def __init__(self, attempts: int) -> None:
        self.attempts = attempts
        super().__init__(f"No unused referral code after {attempts} attempts")


class TransientStoreError(AffiliateError):
    """
    Store failure that is safe to retry.

    Every distribution is a single transaction, so a failed attempt leaves
    no partial commissions behind.
    """

    def __init__(self, operation: str, message: str | None = None) -> None:
        self.operation = operation
        super().__init__(message or f"Store operation failed: {operation}")


class StoreTimeoutError(TransientStoreError):
    """Raised when a store operation exceeds its time bound."""

    def __init__(self, operation: str, timeout: float) -> None:
        self.timeout = timeout
        super().__init__(
            operation, f"Store operation timed out after {timeout}s: {operation}"
        )


# Exception categories based on handling strategy

# Retryable - the caller may repeat the request with the same idempotency key
RETRYABLE = (
    TransientStoreError,
    OperationalError,
    InterfaceError,
    TimeoutError,
)

# Caller errors - report back, never retry unchanged
CALLER_ERRORS = (
    InputValidationError,
    ParticipantNotFoundError,
)

# Driver errors converted to TransientStoreError at the service boundary
DRIVER_ERRORS = (
    OperationalError,
    InterfaceError,
)


def is_retryable(exc: BaseException) -> bool:
    """
    Check if the failed operation can be retried.

    Args:
        exc: Exception to check

    Returns:
        True if exception is retryable
    """
    return isinstance(exc, RETRYABLE)


def is_caller_error(exc: BaseException) -> bool:
    """
    Check if exception was caused by caller input.

    Args:
        exc: Exception to check

    Returns:
        True if exception is a caller error
    """
    return isinstance(exc, CALLER_ERRORS)
