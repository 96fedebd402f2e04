"""Unit tests for exception categories, rollback decorator and time bounds."""

import asyncio

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError

from affiliate.utils.db_decorators import with_rollback_on_error
from affiliate.utils.exceptions import (
    InputValidationError,
    ParticipantNotFoundError,
    StoreTimeoutError,
    TransientStoreError,
    is_caller_error,
    is_retryable,
)
from affiliate.utils.timeouts import bounded


class FakeService:
    """Service shape the decorator expects: a `session` attribute."""

    def __init__(self, session):
        self.session = session

    @with_rollback_on_error
    async def fail_with(self, exc):
        raise exc

    @with_rollback_on_error
    async def succeed(self):
        return "done"


class TestCategories:
    """Tests for exception classification."""

    def test_retryable(self):
        assert is_retryable(TransientStoreError("op"))
        assert is_retryable(StoreTimeoutError("op", 1.0))
        assert is_retryable(OperationalError("SELECT 1", {}, Exception("down")))
        assert not is_retryable(InputValidationError("amount", "bad"))

    def test_caller_errors(self):
        assert is_caller_error(InputValidationError("amount", "bad"))
        assert is_caller_error(ParticipantNotFoundError("u1"))
        assert not is_caller_error(TransientStoreError("op"))

    def test_timeout_is_transient(self):
        error = StoreTimeoutError("sales.create", 2.5)
        assert isinstance(error, TransientStoreError)
        assert error.operation == "sales.create"
        assert error.timeout == 2.5


class TestRollbackDecorator:
    """Tests for with_rollback_on_error."""

    @pytest.mark.asyncio
    async def test_success_does_not_rollback(self, mock_session):
        assert await FakeService(mock_session).succeed() == "done"
        mock_session.rollback.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_driver_error_becomes_transient(self, mock_session):
        original = OperationalError("UPDATE balance_records", {}, Exception("reset"))

        with pytest.raises(TransientStoreError) as exc_info:
            await FakeService(mock_session).fail_with(original)

        assert exc_info.value.__cause__ is original
        mock_session.rollback.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_integrity_error_passes_through(self, mock_session):
        original = IntegrityError("INSERT INTO sales", {}, Exception("UNIQUE"))

        with pytest.raises(IntegrityError):
            await FakeService(mock_session).fail_with(original)

        mock_session.rollback.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_domain_error_passes_through(self, mock_session):
        with pytest.raises(InputValidationError):
            await FakeService(mock_session).fail_with(
                InputValidationError("amount", "bad")
            )

        mock_session.rollback.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_braces_in_error_text_keep_original(self, mock_session):
        mock_session.rollback.side_effect = RuntimeError("rollback {broken}")

        with pytest.raises(ValueError, match="payload"):
            await FakeService(mock_session).fail_with(ValueError("payload {'k': 1}"))

        mock_session.rollback.assert_awaited_once()


class TestBounded:
    """Tests for store time bounds."""

    @pytest.mark.asyncio
    async def test_returns_result_in_time(self):
        async def quick():
            return 42

        assert await bounded(quick(), 1.0, "quick") == 42

    @pytest.mark.asyncio
    async def test_raises_store_timeout(self):
        with pytest.raises(StoreTimeoutError) as exc_info:
            await bounded(asyncio.sleep(1), 0.01, "slow.op")

        assert exc_info.value.operation == "slow.op"
        assert is_retryable(exc_info.value)
