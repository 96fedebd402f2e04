"""Pytest configuration and shared fixtures for all tests."""

import os
import sys
from pathlib import Path

# Minimal environment for settings validation
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("SALES_API_KEY", "test_sales_key_0123456789")
os.environ.setdefault("AUTH_JWT_SECRET", "test_jwt_secret_for_testing_only")
os.environ.setdefault("ADMIN_EMAILS", "admin@example.com")
os.environ.setdefault("LOG_FILE", "logs/test.log")

# Project root on PYTHONPATH
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from datetime import UTC, datetime, timedelta
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest

from affiliate.services.commission.config import CommissionConfig


class FakeClock:
    """Controllable time source."""

    def __init__(self, start: datetime) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def mock_session():
    """Mock AsyncSession for tests without a database."""
    session = AsyncMock()
    session.execute = AsyncMock()
    session.get = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.flush = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session


@pytest.fixture
def clock():
    """Clock starting at 2026-01-01 00:00 UTC."""
    return FakeClock(datetime(2026, 1, 1, tzinfo=UTC))


@pytest.fixture
def commission_config():
    """
    Commission configuration with a 1:1 currency rate.

    Keeps amounts exact on SQLite, which stores decimals as floats.
    """
    return CommissionConfig(
        hold_days=14,
        fx_rate=Decimal("1"),
        payout_min=Decimal("100"),
    )
