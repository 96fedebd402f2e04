"""
Shared fixtures for integration tests.

Every test gets a fresh in-memory SQLite database with the full schema.
"""

from datetime import UTC, datetime, timedelta
from decimal import Decimal

import pytest
from sqlalchemy import select

from affiliate.config.database import create_engine, create_session_maker
from affiliate.models import Base, BalanceRecord, CommissionEntry, Participant


@pytest.fixture
async def engine():
    """In-memory database engine with all tables created."""
    engine = create_engine("sqlite+aiosqlite:///:memory:")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_maker(engine):
    """Session factory bound to the test engine."""
    return create_session_maker(engine)


@pytest.fixture
async def session(session_maker):
    """Database session for one test."""
    async with session_maker() as session:
        yield session


@pytest.fixture
def make_participant(session):
    """
    Factory for participants with an empty balance record.

    Creation times increase with every call so ordering is deterministic.
    """
    counter = {"n": 0}
    base_time = datetime(2025, 6, 1, tzinfo=UTC)

    async def _make(
        participant_id: str,
        tier: str = "basic",
        referrer_id: str | None = None,
        referral_code: str | None = None,
        full_name: str | None = None,
    ) -> Participant:
        counter["n"] += 1
        participant = Participant(
            id=participant_id,
            email=f"{participant_id.lower()}@example.com",
            full_name=full_name if full_name is not None else f"User {participant_id}",
            tier=tier,
            referral_code=referral_code or f"AF-{participant_id.upper():0>6}"[:20],
            referrer_id=referrer_id,
            disabled=False,
            created_at=base_time + timedelta(minutes=counter["n"]),
        )
        session.add(participant)
        session.add(
            BalanceRecord(
                participant_id=participant_id,
                total_earnings=Decimal("0"),
                pending_balance=Decimal("0"),
                available_balance=Decimal("0"),
                tier=tier,
            )
        )
        await session.commit()
        return participant

    return _make


@pytest.fixture
def balance_of(session):
    """Reload a balance record from the database."""

    async def _balance(participant_id: str) -> BalanceRecord | None:
        return await session.get(
            BalanceRecord, participant_id, populate_existing=True
        )

    return _balance


@pytest.fixture
def entries_of(session):
    """Reload a participant's commission entries, ordered by id."""

    async def _entries(beneficiary_id: str) -> list[CommissionEntry]:
        result = await session.execute(
            select(CommissionEntry)
            .where(CommissionEntry.beneficiary_id == beneficiary_id)
            .order_by(CommissionEntry.id)
            .execution_options(populate_existing=True)
        )
        return list(result.scalars().all())

    return _entries
