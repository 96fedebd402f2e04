"""Integration tests for releasing commissions after the refund hold."""

from decimal import Decimal

import pytest

from affiliate.models import CommissionStatus
from affiliate.services.commission.settlement import HoldReleaseResolver
from affiliate.services.sale_intake_service import SaleIntakeService


@pytest.fixture
async def credited(session, make_participant, commission_config, clock):
    """P (pro, referred by elite E) earned 50 and E earned 20 at day 0."""
    await make_participant("E", tier="elite", referral_code="AF-EEEE22")
    await make_participant("P", tier="pro", referrer_id="E", referral_code="AF-PPPP22")
    service = SaleIntakeService(session, commission_config, clock=clock)
    await service.record_sale(
        "sale-100", "buyer@example.com", Decimal("100"), referral_code="AF-PPPP22"
    )


class TestHoldRelease:
    """Tests for HoldReleaseResolver.settle_pending."""

    @pytest.mark.asyncio
    async def test_nothing_released_during_hold(
        self, session, credited, clock, balance_of
    ):
        resolver = HoldReleaseResolver(session, clock=clock)

        clock.advance(days=13, hours=23)
        result = await resolver.settle_pending("P")

        assert result.released_count == 0
        assert result.released_total == Decimal("0")
        balance = await balance_of("P")
        assert balance.pending_balance == Decimal("50")
        assert balance.available_balance == Decimal("0")

    @pytest.mark.asyncio
    async def test_released_when_hold_expires(
        self, session, credited, clock, balance_of, entries_of
    ):
        """At exactly hold_until the commission moves to available."""
        resolver = HoldReleaseResolver(session, clock=clock)

        clock.advance(days=14)
        result = await resolver.settle_pending("P")

        assert result.released_count == 1
        assert result.released_total == Decimal("50")

        balance = await balance_of("P")
        assert balance.total_earnings == Decimal("50")
        assert balance.pending_balance == Decimal("0")
        assert balance.available_balance == Decimal("50")

        entries = await entries_of("P")
        assert entries[0].status == CommissionStatus.APPROVED
        assert entries[0].released_at is not None

    @pytest.mark.asyncio
    async def test_settlement_is_idempotent(
        self, session, credited, clock, balance_of
    ):
        resolver = HoldReleaseResolver(session, clock=clock)
        clock.advance(days=20)

        first = await resolver.settle_pending("P")
        second = await resolver.settle_pending("P")

        assert first.released_count == 1
        assert second.released_count == 0
        assert (await balance_of("P")).available_balance == Decimal("50")

    @pytest.mark.asyncio
    async def test_only_own_entries_released(
        self, session, credited, clock, balance_of
    ):
        resolver = HoldReleaseResolver(session, clock=clock)
        clock.advance(days=14)

        await resolver.settle_pending("P")

        e_balance = await balance_of("E")
        assert e_balance.pending_balance == Decimal("20")
        assert e_balance.available_balance == Decimal("0")

    @pytest.mark.asyncio
    async def test_only_matured_entries_released(
        self, session, credited, commission_config, clock, balance_of
    ):
        """A later sale stays pending while an earlier one is released."""
        clock.advance(days=10)
        service = SaleIntakeService(session, commission_config, clock=clock)
        await service.record_sale(
            "sale-101", "buyer2@example.com", Decimal("200"), referral_code="AF-PPPP22"
        )

        clock.advance(days=4)
        result = await HoldReleaseResolver(session, clock=clock).settle_pending("P")

        assert result.released_total == Decimal("50")
        balance = await balance_of("P")
        assert balance.total_earnings == Decimal("150")
        assert balance.pending_balance == Decimal("100")
        assert balance.available_balance == Decimal("50")

    @pytest.mark.asyncio
    async def test_balance_invariant_holds(
        self, session, credited, commission_config, clock, balance_of
    ):
        """total == pending + available after every operation."""
        service = SaleIntakeService(session, commission_config, clock=clock)
        resolver = HoldReleaseResolver(session, clock=clock)

        for day, key in [(3, "sale-110"), (9, "sale-111"), (15, "sale-112")]:
            clock.advance(days=day)
            await service.record_sale(
                key, "buyer@example.com", Decimal("10"), referral_code="AF-PPPP22"
            )
            await resolver.settle_pending("P")
            await resolver.settle_pending("E")

            for pid in ("P", "E"):
                balance = await balance_of(pid)
                assert balance.total_earnings == (
                    balance.pending_balance + balance.available_balance
                )
                assert balance.pending_balance >= 0
                assert balance.available_balance >= 0

    @pytest.mark.asyncio
    async def test_participant_without_commissions(self, session, make_participant, clock):
        await make_participant("Z")

        result = await HoldReleaseResolver(session, clock=clock).settle_pending("Z")

        assert result.released_count == 0
