"""
Dashboard service.

Read models for the participant's dashboard, network, tools and
subscription views. Dashboard and network settle matured commissions
before reading balances.
"""

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from affiliate.config.business_constants import (
    COMMISSION_BY_LEVEL,
    MAX_COMMISSION_LEVEL,
    PLAN_FEATURES,
    RECENT_ACTIVITY_LIMIT,
    TOOLS,
    TOTAL_COMMISSION_POTENTIAL,
)
from affiliate.config.settings import settings
from affiliate.config.tiers import (
    TIER_ORDER,
    TIERS,
    TierType,
    tier_max_level,
    tier_rank,
    unlock_tier_for_level,
)
from affiliate.models.activity_note import ActivityNote
from affiliate.repositories.activity_repository import ActivityRepository
from affiliate.repositories.balance_repository import BalanceRepository
from affiliate.services.commission.config import CommissionConfig
from affiliate.services.commission.ledger import current_tier
from affiliate.services.commission.settlement import HoldReleaseResolver
from affiliate.services.participant_service import ParticipantService
from affiliate.services.referral.downline import DownlineBuilder, DownlineMember
from affiliate.services.referral.upline import UplineSummary, UplineWalker
from affiliate.utils.datetime_utils import utc_now


ZERO = Decimal("0")


@dataclass(frozen=True)
class DashboardView:
    """Headline figures for a participant."""

    total_earnings: Decimal
    pending_balance: Decimal
    available_balance: Decimal
    payout_minimum: Decimal
    tier: TierType
    network_size: int
    recent_activity: list[ActivityNote] = field(default_factory=list)

    @property
    def payout_ready(self) -> bool:
        """Available balance reached the payout minimum."""
        return self.available_balance >= self.payout_minimum


@dataclass(frozen=True)
class LevelRow:
    """One commission level in the network view."""

    level: int
    percent: Decimal
    unlock_tier: TierType
    unlocked: bool
    members: int


@dataclass(frozen=True)
class NetworkView:
    """Downline, unlocked levels and upline of a participant."""

    levels: list[LevelRow]
    members: list[DownlineMember]
    total_potential: Decimal
    current_potential: Decimal
    upline: UplineSummary | None


@dataclass(frozen=True)
class ToolAccess:
    """Tool catalog entry with the participant's access status."""

    id: str
    name: str
    description: str
    min_tier: TierType
    active: bool


@dataclass(frozen=True)
class PlanOffer:
    """Subscription plan as listed in the catalog."""

    id: str
    name: str
    price_usd: Decimal
    commission_percent: Decimal
    description: str
    features: tuple[str, ...]


def current_potential(tier: TierType) -> Decimal:
    """Sum of the level percentages a tier can receive."""
    max_level = tier_max_level(tier)
    return sum(
        (p for level, p in COMMISSION_BY_LEVEL.items() if level <= max_level),
        ZERO,
    )


def plan_catalog() -> list[PlanOffer]:
    """Plans from lowest to highest tier."""
    return [
        PlanOffer(
            id=tier.value,
            name=TIERS[tier].display_name,
            price_usd=TIERS[tier].price_usd,
            commission_percent=current_potential(tier),
            description=TIERS[tier].description,
            features=PLAN_FEATURES.get(tier, ()),
        )
        for tier in TIER_ORDER
    ]


def tool_access(tier: TierType) -> list[ToolAccess]:
    """Tool catalog marked active iff the tier reaches the tool's minimum."""
    rank = tier_rank(tier)
    return [
        ToolAccess(
            id=tool_id,
            name=name,
            description=description,
            min_tier=min_tier,
            active=tier_rank(min_tier) <= rank,
        )
        for tool_id, (name, description, min_tier) in TOOLS.items()
    ]


class DashboardService:
    """Participant-facing read models."""

    def __init__(
        self,
        session: AsyncSession,
        config: CommissionConfig | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        """Initialize dashboard service."""
        self.session = session
        self.config = config or CommissionConfig.from_settings(settings)
        self.participants = ParticipantService(session)
        self.balance_repo = BalanceRepository(session)
        self.activity_repo = ActivityRepository(session)
        self.resolver = HoldReleaseResolver(session, clock=clock)
        self.downline_builder = DownlineBuilder(session)
        self.upline_walker = UplineWalker(session)

    async def get_dashboard(self, participant_id: str) -> DashboardView:
        """
        Build the dashboard of a participant.

        Raises:
            ParticipantNotFoundError: If the participant does not exist
        """
        participant = await self.participants.get(participant_id)
        await self.resolver.settle_pending(participant_id)

        tier = current_tier(participant)
        balance = await self.balance_repo.get_by_id(participant_id)
        if balance is not None:
            # Settlement changed the row with an UPDATE statement
            await self.session.refresh(balance)

        activity = await self.activity_repo.get_recent(
            participant_id, RECENT_ACTIVITY_LIMIT
        )
        downline = await self.downline_builder.build_downline(
            participant_id, MAX_COMMISSION_LEVEL
        )

        return DashboardView(
            total_earnings=Decimal(balance.total_earnings) if balance else ZERO,
            pending_balance=Decimal(balance.pending_balance) if balance else ZERO,
            available_balance=(
                Decimal(balance.available_balance) if balance else ZERO
            ),
            payout_minimum=self.config.payout_min,
            tier=tier,
            network_size=downline.total,
            recent_activity=activity,
        )

    async def get_network(self, participant_id: str) -> NetworkView:
        """
        Build the network view of a participant.

        Raises:
            ParticipantNotFoundError: If the participant does not exist
        """
        participant = await self.participants.get(participant_id)
        await self.resolver.settle_pending(participant_id)

        tier = current_tier(participant)
        unlocked_depth = tier_max_level(tier)
        downline = await self.downline_builder.build_downline(
            participant_id, MAX_COMMISSION_LEVEL
        )

        levels = [
            LevelRow(
                level=level,
                percent=percent,
                unlock_tier=unlock_tier_for_level(level),
                unlocked=level <= unlocked_depth,
                members=downline.counts.get(level, 0),
            )
            for level, percent in sorted(COMMISSION_BY_LEVEL.items())
        ]

        return NetworkView(
            levels=levels,
            members=downline.members,
            total_potential=TOTAL_COMMISSION_POTENTIAL,
            current_potential=current_potential(tier),
            upline=await self.upline_walker.get_immediate_upline(participant_id),
        )

    async def get_tools(self, participant_id: str) -> list[ToolAccess]:
        """Tool catalog for the participant's tier."""
        participant = await self.participants.get(participant_id)
        return tool_access(current_tier(participant))

    async def get_subscription(
        self, participant_id: str
    ) -> tuple[list[PlanOffer], TierType]:
        """Plan catalog and the participant's current tier."""
        participant = await self.participants.get(participant_id)
        return plan_catalog(), current_tier(participant)
