"""
Participant service.

Onboarding, tier changes and administrative management of participants.
"""

from dataclasses import dataclass, field
from datetime import datetime

from loguru import logger
from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from affiliate.config.business_constants import (
    ADMIN_PAGE_DEFAULT,
    ADMIN_PAGE_MAX,
    MAX_COMMISSION_LEVEL,
)
from affiliate.config.settings import settings
from affiliate.config.tiers import DEFAULT_TIER, TierType
from affiliate.models.activity_note import ActivityNote
from affiliate.models.balance_record import BalanceRecord
from affiliate.models.commission_entry import CommissionEntry
from affiliate.models.network_edge import NetworkEdge
from affiliate.models.participant import Participant
from affiliate.repositories.activity_repository import ActivityRepository
from affiliate.repositories.balance_repository import BalanceRepository
from affiliate.repositories.commission_repository import CommissionRepository
from affiliate.repositories.network_edge_repository import NetworkEdgeRepository
from affiliate.repositories.participant_repository import ParticipantRepository
from affiliate.services.referral.directory import ReferralDirectory
from affiliate.services.referral.upline import UplineWalker
from affiliate.utils.db_decorators import with_rollback_on_error
from affiliate.utils.exceptions import (
    InputValidationError,
    ParticipantNotFoundError,
    TransientStoreError,
)
from affiliate.utils.timeouts import bounded
from affiliate.validators.common import validate_tier


@dataclass(frozen=True)
class ParticipantListItem:
    """Participant row for the admin listing."""

    id: str
    email: str
    full_name: str
    tier: str
    referral_code: str
    referred_by: str | None
    referred_by_name: str | None
    disabled: bool
    created_at: datetime | None


@dataclass
class ParticipantPage:
    """One page of the admin listing."""

    items: list[ParticipantListItem] = field(default_factory=list)
    next_cursor: str | None = None


class ParticipantService:
    """Participant lifecycle operations."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize participant service."""
        self.session = session
        self.timeout = settings.store_timeout_seconds
        self.participant_repo = ParticipantRepository(session)
        self.balance_repo = BalanceRepository(session)
        self.edge_repo = NetworkEdgeRepository(session)
        self.commission_repo = CommissionRepository(session)
        self.activity_repo = ActivityRepository(session)
        self.directory = ReferralDirectory(session)
        self.upline_walker = UplineWalker(session)

    async def get(self, participant_id: str) -> Participant:
        """
        Get participant or raise.

        Raises:
            ParticipantNotFoundError: If the participant does not exist
        """
        participant = await self.participant_repo.get_by_id(participant_id)
        if participant is None:
            raise ParticipantNotFoundError(participant_id)
        return participant

    @with_rollback_on_error
    async def bootstrap(
        self,
        participant_id: str,
        email: str,
        full_name: str | None = None,
        referrer_code: str | None = None,
    ) -> tuple[Participant, bool]:
        """
        Create the participant on first sign-in.

        Idempotent per participant id. The referrer is resolved once, here,
        and never changes afterwards.

        Args:
            participant_id: Identity from the authentication provider
            email: Verified email
            full_name: Display name
            referrer_code: Referral code used at signup

        Returns:
            Tuple of (participant, created)

        Raises:
            InputValidationError: On malformed name or code
        """
        if full_name is not None and len(full_name.strip()) < 2:
            raise InputValidationError("full_name", "Name must be at least 2 characters")
        if referrer_code is not None and len(referrer_code.strip()) < 3:
            raise InputValidationError("referrer_code", "Code must be at least 3 characters")

        existing = await self.participant_repo.get_by_id(participant_id)
        if existing is not None:
            await self.balance_repo.ensure(existing.id, existing.tier_type)
            await bounded(self.session.commit(), self.timeout, "bootstrap.commit")
            return existing, False

        referrer = None
        if referrer_code:
            referrer = await self.directory.lookup(referrer_code)

        code = await self.directory.generate_unique_code()

        participant = await self.participant_repo.create(
            id=participant_id,
            email=email or "",
            full_name=(full_name or "").strip(),
            tier=DEFAULT_TIER.value,
            referral_code=code,
            referrer_id=referrer.id if referrer else None,
            disabled=False,
        )
        await self.balance_repo.create(
            participant_id=participant_id,
            tier=DEFAULT_TIER.value,
        )

        if referrer is not None:
            ancestors = await self.upline_walker.walk_from(
                referrer, MAX_COMMISSION_LEVEL
            )
            for level, ancestor in ancestors:
                self.session.add(
                    NetworkEdge(
                        owner_id=ancestor.id,
                        member_id=participant_id,
                        member_name=participant.display_name,
                        member_tier=DEFAULT_TIER.value,
                        level=level,
                    )
                )

            self.session.add(
                ActivityNote(
                    participant_id=referrer.id,
                    name=participant.display_name,
                    action="joined your network",
                    label="Level 1",
                )
            )

        try:
            await bounded(self.session.commit(), self.timeout, "bootstrap.commit")
        except IntegrityError:
            await self.session.rollback()
            existing = await self.participant_repo.get_by_id(participant_id)
            if existing is None:
                # Referral code taken between check and commit
                raise TransientStoreError(
                    "bootstrap", f"Conflicting write for participant {participant_id}"
                )
            return existing, False

        logger.info(
            "Participant created",
            extra={
                "participant_id": participant_id,
                "referral_code": code,
                "referrer_id": referrer.id if referrer else None,
            },
        )

        return participant, True

    @with_rollback_on_error
    async def change_tier(self, participant_id: str, tier: str) -> TierType:
        """
        Change a participant's subscription tier.

        Args:
            participant_id: Participant id
            tier: New tier id

        Returns:
            New tier

        Raises:
            InputValidationError: If the tier is unknown
            ParticipantNotFoundError: If the participant does not exist
        """
        is_valid, new_tier, error = validate_tier(tier)
        if not is_valid:
            raise InputValidationError("tier", error)

        updated = await self.participant_repo.set_fields(
            participant_id, tier=new_tier.value
        )
        if not updated:
            raise ParticipantNotFoundError(participant_id)

        await self.balance_repo.set_tier(participant_id, new_tier)
        await self.edge_repo.update_member(participant_id, member_tier=new_tier)
        await bounded(self.session.commit(), self.timeout, "change_tier.commit")

        logger.info(
            "Participant tier changed",
            extra={"participant_id": participant_id, "tier": new_tier.value},
        )

        return new_tier

    @with_rollback_on_error
    async def update_participant(
        self,
        participant_id: str,
        tier: str | None = None,
        disabled: bool | None = None,
        full_name: str | None = None,
    ) -> Participant:
        """
        Apply administrative changes.

        Args:
            participant_id: Participant id
            tier: New tier id
            disabled: New disabled flag
            full_name: New display name

        Returns:
            Updated participant
        """
        new_tier = None
        if tier is not None:
            is_valid, new_tier, error = validate_tier(tier)
            if not is_valid:
                raise InputValidationError("tier", error)
        if full_name is not None and len(full_name.strip()) < 2:
            raise InputValidationError("full_name", "Name must be at least 2 characters")

        participant = await self.get(participant_id)

        if new_tier is not None:
            participant.tier = new_tier.value
            await self.balance_repo.set_tier(participant_id, new_tier)
        if disabled is not None:
            participant.disabled = disabled
        if full_name is not None:
            participant.full_name = full_name.strip()

        if new_tier is not None or full_name is not None:
            await self.edge_repo.update_member(
                participant_id,
                member_tier=new_tier,
                member_name=participant.display_name if full_name is not None else None,
            )

        await bounded(self.session.commit(), self.timeout, "update_participant.commit")

        logger.info(
            "Participant updated by admin",
            extra={
                "participant_id": participant_id,
                "tier": new_tier.value if new_tier else None,
                "disabled": disabled,
            },
        )

        return participant

    async def list_participants(
        self, limit: int = ADMIN_PAGE_DEFAULT, cursor: str | None = None
    ) -> ParticipantPage:
        """
        List participants newest first.

        Args:
            limit: Page size, capped at ADMIN_PAGE_MAX
            cursor: Id of the last participant of the previous page

        Returns:
            ParticipantPage with next_cursor (None on an empty page)
        """
        limit = max(1, min(limit or ADMIN_PAGE_DEFAULT, ADMIN_PAGE_MAX))

        after = None
        if cursor:
            anchor = await self.participant_repo.get_by_id(cursor)
            if anchor is not None:
                after = (anchor.created_at, anchor.id)

        rows = await self.participant_repo.list_page(limit, after)

        referrer_ids = sorted({p.referrer_id for p in rows if p.referrer_id})
        referrers = await self.participant_repo.get_many(referrer_ids)

        items = []
        for p in rows:
            ref = referrers.get(p.referrer_id) if p.referrer_id else None
            items.append(
                ParticipantListItem(
                    id=p.id,
                    email=p.email,
                    full_name=p.full_name,
                    tier=p.tier,
                    referral_code=p.referral_code,
                    referred_by=p.referrer_id,
                    referred_by_name=(
                        (ref.full_name or ref.email or ref.id) if ref else None
                    ),
                    disabled=p.disabled,
                    created_at=p.created_at,
                )
            )

        return ParticipantPage(
            items=items,
            next_cursor=rows[-1].id if rows else None,
        )

    @with_rollback_on_error
    async def delete_participant(self, participant_id: str) -> bool:
        """
        Remove a participant and everything owned by them.

        Deletes commission entries credited to the participant, the balance
        record, network edges in both directions and the activity feed.
        Sales stay as history.

        Args:
            participant_id: Participant id

        Returns:
            True if the participant existed
        """
        removed_commissions = await self.commission_repo.delete_where(
            CommissionEntry.beneficiary_id == participant_id
        )
        await self.edge_repo.delete_where(
            or_(
                NetworkEdge.owner_id == participant_id,
                NetworkEdge.member_id == participant_id,
            )
        )
        await self.activity_repo.delete_where(
            ActivityNote.participant_id == participant_id
        )
        await self.balance_repo.delete_where(
            BalanceRecord.participant_id == participant_id
        )
        removed = await self.participant_repo.delete_where(
            Participant.id == participant_id
        )

        await bounded(self.session.commit(), self.timeout, "delete_participant.commit")

        logger.info(
            "Participant deleted",
            extra={
                "participant_id": participant_id,
                "existed": removed > 0,
                "commissions_removed": removed_commissions,
            },
        )

        return removed > 0
