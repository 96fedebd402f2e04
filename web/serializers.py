"""JSON shapes returned by the handlers."""

from datetime import datetime
from decimal import Decimal
from typing import Any

from affiliate.config.business_constants import MONEY_QUANTUM
from affiliate.config.tiers import TIERS, TierType
from affiliate.models.activity_note import ActivityNote
from affiliate.models.participant import Participant
from affiliate.services.dashboard_service import (
    DashboardView,
    NetworkView,
    PlanOffer,
    ToolAccess,
)
from affiliate.services.participant_service import ParticipantListItem
from affiliate.services.sale_intake_service import SaleOutcome


def money(value: Decimal | float | int) -> str:
    """Format an amount with two decimals."""
    return str(Decimal(str(value)).quantize(MONEY_QUANTUM))


def percent(value: Decimal) -> int | float:
    """Render a percentage as a plain JSON number."""
    value = Decimal(str(value))
    return int(value) if value == value.to_integral_value() else float(value)


def timestamp(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


def serialize_participant(p: Participant) -> dict[str, Any]:
    return {
        "uid": p.id,
        "email": p.email,
        "fullName": p.full_name,
        "plan": p.tier,
        "referralCode": p.referral_code,
        "referredBy": p.referrer_id,
        "disabled": p.disabled,
        "createdAt": timestamp(p.created_at),
    }


def serialize_list_item(item: ParticipantListItem) -> dict[str, Any]:
    return {
        "uid": item.id,
        "email": item.email,
        "fullName": item.full_name,
        "plan": item.tier,
        "referralCode": item.referral_code,
        "referredBy": item.referred_by,
        "referredByName": item.referred_by_name,
        "disabled": item.disabled,
        "createdAt": timestamp(item.created_at),
    }


def serialize_activity(note: ActivityNote) -> dict[str, Any]:
    return {
        "id": note.id,
        "name": note.name,
        "action": note.action,
        "level": note.label,
        "createdAt": timestamp(note.created_at),
    }


def serialize_dashboard(view: DashboardView) -> dict[str, Any]:
    return {
        "stats": {
            "totalEarnings": money(view.total_earnings),
            "pendingBalance": money(view.pending_balance),
            "availableBalance": money(view.available_balance),
            "payoutMinimum": money(view.payout_minimum),
            "payoutReady": view.payout_ready,
            "plan": {"id": view.tier.value, "name": TIERS[view.tier].display_name},
            "networkSize": view.network_size,
        },
        "recentActivity": [serialize_activity(n) for n in view.recent_activity],
    }


def serialize_network(view: NetworkView) -> dict[str, Any]:
    upline = None
    if view.upline is not None:
        upline = {
            "id": view.upline.id,
            "name": view.upline.name,
            "plan": view.upline.tier,
            "referralCode": view.upline.referral_code,
        }

    return {
        "levels": [
            {
                "level": row.level,
                "commission": percent(row.percent),
                "unlockPlan": TIERS[row.unlock_tier].display_name,
                "unlocked": row.unlocked,
                "members": row.members,
            }
            for row in view.levels
        ],
        "members": [
            {
                "uid": m.id,
                "name": m.name,
                "plan": m.tier,
                "level": m.level,
                "earnings": money(m.earnings),
            }
            for m in view.members
        ],
        "totalPotential": percent(view.total_potential),
        "currentPotential": percent(view.current_potential),
        "upline": upline,
    }


def serialize_tool(tool: ToolAccess) -> dict[str, Any]:
    return {
        "id": tool.id,
        "name": tool.name,
        "description": tool.description,
        "minPlan": tool.min_tier.value,
        "status": "active" if tool.active else "inactive",
    }


def serialize_plan(plan: PlanOffer) -> dict[str, Any]:
    return {
        "id": plan.id,
        "name": plan.name,
        "price": percent(plan.price_usd),
        "commission": percent(plan.commission_percent),
        "description": plan.description,
        "features": list(plan.features),
    }


def serialize_subscription(plans: list[PlanOffer], tier: TierType) -> dict[str, Any]:
    return {
        "plans": [serialize_plan(p) for p in plans],
        "currentPlan": tier.value,
    }


def serialize_sale(outcome: SaleOutcome) -> dict[str, Any]:
    return {
        "ok": True,
        "saleId": outcome.sale_id,
        "status": outcome.status,
        "amountUsd": money(outcome.settlement_amount),
        "commissions": [
            {
                "level": c.level,
                "beneficiaryId": c.beneficiary_id,
                "percent": percent(c.percent),
                "amountUsd": money(c.amount),
            }
            for c in outcome.commissions
        ],
    }
