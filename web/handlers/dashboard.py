"""Participant dashboard endpoints."""

from aiohttp import web

from affiliate.services.dashboard_service import DashboardService
from affiliate.services.participant_service import ParticipantService
from web.auth import current_identity, require_auth
from web.handlers.context import (
    CLOCK_KEY,
    COMMISSION_CONFIG_KEY,
    read_json,
    request_session,
)
from web.schemas import UpgradeRequest
from web.serializers import (
    serialize_dashboard,
    serialize_network,
    serialize_subscription,
    serialize_tool,
)


def dashboard_service(request: web.Request) -> DashboardService:
    return DashboardService(
        request_session(request),
        config=request.app[COMMISSION_CONFIG_KEY],
        clock=request.app[CLOCK_KEY],
    )


@require_auth
async def dashboard_handler(request: web.Request) -> web.Response:
    """Balances, tier, network size and recent activity."""
    view = await dashboard_service(request).get_dashboard(
        current_identity(request).uid
    )
    return web.json_response(serialize_dashboard(view))


@require_auth
async def network_handler(request: web.Request) -> web.Response:
    """Commission levels, downline members and upline."""
    view = await dashboard_service(request).get_network(
        current_identity(request).uid
    )
    return web.json_response(serialize_network(view))


@require_auth
async def tools_handler(request: web.Request) -> web.Response:
    """Tool catalog with access status."""
    tools = await dashboard_service(request).get_tools(current_identity(request).uid)
    return web.json_response({"tools": [serialize_tool(t) for t in tools]})


@require_auth
async def subscription_handler(request: web.Request) -> web.Response:
    """Plan catalog and current plan."""
    plans, tier = await dashboard_service(request).get_subscription(
        current_identity(request).uid
    )
    return web.json_response(serialize_subscription(plans, tier))


@require_auth
async def upgrade_handler(request: web.Request) -> web.Response:
    """Switch the caller to another plan."""
    payload = UpgradeRequest.model_validate(await read_json(request))
    tier = await ParticipantService(request_session(request)).change_tier(
        current_identity(request).uid, payload.plan.value
    )
    return web.json_response({"ok": True, "plan": tier.value})
