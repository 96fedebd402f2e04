"""Administrative participant management."""

from aiohttp import web

from affiliate.config.business_constants import ADMIN_PAGE_DEFAULT
from affiliate.services.participant_service import ParticipantService
from affiliate.utils.exceptions import InputValidationError
from web.auth import current_identity, require_admin
from web.handlers.context import read_json, request_session
from web.schemas import AdminUpdateRequest
from web.serializers import serialize_list_item, serialize_participant


@require_admin
async def list_users_handler(request: web.Request) -> web.Response:
    """Page through participants, newest first."""
    raw_limit = request.query.get("limit")
    try:
        limit = int(raw_limit) if raw_limit else ADMIN_PAGE_DEFAULT
    except ValueError:
        raise InputValidationError("limit", "Limit must be an integer")

    page = await ParticipantService(request_session(request)).list_participants(
        limit=limit, cursor=request.query.get("cursor") or None
    )

    return web.json_response(
        {
            "users": [serialize_list_item(item) for item in page.items],
            "nextCursor": page.next_cursor,
        }
    )


@require_admin
async def update_user_handler(request: web.Request) -> web.Response:
    """Change plan, disabled flag or name of a participant."""
    payload = AdminUpdateRequest.model_validate(await read_json(request))

    participant = await ParticipantService(
        request_session(request)
    ).update_participant(
        request.match_info["uid"],
        tier=payload.plan.value if payload.plan else None,
        disabled=payload.disabled,
        full_name=payload.full_name,
    )

    return web.json_response({"ok": True, "user": serialize_participant(participant)})


@require_admin
async def delete_user_handler(request: web.Request) -> web.Response:
    """Remove a participant and the data owned by them."""
    uid = request.match_info["uid"]
    if uid == current_identity(request).uid:
        raise InputValidationError("uid", "Admins cannot delete themselves")

    existed = await ParticipantService(request_session(request)).delete_participant(uid)
    return web.json_response({"ok": True, "deleted": existed})
