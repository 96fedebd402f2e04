"""Referral validation, onboarding and profile endpoints."""

from aiohttp import web

from affiliate.services.participant_service import ParticipantService
from affiliate.services.referral.directory import ReferralDirectory
from web.auth import current_identity, require_auth
from web.handlers.context import read_json, request_session
from web.schemas import BootstrapRequest
from web.serializers import serialize_participant


async def validate_referral_handler(request: web.Request) -> web.Response:
    """
    Check a referral code before signup.

    Malformed and unknown codes both answer valid=false.
    """
    code = request.query.get("code", "")
    referrer = await ReferralDirectory(request_session(request)).lookup(code)
    if referrer is None:
        return web.json_response({"valid": False})

    return web.json_response(
        {
            "valid": True,
            "referrerId": referrer.id,
            "referrerName": referrer.full_name or referrer.email or "",
        }
    )


@require_auth
async def bootstrap_handler(request: web.Request) -> web.Response:
    """Create the caller's participant record on first sign-in."""
    payload = BootstrapRequest.model_validate(await read_json(request))
    identity = current_identity(request)

    participant, _created = await ParticipantService(
        request_session(request)
    ).bootstrap(
        participant_id=identity.uid,
        email=identity.email,
        full_name=payload.full_name or identity.name,
        referrer_code=payload.referrer_code,
    )

    return web.json_response({"user": serialize_participant(participant)})


@require_auth
async def me_handler(request: web.Request) -> web.Response:
    """Caller's participant record."""
    participant = await ParticipantService(request_session(request)).get(
        current_identity(request).uid
    )
    return web.json_response({"user": serialize_participant(participant)})
