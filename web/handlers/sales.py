"""Sale intake webhook."""

import hmac

from aiohttp import web
from loguru import logger

from affiliate.services.sale_intake_service import SaleIntakeService
from web.handlers.context import (
    CLOCK_KEY,
    COMMISSION_CONFIG_KEY,
    SALES_API_KEY,
    read_json,
    request_session,
)
from web.schemas import SaleRequest
from web.serializers import serialize_sale


async def record_sale_handler(request: web.Request) -> web.Response:
    """
    Record a paid bundle sale.

    Authenticated with the shared key in the X-Sales-Key header. Repeated
    deliveries of the same externalId answer status "exists".
    """
    expected = request.app[SALES_API_KEY]
    if not expected:
        logger.error("Sale received but SALES_API_KEY is not configured")
        return web.json_response({"error": "Sales key not configured"}, status=500)

    provided = request.headers.get("X-Sales-Key", "")
    if not hmac.compare_digest(provided.encode(), expected.encode()):
        logger.warning(
            "Sale rejected: bad sales key",
            extra={"remote": request.remote},
        )
        return web.json_response({"error": "Unauthorized"}, status=401)

    payload = SaleRequest.model_validate(await read_json(request))

    service = SaleIntakeService(
        request_session(request),
        request.app[COMMISSION_CONFIG_KEY],
        clock=request.app[CLOCK_KEY],
    )
    outcome = await service.record_sale(
        idempotency_key=payload.external_id,
        buyer_ref=payload.buyer_email,
        gross_amount=payload.amount_pen,
        referral_code=payload.referral_code,
        source=payload.source or "manual",
    )

    return web.json_response(serialize_sale(outcome))
