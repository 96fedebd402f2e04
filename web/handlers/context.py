"""Per-application collaborators shared by the handlers."""

from collections.abc import Callable
from datetime import datetime

from aiohttp import web
from sqlalchemy.ext.asyncio import AsyncSession

from affiliate.services.commission.config import CommissionConfig


COMMISSION_CONFIG_KEY = web.AppKey("commission_config", CommissionConfig)
CLOCK_KEY = web.AppKey("clock", Callable[[], datetime])
SALES_API_KEY = web.AppKey("sales_api_key", str)


def request_session(request: web.Request) -> AsyncSession:
    """Session opened by the database middleware."""
    return request["session"]


async def read_json(request: web.Request) -> dict:
    """Parse a JSON object body; empty or malformed bodies become {}."""
    if not request.can_read_body:
        return {}
    try:
        body = await request.json()
    except ValueError:
        raise web.HTTPBadRequest(
            text='{"error": "Invalid JSON"}', content_type="application/json"
        )
    return body if isinstance(body, dict) else {}
