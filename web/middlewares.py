"""
HTTP middlewares.

Error middleware turns domain exceptions into JSON error responses.
Database middleware gives each request its own session.
"""

from aiohttp import web
from loguru import logger
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import async_sessionmaker

from affiliate.utils.exceptions import (
    InputValidationError,
    ParticipantNotFoundError,
    ReferralCodeExhaustedError,
    is_retryable,
)
from web.auth import Handler


SESSION_MAKER_KEY = web.AppKey("session_maker", async_sessionmaker)


@web.middleware
async def error_middleware(
    request: web.Request, handler: Handler
) -> web.StreamResponse:
    """Map exceptions to status codes: 400 input, 404 missing, 503 retryable."""
    try:
        return await handler(request)
    except web.HTTPException:
        raise
    except ValidationError as e:
        return web.json_response(
            {
                "error": "Invalid payload",
                "details": [
                    {"field": ".".join(str(p) for p in err["loc"]), "message": err["msg"]}
                    for err in e.errors()
                ],
            },
            status=400,
        )
    except InputValidationError as e:
        return web.json_response(
            {"error": e.message, "field": e.field}, status=400
        )
    except ParticipantNotFoundError:
        return web.json_response({"error": "User not found"}, status=404)
    except ReferralCodeExhaustedError as e:
        logger.error(
            "Referral code space exhausted", extra={"attempts": e.attempts}
        )
        return web.json_response(
            {"error": "Temporarily unavailable", "retryable": True}, status=503
        )
    except Exception as e:
        if is_retryable(e):
            logger.bind(error_type=type(e).__name__).warning(
                "Retryable failure on {} {}: {}", request.method, request.path, e
            )
            return web.json_response(
                {"error": "Temporarily unavailable", "retryable": True},
                status=503,
            )

        logger.bind(error_type=type(e).__name__).exception(
            "Unexpected error on {} {}: {}", request.method, request.path, e
        )
        return web.json_response({"error": "Internal error"}, status=500)


@web.middleware
async def database_middleware(
    request: web.Request, handler: Handler
) -> web.StreamResponse:
    """Open a session for the request; services commit their own work."""
    async with request.app[SESSION_MAKER_KEY]() as session:
        request["session"] = session
        return await handler(request)
