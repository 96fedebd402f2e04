"""Health check endpoint."""

from aiohttp import web


async def health_handler(request: web.Request) -> web.Response:
    """
    Liveness endpoint.

    Returns:
        JSON response indicating the process is alive
    """
    return web.json_response({"ok": True})
