"""
HTTP server entry point.

Run with: python -m web.main
"""

import asyncio

from aiohttp import web
from loguru import logger

from affiliate.config.database import create_engine, create_session_maker
from affiliate.config.settings import settings
from affiliate.services.commission.config import CommissionConfig
from web.app import create_app
from web.auth import JWTIdentityVerifier
from web.initialization.logging import setup_logging


async def start_web_server(
    app: web.Application,
    host: str,
    port: int,
) -> web.AppRunner:
    """
    Start the HTTP server.

    Args:
        app: Application to serve
        host: Host to bind to
        port: Port to bind to

    Returns:
        AppRunner for cleanup
    """
    runner = web.AppRunner(app)
    await runner.setup()
    site = web.TCPSite(runner, host, port)
    await site.start()

    logger.info(f"Affiliate server started on {host}:{port}")

    return runner


async def stop_web_server(runner: web.AppRunner, timeout: int = 5) -> None:
    """
    Stop the HTTP server gracefully.

    Args:
        runner: AppRunner to cleanup
        timeout: Maximum time to wait for cleanup in seconds
    """
    logger.info("Stopping affiliate server...")
    try:
        await asyncio.wait_for(runner.cleanup(), timeout=timeout)
        logger.info("Affiliate server stopped successfully")
    except TimeoutError:
        logger.warning(f"Server cleanup timed out after {timeout}s")


async def main() -> None:
    """Serve until cancelled."""
    setup_logging()

    engine = create_engine()
    app = create_app(
        create_session_maker(engine),
        JWTIdentityVerifier(settings.auth_jwt_secret, settings.auth_jwt_algorithm),
        config=CommissionConfig.from_settings(settings),
    )

    runner = await start_web_server(app, settings.web_host, settings.web_port)
    try:
        await asyncio.Event().wait()
    finally:
        await stop_web_server(runner)
        await engine.dispose()
        logger.info("Database connections closed")


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
