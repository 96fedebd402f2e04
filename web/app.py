"""
Application factory.

Wires routes, middlewares and collaborators into an aiohttp application.
"""

from collections.abc import Callable, Iterable
from datetime import datetime

from aiohttp import web
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from affiliate.config.settings import settings
from affiliate.services.commission.config import CommissionConfig
from affiliate.utils.datetime_utils import utc_now
from web.auth import ADMIN_EMAILS_KEY, VERIFIER_KEY, IdentityVerifier
from web.handlers.admin import (
    delete_user_handler,
    list_users_handler,
    update_user_handler,
)
from web.handlers.context import CLOCK_KEY, COMMISSION_CONFIG_KEY, SALES_API_KEY
from web.handlers.dashboard import (
    dashboard_handler,
    network_handler,
    subscription_handler,
    tools_handler,
    upgrade_handler,
)
from web.handlers.health import health_handler
from web.handlers.participants import (
    bootstrap_handler,
    me_handler,
    validate_referral_handler,
)
from web.handlers.sales import record_sale_handler
from web.middlewares import SESSION_MAKER_KEY, database_middleware, error_middleware


def create_app(
    session_maker: async_sessionmaker[AsyncSession],
    verifier: IdentityVerifier,
    config: CommissionConfig | None = None,
    sales_api_key: str | None = None,
    admin_emails: Iterable[str] | None = None,
    clock: Callable[[], datetime] = utc_now,
) -> web.Application:
    """
    Build the HTTP application.

    Args:
        session_maker: Session factory, one session per request
        verifier: Bearer token verifier
        config: Commission configuration (settings default)
        sales_api_key: Shared key for the sales webhook (settings default)
        admin_emails: Admin email list (settings default)
        clock: Source of the current time

    Returns:
        Configured application
    """
    app = web.Application(middlewares=[error_middleware, database_middleware])

    app[SESSION_MAKER_KEY] = session_maker
    app[VERIFIER_KEY] = verifier
    app[COMMISSION_CONFIG_KEY] = config or CommissionConfig.from_settings(settings)
    app[SALES_API_KEY] = (
        settings.sales_api_key if sales_api_key is None else sales_api_key
    )
    app[ADMIN_EMAILS_KEY] = frozenset(
        email.strip().lower()
        for email in (
            settings.get_admin_emails() if admin_emails is None else admin_emails
        )
        if email.strip()
    )
    app[CLOCK_KEY] = clock

    app.router.add_get("/health", health_handler)
    app.router.add_get("/referrals/validate", validate_referral_handler)
    app.router.add_post("/users/bootstrap", bootstrap_handler)
    app.router.add_get("/me", me_handler)
    app.router.add_get("/dashboard", dashboard_handler)
    app.router.add_get("/network", network_handler)
    app.router.add_get("/tools", tools_handler)
    app.router.add_get("/subscription", subscription_handler)
    app.router.add_post("/subscription/upgrade", upgrade_handler)
    app.router.add_post("/bundle/sales", record_sale_handler)
    app.router.add_get("/admin/users", list_users_handler)
    app.router.add_patch("/admin/users/{uid}", update_user_handler)
    app.router.add_delete("/admin/users/{uid}", delete_user_handler)

    return app
