"""
App
-----
"""

import sentry_sdk
from aiohttp import web
from aiohttp_apispec import setup_aiohttp_apispec
from sentry_sdk.integrations.aiohttp import AioHttpIntegration

from p2pvps import server_mode, logger
from p2pvps.config import (
    api_root, auth_url, obcontract_url, openbazaar_url, port_control_url, admin_username, admin_password, sentry_dsn,
    database_url
)
from p2pvps.middleware import validate_token_middleware
from p2pvps.service.clients import (
    AuthClient, AdminCredentials, ObContractClient, OpenBazaarClient, PortControlClient
)
from p2pvps.service.manager.listing_manager import ListingManager
from p2pvps.service.manager.payment_manager import PaymentManager
from p2pvps.service.payment import DummyRefundDispatcher, OpenBazaarRefundDispatcher
from p2pvps.service.verify_token import JWTVerifier
from p2pvps.signals import register_signals
from p2pvps.store import DatabaseLedgerStore
from p2pvps.version import __version__, name
from p2pvps.views import register_views


def build_app(db_uri=None):
    """Sets up the app, wiring the managers to the other marketplace services."""
    app = web.Application(middlewares=[validate_token_middleware])

    openbazaar_client = OpenBazaarClient(openbazaar_url)

    if admin_username is not None and admin_password is not None:
        credentials = AdminCredentials(admin_username, admin_password)
    else:
        logger.warning("No admin credentials configured, market listings are disabled.")
        credentials = None

    if server_mode == "development":
        dispatcher = DummyRefundDispatcher()
    else:
        dispatcher = OpenBazaarRefundDispatcher(openbazaar_client)

    app['database_uri'] = db_uri if db_uri is not None else database_url
    app['token_verifier'] = JWTVerifier()
    app['payment_manager'] = PaymentManager(DatabaseLedgerStore(), dispatcher)
    app['listing_manager'] = ListingManager(
        AuthClient(auth_url),
        ObContractClient(obcontract_url),
        openbazaar_client,
        PortControlClient(port_control_url),
        credentials,
    )

    register_signals(app)
    register_views(app, api_root)

    setup_aiohttp_apispec(
        app=app, title=name, version=__version__, url=f"{api_root}/docs",
        components={
            "securitySchemes": {
                "Token": {
                    "type": "http",
                    "description": "A JWT issued by the auth route",
                    "scheme": "bearer",
                    "bearerFormat": "JWT",
                }
            }
        },
    )

    # set up sentry exception tracking
    if sentry_dsn is not None:
        logger.info("Starting Sentry Logging")
        sentry_sdk.init(
            dsn=sentry_dsn,
            environment=server_mode,
            release=f"{name}@{__version__}",
            integrations=[AioHttpIntegration()],
        )

    return app
