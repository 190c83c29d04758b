"""
App
-----
"""

import sentry_sdk
import uvloop
from aiohttp import web
from aiohttp_apispec import setup_aiohttp_apispec
from sentry_sdk.integrations.aiohttp import AioHttpIntegration

from gamespot import logger
from gamespot.config import (
    server_mode, api_root, db_uri, test_mode, console_roster, relay_targets, relay_timeout_buffer,
    relay_retry_delay, relay_wait, default_payer, sentry_dsn, max_request_size
)
from gamespot.middleware import middlewares
from gamespot.service.manager.booking_manager import BookingManager
from gamespot.service.relay_client import RelayClient, RelayTarget
from gamespot.signals import register_signals, enable_loop_debug
from gamespot.store import SessionStore, PaymentLedger
from gamespot.version import __version__, name
from gamespot.views import register_views


def build_app(database_uri=None):
    """Sets up the app and installs uvloop."""
    app = web.Application(middlewares=middlewares, client_max_size=max_request_size)
    uvloop.install()

    relay_client = RelayClient(
        (RelayTarget.from_config(entry, relay_retry_delay) for entry in relay_targets),
        simulated=test_mode, timeout_buffer=relay_timeout_buffer,
    )
    app['booking_manager'] = BookingManager(
        SessionStore(), PaymentLedger(default_payer), relay_client, relay_wait=relay_wait
    )
    app['console_roster'] = console_roster
    app['database_uri'] = database_uri if database_uri is not None else db_uri

    logger.info("Relays are %s", "simulated" if test_mode else "live")
    for target in relay_client.targets:
        logger.info("Relay for %s", target)

    register_signals(app)
    register_views(app, api_root)

    setup_aiohttp_apispec(
        app=app, title=name, version=__version__, url=f"{api_root}/docs",
        info={"description": "Console bookings, payments and power control for the kiosk."},
    )

    # set up sentry exception tracking
    if server_mode != "development" and sentry_dsn:
        logger.info("Starting Sentry Logging")
        sentry_sdk.init(
            dsn=sentry_dsn,
            environment=server_mode,
            release=f"gamespot@{__version__}",
            integrations=[AioHttpIntegration()],
        )

    if server_mode == "development" or server_mode == "testing":
        app.on_startup.append(enable_loop_debug)

    return app
