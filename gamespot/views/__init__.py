"""
This package contains the kiosk API for booking consoles,
taking payments, and powering the consoles on and off.

API Conventions
---------------

The API is consumed by the kiosk frontend, so it keeps the shape that
frontend expects:

* Endpoints are named after actions (book, pay, reset) rather than resources
* Requests and responses are JSON with camelCase key naming
* Every mutating response carries a ``success`` flag

API Expected Responses
----------------------

Failed requests respond with ``{"success": false, "error": "..."}`` and a
4xx or 5xx status. Validation failures also include the offending fields
under ``errors`` and the expected request under ``schema``.
"""

import aiohttp_cors
from aiohttp.abc import Application

from gamespot import logger
from .consoles import StatusView, BookView, ResetView, ResetSingleView
from .misc import HealthView
from .payments import PayView, PaymentsView
from .power import PowerControlView, RelayStatusView

views = [
    StatusView, BookView, ResetView, ResetSingleView,
    PayView, PaymentsView,
    PowerControlView, RelayStatusView,
]


def register_views(app: Application, base: str):
    """
    Registers all the API views onto the given router at a specific root url.
    The health check is registered at the root of the server.

    :param app: The app to register the views to.
    :param base: The base URL.
    """
    cors = aiohttp_cors.setup(app, defaults={
        "*": aiohttp_cors.ResourceOptions(
            allow_credentials=True,
            expose_headers="*",
            allow_headers="*",
            allow_methods="*",
        )
    })

    for view in views:
        logger.info("Registered %s at %s", view.__name__, base + view.url)
        view.register_route(app, base)
        view.enable_cors(cors)

    HealthView.register_route(app)
    HealthView.enable_cors(cors)
