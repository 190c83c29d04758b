"""
Base
------------------------

Every view of the kiosk API extends :class:`BaseView`, which knows how to
put itself on the router and gives the handlers the booking manager.
"""

from typing import Optional

from aiohttp.abc import Application
from aiohttp.web import View, AbstractRoute
from aiohttp_cors import CorsConfig, CorsViewMixin

from gamespot.service.manager.booking_manager import BookingManager


class ViewConfigurationError(Exception):
    """
    Raised when a view is missing its URL or has not been routed yet.
    """


class BaseView(View, CorsViewMixin):
    """
    A view at a fixed URL, optionally under a common prefix. The
    booking manager is taken from the app when the view is routed.
    """

    url: str
    name: Optional[str] = None
    route: AbstractRoute
    booking_manager: BookingManager

    @classmethod
    def register_route(cls, app: Application, base: str = ""):
        """
        Adds the view to the router of the app under ``base``.

        :raises ViewConfigurationError: If the view has no URL.
        """
        url = getattr(cls, "url", None)
        if url is None:
            raise ViewConfigurationError(f"{cls.__name__} has no URL.")

        cls.route = app.router.add_view(base + url, cls, name=cls.name)
        cls.booking_manager = app["booking_manager"]

    @classmethod
    def enable_cors(cls, cors: CorsConfig):
        """Allows the view to be called from the kiosk frontend, wherever it is served."""
        if not hasattr(cls, "route"):
            raise ViewConfigurationError(f"{cls.__name__} must be routed before CORS is enabled.")
        cors.add(cls.route, webview=True)
