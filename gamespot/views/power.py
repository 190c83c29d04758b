"""
Power Related Views
-------------------------

Direct control of the relays that press the power buttons of the consoles.
"""
from datetime import datetime, timezone
from http import HTTPStatus

from aiohttp_apispec import docs

from gamespot.serializer.decorators import expects, returns
from gamespot.serializer.misc import PowerControlRequestSchema
from gamespot.serializer.models import PowerControlSchema, ErrorSchema, RelayStatusReportSchema
from gamespot.service.errors import ValidationError, NotFoundError, RelayTimeout, RelayNetworkError
from gamespot.views.base import BaseView
from gamespot.views.utils import failure


class PowerControlView(BaseView):
    """
    Powers a console on or off.
    """
    url = "/power-control"
    name = "power_control"

    @docs(summary="Power A Console On Or Off")
    @expects(PowerControlRequestSchema())
    @returns(
        PowerControlSchema(),
        invalid=(ErrorSchema(), HTTPStatus.BAD_REQUEST),
        not_found=(ErrorSchema(), HTTPStatus.NOT_FOUND),
        unreachable=(ErrorSchema(), HTTPStatus.BAD_GATEWAY),
        timeout=(ErrorSchema(), HTTPStatus.GATEWAY_TIMEOUT),
    )
    async def post(self):
        """
        Consoles without a relay, and every console in test mode, get a
        simulated press. Since the press is the whole point of this request,
        a relay that cannot be reached fails it.
        """
        console = self.request["data"]["console"]

        try:
            response = await self.booking_manager.power(console, self.request["data"]["action"])
        except ValidationError as error:
            return "invalid", failure(error)
        except NotFoundError as error:
            return "not_found", failure(error)
        except RelayTimeout as error:
            return "timeout", failure(error)
        except RelayNetworkError as error:
            return "unreachable", failure(error)

        return {
            **response.serialize(),
            "console": console,
            "test_mode": response.simulated,
        }


class RelayStatusView(BaseView):
    """
    Gets the reachability of the relay controllers.
    """
    url = "/esp32-status"
    name = "relay_status"

    @docs(summary="Get Relay Controller Status")
    @returns(RelayStatusReportSchema())
    async def get(self):
        """In test mode no controller is contacted and each is reported as simulated."""
        statuses = await self.booking_manager.relay_status()
        return {
            "timestamp": datetime.now(timezone.utc),
            "test_mode": self.booking_manager.test_mode,
            "controllers": [status.serialize() for status in statuses],
        }
