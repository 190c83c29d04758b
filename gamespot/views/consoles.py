"""
Console Related Views
-------------------------

Handles the booking state of the consoles: listing it, booking a free
console, and resetting one or all of them.
"""
from http import HTTPStatus

from aiohttp_apispec import docs

from gamespot.serializer.decorators import expects, returns
from gamespot.serializer.misc import BookingRequestSchema, ConsoleRequestSchema
from gamespot.serializer.models import ConsoleSchema, BookingSchema, ErrorSchema, ResetSchema
from gamespot.service.errors import ValidationError, NotFoundError, AlreadyBooked
from gamespot.views.base import BaseView
from gamespot.views.utils import failure


class StatusView(BaseView):
    """
    Gets the booking state of every console.
    """
    url = "/status"
    name = "status"

    @docs(summary="Get Console Status")
    @returns(ConsoleSchema(many=True))
    async def get(self):
        """
        Lists every console, whether it is booked, and the milliseconds left in
        its session. A booked console with no time left has expired and is
        waiting to be reset.
        """
        return await self.booking_manager.status()


class BookView(BaseView):
    """
    Books a free console.
    """
    url = "/book"
    name = "book"

    @docs(summary="Book A Console")
    @expects(BookingRequestSchema())
    @returns(
        BookingSchema(),
        invalid=(ErrorSchema(), HTTPStatus.BAD_REQUEST),
        already_booked=(ErrorSchema(), HTTPStatus.BAD_REQUEST),
        not_found=(ErrorSchema(), HTTPStatus.NOT_FOUND),
    )
    async def post(self):
        """Booking only succeeds when the console is free."""
        console = self.request["data"]["console"]

        try:
            end_time = await self.booking_manager.book(console, self.request["data"]["minutes"])
        except ValidationError as error:
            return "invalid", failure(error)
        except AlreadyBooked as error:
            return "already_booked", failure(error)
        except NotFoundError as error:
            return "not_found", failure(error)

        return {"success": True, "console": console, "end_time": end_time}


class ResetView(BaseView):
    """
    Frees every console.
    """
    url = "/reset"
    name = "reset"

    @docs(summary="Reset All Consoles")
    @returns(ResetSchema())
    async def post(self):
        """Consoles that had a session and have a relay are powered off."""
        result = await self.booking_manager.reset_all()
        return {
            "success": True,
            "test_mode": result.test_mode,
            "consoles": result.consoles,
            "power_off": result.power_off,
        }


class ResetSingleView(BaseView):
    """
    Frees a single console.
    """
    url = "/reset-single"
    name = "reset_single"

    @docs(summary="Reset A Console")
    @expects(ConsoleRequestSchema())
    @returns(
        ResetSchema(),
        invalid=(ErrorSchema(), HTTPStatus.BAD_REQUEST),
        not_found=(ErrorSchema(), HTTPStatus.NOT_FOUND),
    )
    async def post(self):
        """If the console had a session and has a relay, it is powered off."""
        try:
            result = await self.booking_manager.reset(self.request["data"]["console"])
        except ValidationError as error:
            return "invalid", failure(error)
        except NotFoundError as error:
            return "not_found", failure(error)

        return {
            "success": True,
            "test_mode": result.test_mode,
            "consoles": result.consoles,
            "power_off": result.power_off,
        }
