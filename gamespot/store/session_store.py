"""
Session Store
-------------

The durable table of consoles and their current booking.

Every transition is a single conditional ``UPDATE`` on one console row, so
a booking can never be half applied and two concurrent bookings of the
same free console cannot both succeed: only the first update matches the
``booked = 0`` condition.
"""
from typing import List, Optional, Callable, Iterable

from gamespot import logger
from gamespot.models import Console
from gamespot.models.util import now_ms, minutes_to_ms
from gamespot.service.errors import AlreadyBooked, NotFoundError
from gamespot.store.util import translates_storage_errors


class SessionStore:
    """
    Reads and transitions the booking state of the consoles.

    :param clock: Returns the current time in epoch milliseconds.
    """

    def __init__(self, clock: Callable[[], int] = now_ms):
        self.clock = clock

    @translates_storage_errors
    async def seed(self, names: Iterable[str]) -> List[Console]:
        """Adds the given consoles to the roster, leaving existing ones untouched."""
        added = []
        for name in names:
            console, created = await Console.get_or_create(name=name, defaults={"booked": False})
            if created:
                added.append(console)

        if added:
            logger.info("Added consoles to the roster: %s", ", ".join(c.name for c in added))
        return added

    @translates_storage_errors
    async def get_all(self) -> List[Console]:
        return await Console.all().order_by("id")

    @translates_storage_errors
    async def get(self, name: str) -> Optional[Console]:
        return await Console.get_or_none(name=name)

    @translates_storage_errors
    async def exists(self, name: str) -> bool:
        return await Console.filter(name=name).exists()

    @translates_storage_errors
    async def try_book(self, name: str, minutes: int) -> int:
        """
        Books a console only if it is currently free.

        :returns: The end of the session in epoch milliseconds.
        :raises AlreadyBooked: If the console is booked. Nothing is changed.
        :raises NotFoundError: If there is no such console.
        """
        end_time = self.clock() + minutes_to_ms(minutes)
        updated = await Console.filter(name=name, booked=False).update(booked=True, end_time=end_time)

        if not updated:
            if not await Console.filter(name=name).exists():
                raise NotFoundError(name)
            raise AlreadyBooked(name)

        return end_time

    @translates_storage_errors
    async def force_book(self, name: str, minutes: int) -> int:
        """
        Books a console whatever its current state, replacing any session it has.

        :returns: The end of the session in epoch milliseconds.
        :raises NotFoundError: If there is no such console.
        """
        end_time = self.clock() + minutes_to_ms(minutes)
        updated = await Console.filter(name=name).update(booked=True, end_time=end_time)

        if not updated:
            raise NotFoundError(name)

        return end_time

    @translates_storage_errors
    async def reset(self, name: Optional[str] = None) -> List[str]:
        """
        Frees one console (or all of them when no name is given).

        :returns: The names of the consoles that had a session before the reset.
        :raises NotFoundError: If the named console does not exist.
        """
        query = Console.all() if name is None else Console.filter(name=name)
        previously_booked = await query.filter(booked=True).values_list("name", flat=True)

        updated = await query.update(booked=False, end_time=None)
        if name is not None and not updated:
            raise NotFoundError(name)

        return list(previously_booked)
