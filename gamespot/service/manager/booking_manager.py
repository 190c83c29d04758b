"""
Booking Manager
---------------

This module is what handles all the bookings in the system.

A console is either free or booked. Booking a console only works when it is
free, while paying for one books it no matter what, since a payment is
authoritative. Resetting frees it again. Sessions are not ended by a timer:
once the end time passes the console reports no time remaining and stays
booked until it is reset.

Responsibilities
================

This object handles everything needed for console sessions.

- validating booking and payment requests
- transitioning the state of a console
- recording payments
- powering consoles on when a paid session starts, and off when one is reset

Relay presses are best effort. A payment or reset never fails because a
relay did, and never waits on one for longer than ``relay_wait``; presses
that take longer carry on in the background and are logged when they end.
"""
import asyncio
from collections import defaultdict
from contextlib import AsyncExitStack
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Dict, List, Optional, Set, Any

from tortoise.exceptions import BaseORMException
from tortoise.transactions import in_transaction

from gamespot import logger
from gamespot.models import Payment
from gamespot.models.util import RelayAction
from gamespot.service.errors import ValidationError, NotFoundError, RelayError, RelayTimeout, StorageError
from gamespot.service.relay_client import RelayClient, RelayResponse, RelayStatus, RelayTarget
from gamespot.store import SessionStore, PaymentLedger


@dataclass
class PaymentReceipt:
    """The result of a successful payment."""

    payment: Payment
    end_time: int
    test_mode: bool
    power_on: Optional[Dict[str, Any]] = None


@dataclass
class ResetResult:
    """The consoles that were freed, and the outcome of powering each one off."""

    consoles: List[str]
    test_mode: bool
    power_off: Dict[str, Dict[str, Any]] = field(default_factory=dict)


def validate_console(console) -> str:
    if not isinstance(console, str) or not console.strip():
        raise ValidationError("A console is required.")
    return console


def validate_minutes(minutes) -> int:
    """Minutes must be a positive whole number, possibly sent as a string."""
    if isinstance(minutes, str) and minutes.strip().isdigit():
        minutes = int(minutes)

    if isinstance(minutes, bool) or not isinstance(minutes, int) or minutes <= 0:
        raise ValidationError(f"Minutes must be a positive integer, not {minutes!r}.")
    return minutes


def validate_method(method) -> str:
    if not isinstance(method, str) or not method.strip():
        raise ValidationError("A payment method is required.")
    return method


class BookingManager:
    """
    Governs the lifecycle of a console session.

    Payments and resets of the same console are serialized with a lock per
    console, held only while the store is written; presses happen after it is
    released, so a slow relay never holds up the next request. Locks are only
    made for consoles on the roster. Bookings need no lock, the store only
    books a console that is free.

    :param session_store: The console roster.
    :param payment_ledger: The payment log.
    :param relay_client: Used to power consoles on and off.
    :param relay_wait: How long a payment or reset waits for a press before responding.
    """

    def __init__(
        self, session_store: SessionStore, payment_ledger: PaymentLedger, relay_client: RelayClient,
        *, relay_wait: timedelta = timedelta(seconds=4)
    ):
        self.session_store = session_store
        self.payment_ledger = payment_ledger
        self.relay_client = relay_client
        self.relay_wait = relay_wait

        self._locks: Dict[str, asyncio.Lock] = defaultdict(asyncio.Lock)
        """Maps roster consoles to the lock that serializes their payments and resets."""

        self._pending_presses: Set[asyncio.Task] = set()

    @property
    def test_mode(self) -> bool:
        return self.relay_client.simulated

    async def status(self) -> List[Dict[str, Any]]:
        """Gets every console with its booking and the milliseconds left in it."""
        now = self.session_store.clock()
        return [console.serialize(now) for console in await self.session_store.get_all()]

    async def book(self, console: str, minutes) -> int:
        """
        Books a free console.

        :returns: The end of the session in epoch milliseconds.
        :raises ValidationError: If the input is malformed.
        :raises NotFoundError: If there is no such console.
        :raises AlreadyBooked: If the console is already booked.
        """
        console, minutes = validate_console(console), validate_minutes(minutes)
        end_time = await self.session_store.try_book(console, minutes)

        logger.info("Booked %s for %s minutes", console, minutes)
        return end_time

    async def pay(self, console: str, minutes, method: str, photo_data: Optional[str] = None) -> PaymentReceipt:
        """
        Takes a payment for a console and books it, replacing any session it had.

        The payment and the booking are written together. If the console was
        free and has a relay, it is powered on; the outcome of that is only
        reported, it does not undo the payment.

        :raises ValidationError: If the input is malformed.
        :raises NotFoundError: If there is no such console.
        :raises StorageError: If the payment could not be written. Nothing is changed.
        """
        console, minutes, method = validate_console(console), validate_minutes(minutes), validate_method(method)

        if not await self.session_store.exists(console):
            raise NotFoundError(console)

        async with self._locks[console]:
            current = await self.session_store.get(console)

            try:
                async with in_transaction():
                    payment = await self.payment_ledger.record(console, minutes, method, photo_data)
                    end_time = await self.session_store.force_book(console, minutes)
            except BaseORMException as error:
                raise StorageError(f"Could not save the payment: {error}") from error

        logger.info("Took payment %s for %s (%s minutes, %s)", payment.id, console, minutes, method)

        power_on = None
        if not current.booked:
            power_on = await self._press(console, RelayAction.ON)

        return PaymentReceipt(payment, end_time, not self.relay_client.is_live(console), power_on)

    async def reset(self, console: str) -> ResetResult:
        """
        Frees a console, powering it off if it had a session and has a relay.

        :raises ValidationError: If no console is given.
        :raises NotFoundError: If there is no such console. Nothing is changed.
        """
        console = validate_console(console)

        if not await self.session_store.exists(console):
            raise NotFoundError(console)

        async with self._locks[console]:
            ended = await self.session_store.reset(console)
        logger.info("Reset %s", console)

        result = ResetResult([console], self.test_mode)
        for name in ended:
            outcome = await self._press(name, RelayAction.OFF)
            if outcome is not None:
                result.power_off[name] = outcome
        return result

    async def reset_all(self) -> ResetResult:
        """Frees every console, powering off the ones that had a session."""
        names = [console.name for console in await self.session_store.get_all()]

        async with AsyncExitStack() as stack:
            for name in sorted(names):
                await stack.enter_async_context(self._locks[name])

            ended = await self.session_store.reset()
        logger.info("Reset all consoles")

        outcomes = await asyncio.gather(*(self._press(name, RelayAction.OFF) for name in ended))
        return ResetResult(names, self.test_mode, {
            name: outcome for name, outcome in zip(ended, outcomes) if outcome is not None
        })

    async def power(self, console: str, action) -> RelayResponse:
        """
        Presses the power button of a console directly.

        :raises ValidationError: If the input is malformed.
        :raises NotFoundError: If there is no such console.
        :raises RelayTimeout: If the relay did not answer in time.
        :raises RelayNetworkError: If the relay could not be reached.
        """
        console = validate_console(console)
        if not await self.session_store.exists(console):
            raise NotFoundError(console)

        return await self.relay_client.press(self.relay_client.target_for(console), action)

    async def relay_status(self) -> List[RelayStatus]:
        return await self.relay_client.snapshot()

    async def close(self):
        """Waits for any presses still in flight, then closes the relay client."""
        if self._pending_presses:
            logger.info("Waiting on %s relay presses", len(self._pending_presses))
            await asyncio.gather(*self._pending_presses, return_exceptions=True)
        await self.relay_client.close()

    async def _press(self, console: str, action: RelayAction) -> Optional[Dict[str, Any]]:
        """
        Presses a button on behalf of a transition, if the console has a relay.

        Never raises: failures are logged and reported in the outcome. If the
        press takes longer than ``relay_wait`` it is left running and the
        outcome says it is pending.
        """
        target = self.relay_client.target_for(console)
        if target is None:
            return None
        if action not in target.actions:
            logger.warning("%s has no pulse for %s, leaving it as it is", target, action.value)
            return None

        task = asyncio.ensure_future(self._run_press(target, action))
        self._pending_presses.add(task)
        task.add_done_callback(self._pending_presses.discard)

        try:
            return await asyncio.wait_for(asyncio.shield(task), self.relay_wait.total_seconds())
        except asyncio.TimeoutError:
            logger.warning("Press %s on %s is still running, responding without it", action.value, console)
            task.add_done_callback(self._log_late_press)
            return {"success": False, "pending": True, "action": action.value}

    async def _run_press(self, target: RelayTarget, action: RelayAction) -> Dict[str, Any]:
        try:
            response = await self.relay_client.press(target, action)
        except RelayError as error:
            logger.error("Could not press %s on %s: %s", action.value, target, error.message)
            return {
                "success": False,
                "action": action.value,
                "error": error.message,
                "timeout": isinstance(error, RelayTimeout),
            }
        return response.serialize()

    @staticmethod
    def _log_late_press(task: asyncio.Task):
        if task.cancelled():
            logger.warning("Late relay press was cancelled")
        elif task.exception() is not None:
            logger.error("Late relay press failed: %s", task.exception())
        else:
            logger.info("Late relay press finished: %s", task.result())
