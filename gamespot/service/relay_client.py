"""
Relay Client
------------

Talks to the relay controllers that hold down the power buttons of the
consoles. A controller is a small HTTP server which, when asked, closes
its relay for a number of milliseconds and then answers with JSON.

Responsibilities
================

- pressing the power button of a console for a given pulse
- retrying a failed power on once, with a shorter pulse
- checking whether the controllers are reachable
- simulating all of the above for consoles without a controller, or when
  the whole kiosk runs in test mode

A simulated press has exactly the same shape as a real one; the only
difference is its ``simulated`` flag.
"""
import asyncio
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Dict, Optional, List, Iterable, Tuple, Any, Union

import aiohttp
from aiobreaker import CircuitBreaker, CircuitBreakerError

from gamespot import logger
from gamespot.models.util import RelayAction
from gamespot.service.errors import RelayTimeout, RelayNetworkError, RelayError, ValidationError

DEFAULT_PORT = 80


@dataclass(frozen=True)
class PressPolicy:
    """
    How to press a button for one action.

    When a fallback pulse is set, a failed press is tried exactly once more
    with the fallback pulse after the retry delay.
    """

    duration_ms: int
    fallback_ms: Optional[int] = None
    retry_delay: timedelta = timedelta(seconds=1)

    def attempts(self, duration_ms: Optional[int] = None) -> List[int]:
        """The pulse of each attempt, in order."""
        first = duration_ms if duration_ms is not None else self.duration_ms
        return [first] if self.fallback_ms is None else [first, self.fallback_ms]


DEFAULT_POLICIES = {
    RelayAction.ON: PressPolicy(500, fallback_ms=300),
    RelayAction.OFF: PressPolicy(500),
}


@dataclass
class RelayTarget:
    """A relay controller wired to the power button of a console."""

    console: str
    host: str
    port: int = DEFAULT_PORT
    policies: Dict[RelayAction, PressPolicy] = field(default_factory=lambda: dict(DEFAULT_POLICIES))

    @classmethod
    def from_config(cls, entry: Dict[str, Any], retry_delay: timedelta = timedelta(seconds=1)) -> "RelayTarget":
        """
        Creates a target from a configuration entry such as::

            {"console": "PS5 #4", "host": "192.168.1.212", "port": 80,
             "pulses": {"on": 500, "off": 500}, "fallback": {"on": 300}}
        """
        pulses = entry.get("pulses", {action.value: policy.duration_ms for action, policy in DEFAULT_POLICIES.items()})
        fallbacks = entry.get("fallback", {action.value: policy.fallback_ms for action, policy in DEFAULT_POLICIES.items()})

        try:
            policies = {
                RelayAction(action): PressPolicy(int(duration), fallbacks.get(action), retry_delay)
                for action, duration in pulses.items()
            }
            target = cls(entry["console"], entry["host"], int(entry.get("port", DEFAULT_PORT)), policies)
        except (KeyError, ValueError) as error:
            raise ValueError(f"Bad relay target configuration {entry}: {error}") from error

        missing = [action.value for action in RelayAction if action not in target.actions]
        if missing:
            raise ValueError(f"Bad relay target configuration {entry}: no pulse for {', '.join(missing)}")
        return target

    @property
    def actions(self) -> List[RelayAction]:
        return list(self.policies)

    def url(self, path: str) -> str:
        return f"http://{self.host}:{self.port}{path}"

    def __str__(self):
        return f"{self.console} ({self.host}:{self.port})"


@dataclass
class RelayResponse:
    """The outcome of a press, real or simulated."""

    action: RelayAction
    success: bool
    simulated: bool
    duration_ms: int
    attempts: int = 1
    data: Dict[str, Any] = field(default_factory=dict)

    def serialize(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "simulated": self.simulated,
            "action": self.action.value,
            "duration_ms": self.duration_ms,
            "attempts": self.attempts,
            "response": self.data,
        }


@dataclass
class RelayStatus:
    """The reachability of a single controller."""

    target: RelayTarget
    status: str
    detail: Optional[Union[Dict, str]] = None

    def serialize(self) -> Dict[str, Any]:
        data = {
            "console": self.target.console,
            "host": self.target.host,
            "port": self.target.port,
            "status": self.status,
        }
        if self.detail is not None:
            data["detail"] = self.detail
        return data


class RelayClient:
    """
    Sends presses to, and polls, the relay controllers.

    Every request is bounded by a timeout of the pulse duration plus a fixed
    buffer, so that slow relays are not mistaken for dead ones. Each
    controller has its own circuit breaker, so a controller that keeps failing
    is skipped for a while instead of being waited on.

    :param targets: The configured controllers.
    :param simulated: When set, no controller is ever contacted.
    :param timeout_buffer: Added to the pulse duration to get the request timeout.
    """

    def __init__(
        self, targets: Iterable[RelayTarget] = (), *, simulated: bool = True,
        timeout_buffer: timedelta = timedelta(milliseconds=2500),
        breaker_fail_max: int = 5, breaker_reset: timedelta = timedelta(seconds=60)
    ):
        self.simulated = simulated
        self.timeout_buffer = timeout_buffer
        self._targets: Dict[str, RelayTarget] = {target.console: target for target in targets}
        self._breakers: Dict[str, CircuitBreaker] = {
            console: CircuitBreaker(fail_max=breaker_fail_max, timeout_duration=breaker_reset)
            for console in self._targets
        }
        self._session: Optional[aiohttp.ClientSession] = None

    @property
    def targets(self) -> List[RelayTarget]:
        return list(self._targets.values())

    @property
    def session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession()
        return self._session

    def target_for(self, console: str) -> Optional[RelayTarget]:
        """Gets the controller wired to the given console, if there is one."""
        return self._targets.get(console)

    def is_live(self, console: str) -> bool:
        """Checks if presses for the given console reach real hardware."""
        return not self.simulated and console in self._targets

    async def press(
        self, target: Optional[RelayTarget], action: Union[RelayAction, str], duration_ms: Optional[int] = None
    ) -> RelayResponse:
        """
        Presses the power button on the given controller.

        Consoles without a controller (``target`` is None), or any console in
        test mode, get a simulated press without a network call.

        :raises ValidationError: If the action is not supported by the controller.
        :raises RelayTimeout: If the last attempt timed out.
        :raises RelayNetworkError: If the last attempt could not reach the controller.
        """
        try:
            action = RelayAction(action)
        except ValueError as error:
            raise ValidationError(f"Unknown relay action: {action}") from error

        policies = target.policies if target is not None else DEFAULT_POLICIES
        if target is not None and action not in target.actions:
            raise ValidationError(f"{target} does not support {action.value}")
        policy = policies[action]

        if target is None or self.simulated:
            duration = duration_ms if duration_ms is not None else policy.duration_ms
            logger.debug("Simulated %s press on %s", action.value, target or "a console without a relay")
            return RelayResponse(action, True, True, duration, data={"simulated": True})

        durations = policy.attempts(duration_ms)
        for attempt, duration in enumerate(durations, 1):
            if attempt > 1:
                await asyncio.sleep(policy.retry_delay.total_seconds())
                logger.info("Retrying %s on %s with a %sms pulse", action.value, target, duration)

            last_attempt = attempt == len(durations)
            try:
                status, data = await self._call(
                    target, f"/relay/{action.value}", {"duration": duration},
                    timedelta(milliseconds=duration) + self.timeout_buffer
                )
            except RelayError as error:
                logger.warning("Press %s on %s failed: %s", action.value, target, error.message)
                if last_attempt:
                    raise
                continue

            success = status == 200 and data.get("success", True) is not False
            if success or last_attempt:
                logger.info("Pressed %s on %s for %sms (success: %s)", action.value, target, duration, success)
                return RelayResponse(action, success, False, duration, attempt, data)

            logger.warning("Press %s on %s was refused (%s): %s", action.value, target, status, data)

    async def status(self, target: RelayTarget) -> Dict[str, Any]:
        """
        Gets the status document of a controller.

        :raises RelayTimeout: If the controller does not answer in time.
        :raises RelayNetworkError: If the controller cannot be reached, or answers with an error.
        """
        status, data = await self._call(target, "/status", None, self.timeout_buffer)
        if status != 200:
            raise RelayNetworkError(f"{target} answered with status {status}")
        return data

    async def snapshot(self) -> List[RelayStatus]:
        """Polls every controller at once and reports which are reachable."""
        if self.simulated:
            return [RelayStatus(target, "simulated") for target in self.targets]

        results = await asyncio.gather(*(self.status(target) for target in self.targets), return_exceptions=True)

        statuses = []
        for target, result in zip(self.targets, results):
            if isinstance(result, RelayError):
                statuses.append(RelayStatus(target, "offline", result.message))
            elif isinstance(result, BaseException):
                raise result
            else:
                statuses.append(RelayStatus(target, "online", result))

        return statuses

    async def close(self):
        if self._session is not None:
            await self._session.close()

    async def _call(
        self, target: RelayTarget, path: str, params: Optional[Dict], timeout: timedelta
    ) -> Tuple[int, Dict[str, Any]]:
        """
        Makes a single request to a controller through its circuit breaker.

        :raises RelayTimeout: If the request times out.
        :raises RelayNetworkError: If the request fails, or the circuit is open.
        """
        try:
            return await self._breakers[target.console].call_async(self._get, target.url(path), params, timeout)
        except CircuitBreakerError as error:
            # the call that trips the breaker raises this in place of its own failure
            if isinstance(error.__cause__ or error.__context__, asyncio.TimeoutError):
                raise RelayTimeout(f"{target} did not answer within {timeout.total_seconds():.1f}s") from error
            raise RelayNetworkError(f"{target} is failing, not trying it for now") from error
        except asyncio.TimeoutError as error:
            raise RelayTimeout(f"{target} did not answer within {timeout.total_seconds():.1f}s") from error
        except aiohttp.ClientError as error:
            raise RelayNetworkError(f"Could not reach {target}: {error}") from error

    async def _get(self, url: str, params: Optional[Dict], timeout: timedelta) -> Tuple[int, Dict[str, Any]]:
        client_timeout = aiohttp.ClientTimeout(total=timeout.total_seconds())
        async with self.session.get(url, params=params, timeout=client_timeout) as response:
            try:
                data = await response.json(content_type=None)
            except ValueError:
                data = {"raw": await response.text()}

            if not isinstance(data, dict):
                data = {"raw": data}
            return response.status, data
