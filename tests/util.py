from datetime import timedelta

from gamespot.models.util import RelayAction
from gamespot.service.relay_client import PressPolicy

ROSTER = ["PS5 #1", "PS5 #2", "PS5 #3", "PS5 #4", "Logitech G920"]
RELAY_CONSOLE = "PS5 #4"

FAST_POLICIES = {
    RelayAction.ON: PressPolicy(50, fallback_ms=30, retry_delay=timedelta(milliseconds=10)),
    RelayAction.OFF: PressPolicy(50),
}
"""Short pulses so that tests against the fake relay run quickly."""


class Clock:
    """A clock for the session store that only moves when told to."""

    def __init__(self, now: int = 1_600_000_000_000):
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, delta: timedelta):
        self.now += int(delta.total_seconds() * 1000)
