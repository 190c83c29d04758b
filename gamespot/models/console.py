"""
Console
---------------------------

A console on the venue floor, and its current booking. A console is booked
when it has a session end time, and free otherwise. Once the end time passes
the console stays booked (with no time remaining) until it is reset.
"""
from typing import Dict, Any, Optional

from tortoise import Model, fields


class Console(Model):
    id = fields.IntField(pk=True)
    name = fields.CharField(max_length=255, unique=True)
    booked = fields.BooleanField(default=False)

    end_time = fields.BigIntField(null=True)
    """The end of the session (in epoch milliseconds)."""

    class Meta:
        table = "ps5_consoles"

    def remaining_time(self, now: int) -> Optional[int]:
        """The milliseconds left in the session, never negative, or None when the console is free."""
        if not self.booked or self.end_time is None:
            return None
        return max(0, self.end_time - now)

    def serialize(self, now: int) -> Dict[str, Any]:
        return {
            "name": self.name,
            "booked": self.booked,
            "remaining_time": self.remaining_time(now),
        }

    def __str__(self):
        return f"{self.name} ({'booked' if self.booked else 'free'})"
