from asyncio import sleep
from datetime import timedelta
from typing import List, Tuple

from aiohttp import web

from fakerelay import logger

ACTIONS = ("on", "off")


class FakeRelay:
    """
    A relay controller that answers like the real one, but only pretends to
    press the button.

    :param delay: How long to take before answering a press, on top of the pulse itself.
    :param fail_times: How many presses to refuse before accepting one.
    :param hold: Whether to actually wait for the pulse before answering.
    """

    def __init__(self, delay: timedelta = timedelta(), fail_times: int = 0, hold: bool = False):
        self.delay = delay
        self.fail_times = fail_times
        self.hold = hold
        self.powered = False
        self.presses: List[Tuple[str, int]] = []
        """Every press received, as (action, duration) pairs, refused ones included."""

    async def press(self, request: web.Request):
        action = request.match_info["action"]
        if action not in ACTIONS:
            return web.json_response({"success": False, "error": f"unknown action {action}"}, status=404)

        try:
            duration = int(request.query.get("duration", "500"))
        except ValueError:
            return web.json_response({"success": False, "error": "duration must be an integer"}, status=400)

        self.presses.append((action, duration))
        logger.info("Press %s for %sms", action, duration)

        if self.delay:
            await sleep(self.delay.total_seconds())

        if self.fail_times > 0:
            self.fail_times -= 1
            logger.info("Refusing press %s", action)
            return web.json_response({"success": False, "action": action, "error": "relay stuck"})

        if self.hold:
            await sleep(duration / 1000)

        self.powered = action == "on"
        return web.json_response({"success": True, "action": action, "duration": duration})

    async def status(self, request: web.Request):
        return web.json_response({
            "online": True,
            "powered": self.powered,
            "presses": len(self.presses),
        })

    def build_app(self) -> web.Application:
        app = web.Application()
        app.router.add_get("/relay/{action}", self.press)
        app.router.add_get("/status", self.status)
        return app
