from datetime import datetime, timezone

from aiohttp_apispec import docs

from gamespot.serializer.decorators import returns
from gamespot.serializer.models import HealthSchema
from gamespot.views.base import BaseView


class HealthView(BaseView):
    """
    Reports that the server is up, and whether relays are live.
    """
    url = "/health"
    name = "health"

    @docs(summary="Health Check")
    @returns(HealthSchema())
    async def get(self):
        return {
            "status": "ok",
            "timestamp": datetime.now(timezone.utc),
            "mode": "TEST_MODE" if self.booking_manager.test_mode else "LIVE",
        }
