from datetime import timedelta

from aiohttp.test_utils import TestClient, unused_port

from gamespot.serializer.models import PowerControlSchema, RelayStatusReportSchema
from gamespot.service.manager.booking_manager import BookingManager
from gamespot.service.relay_client import RelayClient, RelayTarget
from tests.util import RELAY_CONSOLE, FAST_POLICIES


class TestPowerControlView:

    async def test_power_on_simulated(self, client: TestClient):
        response = await client.post('/api/power-control', json={"console": RELAY_CONSOLE, "action": "on"})
        assert response.status == 200

        data = PowerControlSchema().load(await response.json())
        assert data["success"]
        assert data["test_mode"]
        assert data["console"] == RELAY_CONSOLE
        assert data["action"] == "on"

    async def test_power_console_without_relay(self, live_client: TestClient, random_console, fake_relay):
        """Assert that consoles without a relay are simulated even when relays are live."""
        response = await live_client.post('/api/power-control', json={"console": random_console, "action": "off"})

        data = await response.json()
        assert data["success"]
        assert data["testMode"]
        assert fake_relay.presses == []

    async def test_power_live(self, live_client: TestClient, fake_relay):
        response = await live_client.post('/api/power-control', json={"console": RELAY_CONSOLE, "action": "off"})

        data = await response.json()
        assert response.status == 200
        assert data["success"]
        assert not data["testMode"]
        assert data["durationMs"] == 50
        assert fake_relay.presses == [("off", 50)]

    async def test_power_bad_action(self, client: TestClient):
        response = await client.post('/api/power-control', json={"console": RELAY_CONSOLE, "action": "reboot"})

        assert response.status == 400
        assert "action" in (await response.json())["errors"]

    async def test_power_unknown_console(self, client: TestClient):
        response = await client.post('/api/power-control', json={"console": "Xbox", "action": "on"})
        assert response.status == 404

    async def test_power_timeout(self, live_client: TestClient, fake_relay):
        fake_relay.delay = timedelta(seconds=1)

        response = await live_client.post('/api/power-control', json={"console": RELAY_CONSOLE, "action": "off"})

        assert response.status == 504
        assert (await response.json())["success"] is False

    async def test_power_unreachable(self, client_factory, session_store, payment_ledger):
        relay_client = RelayClient(
            [RelayTarget(RELAY_CONSOLE, "127.0.0.1", unused_port(), dict(FAST_POLICIES))], simulated=False
        )
        client = await client_factory(BookingManager(session_store, payment_ledger, relay_client))

        response = await client.post('/api/power-control', json={"console": RELAY_CONSOLE, "action": "off"})

        assert response.status == 502
        assert "Could not reach" in (await response.json())["error"]


class TestRelayStatusView:

    async def test_status_simulated(self, client: TestClient):
        response = await client.get('/api/esp32-status')
        assert response.status == 200

        data = RelayStatusReportSchema().load(await response.json())
        assert data["test_mode"]
        assert [(c["console"], c["status"]) for c in data["controllers"]] == [(RELAY_CONSOLE, "simulated")]

    async def test_status_live(self, live_client: TestClient, relay_server):
        data = await (await live_client.get('/api/esp32-status')).json()

        assert not data["testMode"]
        controller, = data["controllers"]
        assert controller["status"] == "online"
        assert controller["port"] == relay_server.port
        assert controller["detail"]["online"] is True


class TestHealthView:

    async def test_health(self, client: TestClient):
        response = await client.get('/health')
        assert response.status == 200

        data = await response.json()
        assert data["status"] == "ok"
        assert data["mode"] == "TEST_MODE"
        assert "timestamp" in data

    async def test_health_live(self, live_client: TestClient):
        data = await (await live_client.get('/health')).json()
        assert data["mode"] == "LIVE"
