from aiohttp.test_utils import TestClient

from gamespot.serializer.models import ConsoleSchema, BookingSchema, ErrorSchema, ResetSchema
from gamespot.service.errors import StorageError
from gamespot.store import SessionStore
from tests.util import ROSTER, RELAY_CONSOLE


class TestStatusView:

    async def test_get_status(self, client: TestClient):
        """Assert that every console is listed, and none are booked on a fresh store."""
        response = await client.get('/api/status')
        assert response.status == 200

        data = await response.json()
        assert [console["name"] for console in data] == ROSTER
        assert all(console["booked"] is False and console["remainingTime"] is None for console in data)

    async def test_get_status_booked(self, client: TestClient, random_console):
        await client.post('/api/book', json={"console": random_console, "minutes": 30})

        response = await client.get('/api/status')
        consoles = {console["name"]: console for console in ConsoleSchema(many=True).load(await response.json())}

        assert consoles[random_console]["booked"]
        assert 0 < consoles[random_console]["remaining_time"] <= 1_800_000


class TestBookView:

    async def test_book(self, client: TestClient):
        response = await client.post('/api/book', json={"console": "PS5 #1", "minutes": 30})
        assert response.status == 200

        data = BookingSchema().load(await response.json())
        assert data["success"]
        assert data["console"] == "PS5 #1"

        status = await (await client.get('/api/status')).json()
        remaining = next(console["remainingTime"] for console in status if console["name"] == "PS5 #1")
        assert 1_790_000 < remaining <= 1_800_000

    async def test_book_twice(self, client: TestClient):
        """Assert that booking a booked console is rejected."""
        await client.post('/api/book', json={"console": "PS5 #1", "minutes": 30})
        response = await client.post('/api/book', json={"console": "PS5 #1", "minutes": 10})

        assert response.status == 400
        data = ErrorSchema().load(await response.json())
        assert data["success"] is False
        assert data["error"] == "PS5 #1 is already booked"

    async def test_book_minutes_as_string(self, client: TestClient, random_console):
        response = await client.post('/api/book', json={"console": random_console, "minutes": "45"})
        assert response.status == 200

    async def test_book_missing_fields(self, client: TestClient):
        response = await client.post('/api/book', json={"console": "PS5 #1"})

        assert response.status == 400
        data = await response.json()
        assert "minutes" in data["errors"]

    async def test_book_bad_minutes(self, client: TestClient):
        response = await client.post('/api/book', json={"console": "PS5 #1", "minutes": 0})
        assert response.status == 400

    async def test_book_unknown_console(self, client: TestClient):
        response = await client.post('/api/book', json={"console": "Xbox", "minutes": 30})

        assert response.status == 404
        assert (await response.json())["error"] == "Console not found: Xbox"


class TestResetViews:

    async def test_reset_single(self, client: TestClient, random_console):
        await client.post('/api/book', json={"console": random_console, "minutes": 30})

        response = await client.post('/api/reset-single', json={"console": random_console})
        assert response.status == 200

        data = ResetSchema().load(await response.json())
        assert data["consoles"] == [random_console]
        assert data["test_mode"]

        response = await client.post('/api/book', json={"console": random_console, "minutes": 30})
        assert response.status == 200

    async def test_reset_single_unknown_console(self, client: TestClient):
        """Assert that resetting an unknown console is a 404 and changes nothing."""
        await client.post('/api/book', json={"console": "PS5 #1", "minutes": 30})

        response = await client.post('/api/reset-single', json={"console": "Unknown Console"})
        assert response.status == 404

        status = await (await client.get('/api/status')).json()
        assert [console["name"] for console in status if console["booked"]] == ["PS5 #1"]

    async def test_reset_single_powers_off(self, client: TestClient):
        await client.post('/api/pay', json={"console": RELAY_CONSOLE, "minutes": 30, "method": "cash"})

        response = await client.post('/api/reset-single', json={"console": RELAY_CONSOLE})
        data = await response.json()

        assert data["powerOff"][RELAY_CONSOLE]["success"]
        assert data["powerOff"][RELAY_CONSOLE]["simulated"]

    async def test_reset_all(self, client: TestClient):
        for console in ("PS5 #1", "PS5 #2"):
            await client.post('/api/book', json={"console": console, "minutes": 30})

        response = await client.post('/api/reset')
        assert response.status == 200
        data = await response.json()
        assert data["success"]
        assert data["consoles"] == ROSTER

        status = await (await client.get('/api/status')).json()
        assert not any(console["booked"] for console in status)


class TestStorageErrors:

    async def test_storage_error(self, client: TestClient, mocker):
        """Assert that a database failure is a JSON server error."""
        mocker.patch.object(SessionStore, "get_all", side_effect=StorageError("Database error: disk I/O error"))

        response = await client.get('/api/status')

        assert response.status == 500
        assert await response.json() == {"success": False, "error": "Database error: disk I/O error"}
