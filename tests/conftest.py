from datetime import timedelta

import pytest
from aiohttp import web
from aiohttp.test_utils import TestClient
from faker import Faker
from tortoise import Tortoise

from fakerelay.relay import FakeRelay
from gamespot.middleware import middlewares
from gamespot.service.manager.booking_manager import BookingManager
from gamespot.service.relay_client import RelayClient, RelayTarget
from gamespot.signals import register_signals
from gamespot.store import migrate, SessionStore, PaymentLedger
from gamespot.views import register_views
from tests.util import ROSTER, RELAY_CONSOLE, FAST_POLICIES

fake = Faker()


@pytest.fixture
async def empty_database():
    """A fresh in-memory database, with no tables in it."""
    await Tortoise.init(
        db_url="sqlite://:memory:",
        modules={'models': ['gamespot.models']},
    )
    yield
    await Tortoise.close_connections()


@pytest.fixture
async def database(empty_database):
    """A fresh in-memory database, migrated to the latest schema."""
    await migrate()


@pytest.fixture
async def session_store(database) -> SessionStore:
    store = SessionStore()
    await store.seed(ROSTER)
    return store


@pytest.fixture
def payment_ledger(database) -> PaymentLedger:
    return PaymentLedger("kiosk")


@pytest.fixture
def fake_relay() -> FakeRelay:
    return FakeRelay()


@pytest.fixture
async def relay_server(aiohttp_server, fake_relay):
    return await aiohttp_server(fake_relay.build_app())


@pytest.fixture
def relay_target(relay_server) -> RelayTarget:
    return RelayTarget(RELAY_CONSOLE, relay_server.host, relay_server.port, dict(FAST_POLICIES))


@pytest.fixture
async def relay_client():
    """A client in test mode, with a controller that is never contacted."""
    client = RelayClient([RelayTarget(RELAY_CONSOLE, "192.0.2.1")], simulated=True)
    yield client
    await client.close()


@pytest.fixture
async def live_relay_client(relay_target):
    """A client that talks to the fake relay."""
    client = RelayClient([relay_target], simulated=False, timeout_buffer=timedelta(milliseconds=300))
    yield client
    await client.close()


@pytest.fixture
def booking_manager(session_store, payment_ledger, relay_client) -> BookingManager:
    return BookingManager(session_store, payment_ledger, relay_client)


@pytest.fixture
def live_booking_manager(session_store, payment_ledger, live_relay_client) -> BookingManager:
    return BookingManager(session_store, payment_ledger, live_relay_client)


@pytest.fixture
def client_factory(aiohttp_client):
    """Builds a client for an app served by the given booking manager."""

    async def create_client(booking_manager: BookingManager) -> TestClient:
        app = web.Application(middlewares=middlewares)
        app['booking_manager'] = booking_manager
        app['console_roster'] = ROSTER

        register_signals(app, init_database=False)  # we get the database from a fixture
        register_views(app, "/api")

        return await aiohttp_client(app)

    return create_client


@pytest.fixture
async def client(client_factory, booking_manager) -> TestClient:
    return await client_factory(booking_manager)


@pytest.fixture
async def live_client(client_factory, live_booking_manager) -> TestClient:
    return await client_factory(live_booking_manager)


@pytest.fixture
def random_console() -> str:
    """A console from the roster without a relay."""
    return fake.random_element([name for name in ROSTER if name != RELAY_CONSOLE])


@pytest.fixture
def random_minutes() -> int:
    return fake.random_int(min=1, max=180)
