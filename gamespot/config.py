import json
import os
from datetime import timedelta

server_mode = os.getenv("SERVER_MODE", "development")
"""The operational mode of the server."""

port = int(os.getenv("PORT", "3000"))
"""The port the api listens on."""

db_path = os.getenv("DB_PATH", "gamespot.db")
"""The location of the sqlite database file."""

db_uri = f"sqlite://{db_path}"
"""The tortoise connection string for the database."""

test_mode = os.getenv("TEST_MODE", "true") != "false"
"""When set, relay actions are simulated instead of sent to the controllers."""

api_root = "/api"
"""The base url for the api."""

console_roster = [
    name.strip() for name in
    os.getenv("CONSOLE_ROSTER", "PS5 #1,PS5 #2,PS5 #3,PS5 #4,Logitech G920").split(",")
    if name.strip()
]
"""The consoles seeded into the database on startup."""

relay_targets = json.loads(os.getenv("RELAY_TARGETS", json.dumps([
    {"console": "PS5 #4", "host": "192.168.1.212", "port": 80},
])))
"""The relay controllers, keyed to the console they power."""

relay_timeout_buffer = timedelta(milliseconds=int(os.getenv("RELAY_TIMEOUT_BUFFER_MS", "2500")))
"""How much longer than the pulse itself we wait for a relay to answer."""

relay_retry_delay = timedelta(milliseconds=int(os.getenv("RELAY_RETRY_DELAY_MS", "1000")))
"""The delay before retrying a failed power on."""

relay_wait = timedelta(milliseconds=int(os.getenv("RELAY_WAIT_MS", "4000")))
"""How long a payment or reset waits on the relay before responding anyway."""

default_payer = os.getenv("DEFAULT_PAYER", "kiosk")
"""The user recorded against every payment."""

sentry_dsn = os.getenv("SENTRY_DSN")
"""The sentry DSN, sentry is disabled when unset."""

max_request_size = int(os.getenv("MAX_REQUEST_MB", "20")) * 1024 ** 2
"""The largest accepted request body (photo receipts are sent inline)."""
