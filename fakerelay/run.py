"""
Runs a fake relay controller, which the kiosk can be pointed at with::

    RELAY_TARGETS='[{"console": "PS5 #4", "host": "localhost", "port": 8081}]' TEST_MODE=false gamespot
"""
import os

from aiohttp import web

from fakerelay import logger
from fakerelay.relay import FakeRelay

if __name__ == '__main__':
    port = int(os.getenv("RELAY_PORT", "8081"))
    logger.info("Fake relay listening on %s", port)
    web.run_app(FakeRelay(hold=True).build_app(), port=port)
