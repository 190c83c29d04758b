"""
The entry point for the CLI tool
"""

from aiohttp import web

from gamespot import logger
from gamespot.app import build_app
from gamespot.config import port
from gamespot.version import __version__, name


def run():
    """Builds the app and serves it on the configured port."""
    logger.info(f'Starting {name} %s!', __version__)
    web.run_app(build_app(), port=port)


if __name__ == '__main__':
    run()
