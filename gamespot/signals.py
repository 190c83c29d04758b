"""
Signals
-------

Defines a number of signals that the aiohttp server uses
to bring the database up before the first request and to
finish the outstanding work after the last one.

Each signal must accept the ``app`` argument.
"""

import asyncio

from aiohttp.abc import Application
from tortoise import Tortoise

from gamespot import logger
from gamespot.store import migrate, describe_tables


async def initialize_database(app: Application):
    """Opens the database and brings its schema up to date."""
    await Tortoise.init(
        db_url=app['database_uri'],
        modules={'models': ['gamespot.models']}
    )
    version = await migrate()
    logger.info("Database is at schema version %s", version)

    for table, columns in (await describe_tables()).items():
        logger.debug("Table %s: %s", table, ", ".join(column["name"] for column in columns))


async def seed_consoles(app: Application):
    """Makes sure every console in the roster exists."""
    await app['booking_manager'].session_store.seed(app['console_roster'])


async def enable_loop_debug(app: Application):
    """Turns on asyncio debug mode, which reports slow callbacks and unawaited coroutines."""
    asyncio.get_running_loop().set_debug(True)


async def close_booking_manager(app: Application):
    """Lets outstanding relay presses finish, and closes the relay client."""
    await app['booking_manager'].close()


async def close_database_connections(app: Application):
    """Closes the open database connections."""
    await Tortoise.close_connections()


def register_signals(app, init_database=True):
    """Registers all the signals at the appropriate hooks."""
    if init_database:
        app.on_startup.append(initialize_database)

    app.on_startup.append(seed_consoles)  # the roster needs the schema

    app.on_shutdown.append(close_booking_manager)

    if init_database:
        app.on_cleanup.append(close_database_connections)
