"""
Migrations
----------

The database schema is versioned. Each step brings the schema up by one
version and the current version is kept in the ``schema_version`` table.
All pending steps run in a single transaction.

Databases made by deployments that predate the version table are adopted by
looking at which tables and columns they already have.

.. note:: Statements are executed one at a time. ``executescript`` commits
    on sqlite, which would end the transaction the steps run in.
"""
import asyncio
from typing import Dict, List, Callable, Awaitable, Iterable

from tortoise import connections
from tortoise.backends.base.client import BaseDBAsyncClient
from tortoise.exceptions import BaseORMException
from tortoise.transactions import in_transaction

from gamespot import logger
from gamespot.service.errors import StorageError

TABLES = ("ps5_consoles", "payments", "schema_version")
"""The tables owned by the kiosk."""

PAYMENT_COLUMNS = ("id", "console", "minutes", "method", "user", "paid_at")
"""The payment columns that every version of the schema has."""

CREATE_VERSION_TABLE = """
    CREATE TABLE IF NOT EXISTS schema_version (
        id INTEGER PRIMARY KEY CHECK (id = 1),
        version INTEGER NOT NULL
    )
"""

CREATE_CONSOLES_TABLE = """
    CREATE TABLE IF NOT EXISTS ps5_consoles (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        name TEXT UNIQUE,
        booked INTEGER DEFAULT 0,
        end_time INTEGER
    )
"""

CREATE_LEGACY_PAYMENTS_TABLE = """
    CREATE TABLE IF NOT EXISTS payments (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        console TEXT,
        minutes INTEGER,
        method TEXT,
        user TEXT,
        paid_at DATETIME DEFAULT CURRENT_TIMESTAMP
    )
"""

CREATE_PAYMENTS_TABLE = """
    CREATE TABLE payments (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        console TEXT,
        minutes INTEGER,
        method TEXT,
        user TEXT,
        paid_at DATETIME DEFAULT CURRENT_TIMESTAMP,
        photo_data TEXT
    )
"""


async def _tables(conn: BaseDBAsyncClient) -> List[str]:
    rows = await conn.execute_query_dict("SELECT name FROM sqlite_master WHERE type='table'")
    return [row["name"] for row in rows]


async def _columns(conn: BaseDBAsyncClient, table: str) -> List[str]:
    rows = await conn.execute_query_dict(f"PRAGMA table_info({table})")
    return [row["name"] for row in rows]


async def create_base_tables(conn: BaseDBAsyncClient):
    """Creates the console roster and the original payment log."""
    await conn.execute_query(CREATE_CONSOLES_TABLE)
    await conn.execute_query(CREATE_LEGACY_PAYMENTS_TABLE)


async def add_photo_column(conn: BaseDBAsyncClient):
    """
    Rebuilds the payment log with a photo column.

    The rows are backed up, the table recreated, and the rows restored
    with their original ids.
    """
    if "photo_data" in await _columns(conn, "payments"):
        return

    columns = ", ".join(PAYMENT_COLUMNS)
    rows = await conn.execute_query_dict(f"SELECT {columns} FROM payments")
    logger.info("Backed up %s payment records", len(rows))

    await conn.execute_query("DROP TABLE payments")
    await conn.execute_query(CREATE_PAYMENTS_TABLE)

    placeholders = ", ".join("?" for _ in PAYMENT_COLUMNS)
    for row in rows:
        await conn.execute_query(
            f"INSERT INTO payments ({columns}) VALUES ({placeholders})",
            [row[column] for column in PAYMENT_COLUMNS]
        )
    logger.info("Restored %s payment records", len(rows))


MIGRATIONS: Dict[int, Callable[[BaseDBAsyncClient], Awaitable[None]]] = {
    1: create_base_tables,
    2: add_photo_column,
}
"""Maps each schema version to the step that produces it."""

LATEST_VERSION = max(MIGRATIONS)


async def current_version(conn: BaseDBAsyncClient) -> int:
    """Gets the schema version, working it out for databases without a version record."""
    tables = await _tables(conn)

    if "schema_version" in tables:
        rows = await conn.execute_query_dict("SELECT version FROM schema_version WHERE id = 1")
        if rows:
            return rows[0]["version"]

    if "payments" not in tables:
        return 0
    if "photo_data" in await _columns(conn, "payments"):
        return 2
    return 1


async def migrate(target: int = LATEST_VERSION) -> int:
    """
    Brings the database up to the target version.

    :returns: The version the database is now at.
    :raises StorageError: If any step fails, in which case nothing is changed.
    """
    try:
        async with in_transaction() as conn:
            await conn.execute_query(CREATE_VERSION_TABLE)
            version = await current_version(conn)

            for step in range(version + 1, target + 1):
                logger.info("Migrating database to version %s (%s)", step, MIGRATIONS[step].__name__)
                await MIGRATIONS[step](conn)

            if target > version:
                await conn.execute_query(
                    "INSERT OR REPLACE INTO schema_version (id, version) VALUES (1, ?)", [target]
                )
                version = target
    except BaseORMException as error:
        raise StorageError(f"Could not migrate the database: {error}") from error

    return version


async def describe_tables(tables: Iterable[str] = TABLES) -> Dict[str, List[Dict]]:
    """Gets the column layout of each of the given tables, concurrently."""
    conn = connections.get("default")

    async def describe(table):
        return table, await conn.execute_query_dict(f"PRAGMA table_info({table})")

    return dict(await asyncio.gather(*(describe(table) for table in tables)))
