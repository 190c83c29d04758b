import asyncio
from datetime import timedelta

import pytest
from tortoise.exceptions import OperationalError

from gamespot.models import Console
from gamespot.service.errors import AlreadyBooked, NotFoundError, StorageError
from gamespot.store import SessionStore
from tests.util import ROSTER, Clock


@pytest.fixture
async def clock_store(database):
    clock = Clock()
    store = SessionStore(clock)
    await store.seed(ROSTER)
    return store, clock


async def test_seed_is_idempotent(session_store: SessionStore):
    """Assert that seeding an existing roster adds nothing and keeps bookings."""
    await session_store.try_book("PS5 #1", 30)

    assert await session_store.seed(ROSTER) == []
    assert [console.name for console in await session_store.get_all()] == ROSTER
    assert (await session_store.get("PS5 #1")).booked


async def test_try_book(clock_store):
    store, clock = clock_store
    end_time = await store.try_book("PS5 #1", 30)

    assert end_time == clock.now + 1_800_000
    console = await store.get("PS5 #1")
    assert console.booked
    assert console.end_time == end_time


async def test_try_book_booked_console(clock_store):
    """Assert that booking a booked console fails without changing it."""
    store, clock = clock_store
    end_time = await store.try_book("PS5 #1", 30)
    clock.advance(timedelta(minutes=5))

    with pytest.raises(AlreadyBooked):
        await store.try_book("PS5 #1", 10)

    assert (await store.get("PS5 #1")).end_time == end_time


async def test_try_book_unknown_console(session_store):
    with pytest.raises(NotFoundError):
        await session_store.try_book("Xbox", 30)


async def test_force_book_replaces_session(clock_store):
    """Assert that a forced booking overwrites the current session."""
    store, clock = clock_store
    await store.try_book("PS5 #2", 30)

    end_time = await store.force_book("PS5 #2", 60)

    assert end_time == clock.now + 3_600_000
    assert (await store.get("PS5 #2")).end_time == end_time


async def test_force_book_unknown_console(session_store):
    with pytest.raises(NotFoundError):
        await session_store.force_book("Xbox", 30)


async def test_reset_single(session_store):
    """Assert that a reset frees the console and reports whether it had a session."""
    await session_store.try_book("PS5 #3", 30)

    assert await session_store.reset("PS5 #3") == ["PS5 #3"]
    console = await session_store.get("PS5 #3")
    assert not console.booked
    assert console.end_time is None

    assert await session_store.reset("PS5 #3") == []


async def test_reset_unknown_console(session_store):
    """Assert that resetting an unknown console changes nothing."""
    await session_store.try_book("PS5 #1", 30)

    with pytest.raises(NotFoundError):
        await session_store.reset("Unknown Console")

    assert (await session_store.get("PS5 #1")).booked


async def test_reset_all(session_store):
    await session_store.try_book("PS5 #1", 30)
    await session_store.try_book("Logitech G920", 15)

    assert sorted(await session_store.reset()) == ["Logitech G920", "PS5 #1"]
    assert not any(console.booked for console in await session_store.get_all())


async def test_booked_iff_remaining_time(clock_store):
    """Assert that exactly the booked consoles have a remaining time, even once expired."""
    store, clock = clock_store
    await store.try_book("PS5 #1", 1)
    await store.force_book("PS5 #2", 30)
    clock.advance(timedelta(minutes=2))

    for console in await store.get_all():
        remaining = console.remaining_time(clock())
        assert console.booked == (remaining is not None)
        assert remaining is None or remaining >= 0

    assert (await store.get("PS5 #1")).remaining_time(clock()) == 0


async def test_storage_errors_are_translated(session_store, mocker):
    mocker.patch.object(Console, "filter", side_effect=OperationalError("disk I/O error"))

    with pytest.raises(StorageError) as error:
        await session_store.try_book("PS5 #1", 30)

    assert "disk I/O error" in error.value.message


async def test_concurrent_try_book(session_store):
    """Assert that of many simultaneous bookings of a free console exactly one is applied."""
    results = await asyncio.gather(
        *(session_store.try_book("PS5 #2", minutes) for minutes in range(1, 11)),
        return_exceptions=True
    )

    end_times = [result for result in results if isinstance(result, int)]
    assert len(end_times) == 1
    assert sum(isinstance(result, AlreadyBooked) for result in results) == 9
    assert (await session_store.get("PS5 #2")).end_time == end_times[0]
