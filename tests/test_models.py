import pytest
from faker import Faker

from gamespot.models import Console
from gamespot.models.util import normalize_photo, DEFAULT_PHOTO_PREFIX, minutes_to_ms

fake = Faker()


def test_normalize_raw_photo():
    """Assert that raw base64 is given the default prefix."""
    data = fake.pystr(min_chars=8, max_chars=64)
    assert normalize_photo(data) == DEFAULT_PHOTO_PREFIX + data


def test_normalize_prefixed_photo():
    """Assert that a data url is kept as is."""
    data = "data:image/png;base64," + fake.pystr()
    assert normalize_photo(data) == data


@pytest.mark.parametrize("data", [None, ""])
def test_normalize_missing_photo(data):
    """Assert that a missing photo is null rather than an empty string."""
    assert normalize_photo(data) is None


def test_normalize_is_idempotent():
    for data in (fake.pystr(), "data:image/webp;base64," + fake.pystr(), None, ""):
        assert normalize_photo(normalize_photo(data)) == normalize_photo(data)


def test_minutes_to_ms():
    assert minutes_to_ms(30) == 1_800_000


async def test_remaining_time(database):
    """Assert that the remaining time counts down to zero and no further."""
    console = Console(name="PS5 #1", booked=True, end_time=10_000)

    assert console.remaining_time(4_000) == 6_000
    assert console.remaining_time(10_000) == 0
    assert console.remaining_time(99_000) == 0


async def test_remaining_time_free_console(database):
    assert Console(name="PS5 #1", booked=False, end_time=None).remaining_time(0) is None
