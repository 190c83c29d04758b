from datetime import datetime, timezone
from enum import Enum
from typing import Optional


class RelayAction(str, Enum):
    """We subclass string to make json serialization work."""
    ON = "on"
    OFF = "off"


def now_ms() -> int:
    """The current time as epoch milliseconds."""
    return int(datetime.now(timezone.utc).timestamp() * 1000)


def minutes_to_ms(minutes: int) -> int:
    return minutes * 60 * 1000


PHOTO_PREFIX = "data:image"
DEFAULT_PHOTO_PREFIX = "data:image/jpeg;base64,"


def normalize_photo(photo_data: Optional[str]) -> Optional[str]:
    """
    Turns a photo receipt into an image data URL.

    Values that are already data URLs are kept as they are, raw base64 is
    given the default jpeg prefix, and a missing (or empty) photo is ``None``.
    """
    if not photo_data:
        return None
    if photo_data.startswith(PHOTO_PREFIX):
        return photo_data
    return DEFAULT_PHOTO_PREFIX + photo_data
