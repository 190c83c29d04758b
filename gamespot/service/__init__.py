"""
.. autoclasstree:: gamespot.service

The service layer for the system. Acts as the internal API.
The HTTP views use the service layer to implement their logic.

The service layer implements the use cases of the kiosk, such that
they may be reused by any program that needs them. It is designed to
represent the business logic.
"""

from .errors import (
    KioskError, ValidationError, NotFoundError, ConflictError, AlreadyBooked,
    StorageError, RelayError, RelayTimeout, RelayNetworkError
)
