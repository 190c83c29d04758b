"""
Errors
------

The errors raised by the service layer. Views map each of these onto a
response: validation and conflict errors are the client's fault, storage
errors abort the request, and relay errors only fail a request when the
relay call was the thing being asked for.
"""


class KioskError(Exception):
    """Base class for all service errors."""

    def __init__(self, message, *args):
        super().__init__(message, *args)
        self.message = message


class ValidationError(KioskError):
    """Raised when the supplied input is missing or malformed. Nothing was changed."""


class NotFoundError(KioskError):
    """Raised when the named console does not exist."""

    def __init__(self, console):
        super().__init__(f"Console not found: {console}")
        self.console = console


class ConflictError(KioskError):
    """Raised when an operation clashes with the current state of a console."""


class AlreadyBooked(ConflictError):
    """Raised when booking a console that is not free."""

    def __init__(self, console):
        super().__init__(f"{console} is already booked")
        self.console = console


class StorageError(KioskError):
    """Raised when the database fails. The operation is aborted."""


class RelayError(KioskError):
    """Base class for failures talking to a relay controller."""


class RelayTimeout(RelayError):
    """Raised when a relay does not answer within its timeout."""


class RelayNetworkError(RelayError):
    """Raised when a relay cannot be reached, or its circuit is open."""
