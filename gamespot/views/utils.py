"""
Utilities
-------------------------
"""
from typing import Any, Dict

from gamespot.service.errors import KioskError


def failure(error, **extra) -> Dict[str, Any]:
    """Builds the body of a failed request from an error or a message."""
    return {
        "success": False,
        "error": error.message if isinstance(error, KioskError) else str(error),
        **extra
    }
