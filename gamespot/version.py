"""
Version information, reported in the API docs and with sentry releases.
"""

__version__ = "1.0.0"

name = "gamespot-kiosk"
"""The name the API is published under."""
