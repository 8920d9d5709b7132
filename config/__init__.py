"""
Configuration module.

Exports:
    settings: Application settings instance
    get_settings: Function to get settings (for dependency injection)
    get_monday_client: Shared monday.com client
    build_client: Build a client for a given token
    check_connection: Health check function
"""

from config.settings import settings, get_settings, Settings
from config.gateway import (
    get_monday_client,
    build_client,
    check_connection,
    reset_connection,
)

__all__ = [
    # Settings
    "settings",
    "get_settings",
    "Settings",

    # monday.com client
    "get_monday_client",
    "build_client",
    "check_connection",
    "reset_connection",
]
