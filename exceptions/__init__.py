"""
Custom exceptions module.

See errors.py for the error hierarchy.
"""

from exceptions.errors import (
    # Base exceptions
    AppError,
    NotFoundError,
    ValidationError,
    ExternalServiceError,

    # Configuration
    ConfigurationError,

    # monday.com
    MondayError,
    MondayTransportError,
    MondayApiError,

    # Boards
    ItemNotFoundError,
)

__all__ = [
    # Base
    "AppError",
    "NotFoundError",
    "ValidationError",
    "ExternalServiceError",

    # Configuration
    "ConfigurationError",

    # monday.com
    "MondayError",
    "MondayTransportError",
    "MondayApiError",

    # Boards
    "ItemNotFoundError",
]
