"""
API route modules.

Each module defines routes for one area.
"""

from routes.batches import router as batches_router
from routes.setup import router as setup_router

__all__ = [
    "batches_router",
    "setup_router",
]
