"""
monday.com client management.

Provides the shared MondayClient built from settings.
"""

from functools import lru_cache
from typing import Optional
import structlog

from config.settings import settings
from exceptions import MondayError
from integrations.monday import MondayClient

logger = structlog.get_logger(__name__)


@lru_cache()
def get_monday_client() -> MondayClient:
    """
    Get cached MondayClient instance.

    Uses lru_cache to ensure only one client (and HTTP session) is created.
    Call reset_connection() to rebuild it after a config change.
    """
    logger.info(
        "creating_monday_client",
        url=settings.monday_api_url,
        api_version=settings.monday_api_version,
        has_token=settings.monday_configured
    )
    return build_client()


def build_client(token: Optional[str] = None) -> MondayClient:
    """
    Build a MondayClient with the configured endpoint.

    Args:
        token: Use this token instead of MONDAY_API_TOKEN (setup flow)
    """
    return MondayClient(
        token=token or settings.monday_api_token,
        api_url=settings.monday_api_url,
        api_version=settings.monday_api_version,
        timeout=settings.monday_timeout_seconds,
    )


# ===================
# HELPER FUNCTIONS
# ===================

def check_connection() -> dict:
    """
    Check monday.com connectivity with a `me` query.

    Returns:
        dict: Connection status with details
    """
    if not settings.monday_configured:
        return {"status": "unconfigured"}

    try:
        data = get_monday_client().execute("query { me { id name } }")
        me = data.get("me") or {}
        return {
            "status": "healthy",
            "user_id": me.get("id"),
            "user_name": me.get("name"),
        }
    except MondayError as e:
        return {
            "status": "unhealthy",
            "error": e.message
        }


def reset_connection():
    """Reset the cached client."""
    get_monday_client.cache_clear()
    logger.info("monday_client_reset")
