"""
Custom exception classes for the application.

Remote platform failures are split in two so callers can tell them apart:
- MondayTransportError: the request never produced a usable response
  (network failure, HTTP error status, non-JSON body)
- MondayApiError: the request went through but the API reported errors
"""

from typing import Optional, Any
from datetime import datetime, timezone


class AppError(Exception):
    """
    Base exception for all application errors.

    All custom exceptions inherit from this.

    Attributes:
        code: Error code (e.g., "ITEM_NOT_FOUND")
        message: Human-readable message
        status_code: HTTP status code
        details: Additional context
    """

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = 500,
        details: Optional[dict[str, Any]] = None
    ):
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        self.timestamp = datetime.now(timezone.utc).isoformat()
        super().__init__(message)

    def to_dict(self) -> dict:
        """Convert to API response format."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "details": self.details,
                "timestamp": self.timestamp
            }
        }


class NotFoundError(AppError):
    """Resource not found (404)."""

    def __init__(
        self,
        resource: str,
        identifier: str,
        code: Optional[str] = None
    ):
        super().__init__(
            code=code or f"{resource.upper()}_NOT_FOUND",
            message=f"{resource} not found",
            status_code=404,
            details={"id": identifier}
        )


class ValidationError(AppError):
    """Validation failed (422)."""

    def __init__(
        self,
        message: str,
        code: str = "VALIDATION_ERROR",
        details: Optional[dict] = None
    ):
        super().__init__(
            code=code,
            message=message,
            status_code=422,
            details=details
        )


class ExternalServiceError(AppError):
    """External service failure (503)."""

    def __init__(
        self,
        service: str,
        message: str,
        details: Optional[dict] = None,
        code: Optional[str] = None
    ):
        super().__init__(
            code=code or f"{service.upper()}_ERROR",
            message=message,
            status_code=503,
            details={"service": service, **(details or {})}
        )


# ===================
# CONFIGURATION ERRORS
# ===================

class ConfigurationError(ValidationError):
    """Required configuration values are missing."""

    def __init__(self, flow: str, missing: list[str]):
        super().__init__(
            code="CONFIGURATION_INCOMPLETE",
            message=f"{flow} batch cannot run: missing {', '.join(missing)}",
            details={"flow": flow, "missing": missing}
        )


# ===================
# MONDAY API ERRORS
# ===================

class MondayError(ExternalServiceError):
    """Base class for monday.com API failures."""

    def __init__(
        self,
        message: str,
        code: str = "MONDAY_ERROR",
        details: Optional[dict] = None
    ):
        super().__init__(
            service="monday",
            message=message,
            details=details,
            code=code
        )


class MondayTransportError(MondayError):
    """Network or HTTP level failure talking to monday.com."""

    def __init__(self, message: str, http_status: Optional[int] = None):
        super().__init__(
            message=message,
            code="MONDAY_TRANSPORT_ERROR",
            details={"http_status": http_status}
        )
        self.http_status = http_status


class MondayApiError(MondayError):
    """monday.com accepted the request but reported errors."""

    def __init__(self, errors: list[Any]):
        messages = [
            e.get("message", str(e)) if isinstance(e, dict) else str(e)
            for e in errors
        ]
        super().__init__(
            message="; ".join(messages) or "monday.com API error",
            code="MONDAY_API_ERROR",
            details={"errors": errors}
        )
        self.errors = errors


# ===================
# BOARD ERRORS
# ===================

class ItemNotFoundError(NotFoundError):
    """Board item not found."""

    def __init__(self, item_id: str):
        super().__init__(
            resource="Item",
            identifier=item_id,
            code="ITEM_NOT_FOUND"
        )
