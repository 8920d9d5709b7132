"""
Batch API routes: monday.com webhook and manual triggers.

POST /webhook           board events (challenge, auto-link, "tamamla")
POST /api/process       run the entry batch of a group
POST /api/process-exit  run the exit batch of a group
"""

from typing import Optional

from fastapi import APIRouter
from fastapi.responses import JSONResponse
import structlog

from exceptions import AppError
from models.batch import TriggerContext
from models.webhook import ProcessRequest, WebhookPayload
from services.batch_service import get_entry_batch_service, get_exit_batch_service
from services.webhook_service import get_webhook_service, serialize_result

logger = structlog.get_logger(__name__)

router = APIRouter()


# ===================
# EXCEPTION HANDLER
# ===================

def handle_error(e: Exception) -> JSONResponse:
    """Convert exception to JSON response."""
    if isinstance(e, AppError):
        logger.error("batch_request_failed", code=e.code, error=e.message)
        return JSONResponse(
            status_code=e.status_code,
            content=e.to_dict()
        )
    # Unexpected error
    logger.error("unexpected_error", error=str(e), type=type(e).__name__)
    return JSONResponse(
        status_code=500,
        content={
            "error": {
                "code": "INTERNAL_ERROR",
                "message": "An unexpected error occurred"
            }
        }
    )


# ===================
# ROUTES
# ===================

@router.post("/webhook")
def receive_webhook(payload: WebhookPayload):
    """
    monday.com webhook endpoint.

    Echoes the URL verification challenge; otherwise dispatches the event.
    """
    try:
        return get_webhook_service().handle(payload)
    except Exception as e:
        return handle_error(e)


@router.post("/api/process")
def process_entry(request: Optional[ProcessRequest] = None):
    """
    Run the entry batch manually.

    Uses the configured entry group unless groupId is given.
    """
    try:
        group_id = request.group_id if request else None
        result = get_entry_batch_service().process(group_id, TriggerContext())
        return serialize_result(result)
    except Exception as e:
        return handle_error(e)


@router.post("/api/process-exit")
def process_exit(request: Optional[ProcessRequest] = None):
    """
    Run the exit batch manually.

    Uses the configured exit group unless groupId is given.
    """
    try:
        group_id = request.group_id if request else None
        result = get_exit_batch_service().process(group_id, TriggerContext())
        return serialize_result(result)
    except Exception as e:
        return handle_error(e)
