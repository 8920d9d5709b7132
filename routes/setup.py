"""
Setup API routes: read-only discovery for configuring the boards.

Each POST takes the API token to try in its body, so an operator can
browse workspaces, boards, groups and columns before MONDAY_API_TOKEN
is set.
"""

from fastapi import APIRouter
from fastapi.responses import JSONResponse
import structlog

from config import build_client
from exceptions import AppError, ItemNotFoundError
from models.webhook import BoardRequest, BoardsRequest, TokenRequest
from services.board_service import BoardService, get_board_service

logger = structlog.get_logger(__name__)

router = APIRouter()


def _service_for(request: TokenRequest) -> BoardService:
    return BoardService(build_client(request.token))


# ===================
# EXCEPTION HANDLER
# ===================

def handle_error(e: Exception) -> JSONResponse:
    """Convert exception to JSON response."""
    if isinstance(e, AppError):
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

@router.post("/test-token")
def test_token(request: TokenRequest):
    """Check a token by asking who it belongs to."""
    try:
        me = _service_for(request).get_me()
        return {"ok": True, "me": me}
    except Exception as e:
        return handle_error(e)


@router.post("/workspaces")
def list_workspaces(request: TokenRequest):
    try:
        workspaces = _service_for(request).list_workspaces()
        return {"ok": True, "workspaces": workspaces}
    except Exception as e:
        return handle_error(e)


@router.post("/boards")
def list_boards(request: BoardsRequest):
    """List boards, optionally filtered by name and workspace."""
    try:
        boards = _service_for(request).list_boards(
            search=request.search,
            workspace_id=request.workspace_id
        )
        return {"ok": True, "boards": boards}
    except Exception as e:
        return handle_error(e)


@router.post("/groups")
def list_groups(request: BoardRequest):
    try:
        groups = _service_for(request).get_board_groups(request.board_id)
        return {"ok": True, "groups": [g.model_dump() for g in groups]}
    except Exception as e:
        return handle_error(e)


@router.post("/columns")
def list_columns(request: BoardRequest):
    try:
        columns = _service_for(request).get_board_columns(request.board_id)
        return {"ok": True, "columns": [c.model_dump() for c in columns]}
    except Exception as e:
        return handle_error(e)


@router.get("/items/{item_id}/columns")
def item_columns(item_id: str):
    """
    Show one item's column values with titles, using the configured token.

    Handy for finding column ids when filling in the environment.
    """
    try:
        described = get_board_service().get_item_columns_with_titles(item_id)
        if described is None:
            raise ItemNotFoundError(item_id)
        return {"ok": True, **described}
    except Exception as e:
        return handle_error(e)
