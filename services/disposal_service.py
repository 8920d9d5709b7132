"""
Disposal service: archive or delete handled rows.
"""

from typing import Any, Optional
import structlog

from models.batch import DisposalMode
from services.board_service import BoardService, get_board_service

logger = structlog.get_logger(__name__)


class DisposalService:
    """Removes rows from their group once they have been handled."""

    def __init__(self, board_service: Optional[BoardService] = None):
        self.board_service = board_service or get_board_service()

    def dispose(self, item_id: Any, mode: DisposalMode) -> bool:
        """
        Archive or delete an item.

        Returns:
            True if the item was removed, False for DisposalMode.NONE

        Raises:
            MondayError: If the mutation fails
        """
        if mode is DisposalMode.DELETE:
            self.board_service.delete_item(item_id)
        elif mode is DisposalMode.ARCHIVE:
            self.board_service.archive_item(item_id)
        else:
            logger.debug("disposal_skipped", item_id=str(item_id))
            return False
        return True


# Singleton instance for convenience
_disposal_service: Optional[DisposalService] = None


def get_disposal_service() -> DisposalService:
    """Get or create DisposalService instance."""
    global _disposal_service
    if _disposal_service is None:
        _disposal_service = DisposalService()
    return _disposal_service
