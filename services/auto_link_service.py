"""
Auto-link service: point a freshly created row at its catalog product.

When a row whose barcode is found in the catalog is added to the entry or
exit board, its product relation column is filled in right away so people
see which product they are counting or shipping.
"""

from typing import Any, Optional
import structlog

from exceptions import MondayError
from models.batch import SideEffectResult
from models.config import CatalogConfig
from services.board_service import BoardService, get_board_service
from services.catalog_service import CatalogService, get_catalog_service
from utils.column_codec import decode_text, link_payload
from utils.text_utils import is_sentinel, looks_like_barcode

logger = structlog.get_logger(__name__)


class AutoLinkService:
    """Best-effort product linking on item creation."""

    def __init__(
        self,
        board_service: Optional[BoardService] = None,
        catalog_service: Optional[CatalogService] = None,
    ):
        self.board_service = board_service or get_board_service()
        self.catalog_service = catalog_service or get_catalog_service()

    def link_product(
        self,
        item_id: Any,
        board_id: Any,
        barcode_source: str,
        link_column_id: Optional[str],
        catalog: CatalogConfig,
    ) -> Optional[SideEffectResult]:
        """
        Link a new row to the catalog item matching its barcode.

        Args:
            item_id: Row that was created
            board_id: Board the row must belong to
            barcode_source: "name" or the id of the barcode column
            link_column_id: Relation column to fill
            catalog: Catalog board configuration

        Returns:
            None when nothing was attempted (no column, not a barcode,
            not in the catalog), otherwise the outcome of the write
        """
        if not link_column_id or not catalog.board_id or not catalog.barcode_column_id:
            return None

        try:
            item = self.board_service.get_item(item_id)
            if item is None or str(item.board_id) != str(board_id):
                return None

            barcode = (
                item.clean_name if barcode_source == "name"
                else decode_text(item.column(barcode_source))
            )
            if is_sentinel(barcode) or not looks_like_barcode(barcode):
                return None

            catalog_item = self.catalog_service.find_by_barcode(
                catalog.board_id, catalog.barcode_column_id, barcode
            )
            if catalog_item is None:
                logger.info("auto_link_skipped", item_id=str(item_id), barcode=barcode)
                return None

            self.board_service.change_column_values(
                item_id,
                board_id,
                {link_column_id: link_payload([int(catalog_item.id)])}
            )
        except MondayError as e:
            logger.warning("auto_link_failed", item_id=str(item_id), error=e.message)
            return SideEffectResult.warned("auto_link", str(item_id), e)

        logger.info(
            "auto_link_written",
            item_id=str(item_id),
            catalog_id=catalog_item.id,
            barcode=barcode
        )
        return SideEffectResult.success("auto_link", str(item_id))


# Singleton instance for convenience
_auto_link_service: Optional[AutoLinkService] = None


def get_auto_link_service() -> AutoLinkService:
    """Get or create AutoLinkService instance."""
    global _auto_link_service
    if _auto_link_service is None:
        _auto_link_service = AutoLinkService()
    return _auto_link_service
