"""
Catalog service: find product items on the catalog board.

Lookups page through the board and stop at the first match. Barcodes are
assumed unique but this is not enforced; if two products share a barcode
the one returned first by the API wins.
"""

from typing import Any, Optional
import structlog

from models.board import Item
from services.board_service import BoardService, get_board_service
from utils.column_codec import decode_text

logger = structlog.get_logger(__name__)


PAGE_SIZE = 200
MAX_PAGES = 30  # 6000 items; anything beyond is reported as not found


class CatalogService:
    """
    Catalog lookups.

    Nothing is cached: stock values change between rows of the same run.
    """

    def __init__(
        self,
        board_service: Optional[BoardService] = None,
        page_size: int = PAGE_SIZE,
        max_pages: int = MAX_PAGES,
    ):
        self.board_service = board_service or get_board_service()
        self.page_size = page_size
        self.max_pages = max_pages

    def find_by_barcode(
        self,
        board_id: Any,
        barcode_column_id: str,
        barcode: Optional[str],
    ) -> Optional[Item]:
        """
        Find the catalog item whose barcode column equals `barcode`.

        Comparison is exact and case-sensitive after trimming both sides.

        Returns:
            Matching Item, or None if not found within MAX_PAGES pages
        """
        target = (barcode or "").strip()
        if not target:
            return None

        pages = 0
        for page in self.board_service.iter_board_pages(
            board_id,
            page_size=self.page_size,
            max_pages=self.max_pages,
        ):
            pages += 1
            for item in page:
                if decode_text(item.column(barcode_column_id)) == target:
                    logger.debug(
                        "catalog_barcode_found",
                        barcode=target,
                        catalog_id=item.id,
                        pages=pages
                    )
                    return item

        logger.info("catalog_barcode_not_found", barcode=target, pages=pages)
        return None

    def find_by_exact_name(self, board_id: Any, name: Optional[str]) -> Optional[Item]:
        """
        Find an item by name.

        Comparison is exact after trimming, ignoring case.
        """
        target = (name or "").strip().lower()
        if not target:
            return None

        for page in self.board_service.iter_board_pages(
            board_id,
            page_size=self.page_size,
            max_pages=self.max_pages,
            with_columns=False,
        ):
            for item in page:
                if item.clean_name.lower() == target:
                    return item

        logger.info("catalog_name_not_found", name=name)
        return None


# Singleton instance for convenience
_catalog_service: Optional[CatalogService] = None


def get_catalog_service() -> CatalogService:
    """Get or create CatalogService instance."""
    global _catalog_service
    if _catalog_service is None:
        _catalog_service = CatalogService()
    return _catalog_service
