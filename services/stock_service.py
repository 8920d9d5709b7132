"""
Stock service: apply quantity movements to catalog items.

The platform has no atomic increment, so a movement is read-then-write.
Movements on the same catalog item are serialised inside this process
with a per-item lock, and the stock is re-read under that lock.
"""

import threading
from collections import defaultdict
from typing import Any, Optional
import structlog

from models.batch import StockChange, StockDirection
from models.board import Item
from services.board_service import BoardService, get_board_service
from utils.column_codec import decode_number, format_number

logger = structlog.get_logger(__name__)


def next_stock(current: float, qty: float, direction: StockDirection) -> float:
    """
    Compute the stock after a movement.

    Inbound adds; outbound subtracts and never goes below zero.
    """
    if direction is StockDirection.INBOUND:
        return current + qty
    return max(0.0, current - qty)


class KeyedLock:
    """One lock per key, created on first use."""

    def __init__(self):
        self._guard = threading.Lock()
        self._locks: dict[str, threading.Lock] = defaultdict(threading.Lock)

    def for_key(self, key: str) -> threading.Lock:
        with self._guard:
            return self._locks[key]


class StockService:
    """
    Catalog stock mutations.
    """

    def __init__(
        self,
        board_service: Optional[BoardService] = None,
        locks: Optional[KeyedLock] = None,
    ):
        self.board_service = board_service or get_board_service()
        self.locks = locks or _catalog_locks

    def apply(
        self,
        catalog_item: Item,
        board_id: Any,
        stock_column_id: str,
        qty: float,
        direction: StockDirection,
    ) -> StockChange:
        """
        Move stock of a catalog item.

        Args:
            catalog_item: Item found by the catalog lookup
            board_id: Catalog board id
            stock_column_id: Numbers column holding the stock
            qty: Quantity moved (positive)
            direction: INBOUND or OUTBOUND

        Returns:
            StockChange with the value before and after

        Raises:
            MondayError: If reading or writing the stock fails
        """
        with self.locks.for_key(catalog_item.id):
            fresh = self.board_service.get_item(catalog_item.id) or catalog_item
            current = decode_number(fresh.column(stock_column_id))
            updated = next_stock(current, qty, direction)

            self.board_service.change_column_values(
                catalog_item.id,
                board_id,
                {stock_column_id: format_number(updated)},
                use_api_version=True
            )

        logger.info(
            "stock_updated",
            catalog_id=catalog_item.id,
            direction=direction.value,
            qty=qty,
            previous=current,
            current=updated
        )

        return StockChange(catalog_id=catalog_item.id, previous=current, current=updated)


# Process-wide: every StockService shares the same per-item locks
_catalog_locks = KeyedLock()

# Singleton instance for convenience
_stock_service: Optional[StockService] = None


def get_stock_service() -> StockService:
    """Get or create StockService instance."""
    global _stock_service
    if _stock_service is None:
        _stock_service = StockService()
    return _stock_service
