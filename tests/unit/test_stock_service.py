"""
Unit tests for StockService and next_stock().
"""

import threading

from models.batch import StockDirection
from services.stock_service import KeyedLock, StockService, next_stock
from tests.factories import CATALOG_BOARD


class TestNextStock:
    """Tests for next_stock()"""

    def test_inbound_adds(self):
        assert next_stock(10, 5, StockDirection.INBOUND) == 15

    def test_outbound_subtracts(self):
        assert next_stock(10, 4, StockDirection.OUTBOUND) == 6

    def test_outbound_floors_at_zero(self):
        """Should never go below zero."""
        assert next_stock(10, 12, StockDirection.OUTBOUND) == 0


class TestApply:
    """Tests for StockService.apply()"""

    def test_inbound_writes_new_stock(self, boards, stock_service):
        catalog_item = boards.get_item("5001")

        change = stock_service.apply(catalog_item, CATALOG_BOARD, "stock", 5, StockDirection.INBOUND)

        assert (change.previous, change.current) == (10, 15)
        assert boards.value_of("5001", "stock").text == "15"

    def test_write_uses_api_version(self, boards, stock_service):
        stock_service.apply(boards.get_item("5001"), CATALOG_BOARD, "stock", 1, StockDirection.INBOUND)

        assert boards.changes[-1]["use_api_version"] is True
        assert boards.changes[-1]["column_values"] == {"stock": "11"}

    def test_rereads_stale_item(self, boards, stock_service):
        """Should use the current stock, not the value from the lookup."""
        stale = boards.get_item("5001")
        boards.change_column_values("5001", CATALOG_BOARD, {"stock": "40"})

        change = stock_service.apply(stale, CATALOG_BOARD, "stock", 2, StockDirection.OUTBOUND)

        assert change.previous == 40
        assert change.current == 38

    def test_missing_stock_counts_as_zero(self, boards, stock_service):
        item = boards.add_item(CATALOG_BOARD, "Yeni", columns=[])

        change = stock_service.apply(item, CATALOG_BOARD, "stock", 3, StockDirection.INBOUND)

        assert change.previous == 0
        assert change.current == 3

    def test_concurrent_movements_are_serialised(self, boards):
        """Should not lose updates when two services move the same item."""
        locks = KeyedLock()
        services = [StockService(board_service=boards, locks=locks) for _ in range(2)]

        def move(service):
            for _ in range(10):
                service.apply(boards.get_item("5001"), CATALOG_BOARD, "stock", 1, StockDirection.INBOUND)

        threads = [threading.Thread(target=move, args=(s,)) for s in services]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert boards.value_of("5001", "stock").text == "30"


class TestKeyedLock:
    """Tests for KeyedLock"""

    def test_same_key_same_lock(self):
        locks = KeyedLock()
        assert locks.for_key("5001") is locks.for_key("5001")
        assert locks.for_key("5001") is not locks.for_key("5002")
