"""
Shared test fixtures.

The fake board service keeps boards and items in memory and records
every write, so batch flows can be run end to end without monday.com.
"""

import sys
from pathlib import Path

# Add project root to Python path
project_dir = Path(__file__).parent.parent
sys.path.insert(0, str(project_dir))

import json
from typing import Any, Iterator, Optional

import pytest

from models.batch import MappingOverride
from models.board import Column, ColumnValue, Group, Item
from models.config import CatalogConfig, EntryBatchConfig, ExitBatchConfig, ReportConfig
from services.catalog_service import CatalogService
from services.disposal_service import DisposalService
from services.notification_service import NotificationService
from services.qc_gate_service import QCGateService
from services.report_mirror_service import ReportMirrorService
from services.stock_service import KeyedLock, StockService
from tests.factories import (
    ALERT_USER,
    CATALOG_BOARD,
    ENTRY_BOARD,
    EXIT_BOARD,
    EXIT_REPORT_BOARD,
    REPORT_BOARD,
    cv,
    number_cv,
)


# ===================
# FAKE BOARD SERVICE
# ===================

def _stored_value(column_id: str, payload: Any) -> ColumnValue:
    """How monday.com would echo back a written payload."""
    text = payload if isinstance(payload, str) else None
    return ColumnValue(id=column_id, text=text, value=json.dumps(payload))


class FakeBoardService:
    """
    In-memory stand-in for BoardService.

    Usage:
        fake_board.add_board("100", [("stock", "Stok", "numbers")])
        fake_board.add_item("100", "Vida", columns=[number_cv("stock", 10)])

    Set fake_board.failures["create_item"] = SomeError(...) to make a
    method raise.
    """

    def __init__(self):
        self.columns: dict[str, list[Column]] = {}
        self.items: dict[str, Item] = {}
        self.order: dict[str, list[str]] = {}
        self.failures: dict[str, Exception] = {}

        self.created: list[dict] = []
        self.changes: list[dict] = []
        self.groups_created: list[dict] = []
        self.deleted: list[str] = []
        self.archived: list[str] = []
        self.updates: list[dict] = []
        self.notifications: list[dict] = []

        self._next_id = 9000

    # --- seeding ---

    def add_board(self, board_id: str, columns: list[tuple[str, str, str]]) -> None:
        self.columns[board_id] = [Column(id=c, title=t, type=k) for c, t, k in columns]
        self.order.setdefault(board_id, [])

    def add_item(
        self,
        board_id: str,
        name: str,
        group_id: str = "topics",
        columns: Optional[list[ColumnValue]] = None,
        item_id: Optional[str] = None,
    ) -> Item:
        item = Item(
            id=item_id or self._new_id(),
            name=name,
            board_id=board_id,
            group_id=group_id,
            column_values=columns or [],
        )
        self.items[item.id] = item
        self.order.setdefault(board_id, []).append(item.id)
        return item

    def value_of(self, item_id: str, column_id: str) -> Optional[ColumnValue]:
        return self.items[str(item_id)].column(column_id)

    def _new_id(self) -> str:
        self._next_id += 1
        return str(self._next_id)

    def _maybe_fail(self, method: str) -> None:
        if method in self.failures:
            raise self.failures[method]

    def _board_items(self, board_id: Any) -> list[Item]:
        return [self.items[i] for i in self.order.get(str(board_id), []) if i in self.items]

    def _remove(self, item_id: Any) -> None:
        item = self.items.pop(str(item_id), None)
        if item is not None:
            self.order[item.board_id].remove(item.id)

    # --- BoardService API ---

    def get_board_columns(self, board_id: Any) -> list[Column]:
        self._maybe_fail("get_board_columns")
        return list(self.columns.get(str(board_id), []))

    def get_board_groups(self, board_id: Any) -> list[Group]:
        groups = {i.group_id for i in self._board_items(board_id)}
        return [Group(id=g, title=g) for g in sorted(groups)]

    def list_group_items(self, board_id: Any, group_id: Optional[str], page_size: int = 200) -> list[Item]:
        self._maybe_fail("list_group_items")
        return [i for i in self._board_items(board_id) if i.group_id == group_id]

    def iter_board_pages(
        self,
        board_id: Any,
        page_size: int = 200,
        max_pages: Optional[int] = None,
        with_columns: bool = True,
    ) -> Iterator[list[Item]]:
        self._maybe_fail("iter_board_pages")
        items = self._board_items(board_id)
        pages = 0
        for start in range(0, max(len(items), 1), page_size):
            if max_pages is not None and pages >= max_pages:
                return
            pages += 1
            yield items[start:start + page_size]

    def get_item(self, item_id: Any) -> Optional[Item]:
        self._maybe_fail("get_item")
        return self.items.get(str(item_id))

    def create_item(
        self,
        board_id: Any,
        group_id: Optional[str],
        name: str,
        column_values: Optional[dict[str, Any]] = None,
    ) -> Optional[str]:
        self._maybe_fail("create_item")
        column_values = column_values or {}
        self.created.append({
            "board_id": str(board_id),
            "group_id": group_id,
            "name": name,
            "column_values": column_values,
        })
        item = self.add_item(
            str(board_id),
            name,
            group_id=group_id,
            columns=[_stored_value(k, v) for k, v in column_values.items()],
        )
        return item.id

    def change_column_values(
        self,
        item_id: Any,
        board_id: Any,
        column_values: dict[str, Any],
        use_api_version: bool = False,
    ) -> None:
        self._maybe_fail("change_column_values")
        self.changes.append({
            "item_id": str(item_id),
            "board_id": str(board_id),
            "column_values": column_values,
            "use_api_version": use_api_version,
        })

        item = self.items.get(str(item_id))
        if item is None:
            return
        kept = [c for c in item.column_values if c.id not in column_values]
        written = [_stored_value(k, v) for k, v in column_values.items()]
        self.items[item.id] = item.model_copy(update={"column_values": kept + written})

    def create_group(self, board_id: Any, name: str) -> Optional[str]:
        self._maybe_fail("create_group")
        group_id = f"group_{len(self.groups_created) + 1}"
        self.groups_created.append({"board_id": str(board_id), "name": name, "id": group_id})
        return group_id

    def delete_item(self, item_id: Any) -> None:
        self._maybe_fail("delete_item")
        self.deleted.append(str(item_id))
        self._remove(item_id)

    def archive_item(self, item_id: Any) -> None:
        self._maybe_fail("archive_item")
        self.archived.append(str(item_id))
        self._remove(item_id)

    def create_update(self, item_id: Any, body: str) -> Optional[str]:
        self._maybe_fail("create_update")
        self.updates.append({"item_id": str(item_id), "body": body})
        return self._new_id()

    def create_notification(self, user_id: Any, target_id: Any, text: str, target_type: str = "Project") -> None:
        self._maybe_fail("create_notification")
        self.notifications.append({
            "user_id": user_id,
            "target_id": str(target_id),
            "text": text,
            "target_type": target_type,
        })


# ===================
# BOARDS
# ===================

@pytest.fixture
def fake_board() -> FakeBoardService:
    """Empty in-memory board service."""
    return FakeBoardService()


@pytest.fixture
def boards(fake_board) -> FakeBoardService:
    """
    Catalog, entry, report, exit and exit report boards.

    The catalog holds one product, "Vida M4" with barcode ABC123 and
    10 in stock (item id 5001).
    """
    fake_board.add_board(CATALOG_BOARD, [
        ("barcode", "Barkod", "text"),
        ("stock", "Stok", "numbers"),
    ])
    fake_board.add_board(ENTRY_BOARD, [
        ("qty", "Adet", "numbers"),
        ("qc", "Kontrol Edildi mi?", "checkbox"),
        ("count", "Sayım Yapıldı mı?", "checkbox"),
        ("product", "Ürün", "board_relation"),
        ("price", "Son Alış Fiyatı", "numbers"),
        ("notes", "Notlar", "text"),
        ("owner", "Sorumlu", "people"),
    ])
    fake_board.add_board(REPORT_BOARD, [
        ("r_qty", "Adet", "numbers"),
        ("r_price", "Alış Fiyatı", "numbers"),
        ("r_notes", "Notlar", "long_text"),
        ("r_product", "Ürün", "board_relation"),
        ("r_date", "Tarih", "date"),
        ("r_person", "Giriş Yapan", "people"),
        ("r_summary", "Özet", "mirror"),
    ])
    fake_board.add_board(EXIT_BOARD, [
        ("e_qty", "Çıkış Adedi", "numbers"),
        ("e_unit", "Birim", "dropdown"),
        ("e_product", "Ürün", "board_relation"),
        ("e_target", "Çıkış Noktası", "board_relation"),
    ])
    fake_board.add_board(EXIT_REPORT_BOARD, [
        ("x_qty", "Adet", "numbers"),
        ("x_unit", "Birim", "dropdown"),
        ("x_date", "Tarih", "date"),
        ("x_product", "Ürün", "board_relation"),
        ("x_people", "Çıkışı Yapan", "people"),
        ("x_target", "Çıkış Noktası", "board_relation"),
    ])

    fake_board.add_item(
        CATALOG_BOARD,
        "Vida M4",
        columns=[cv("barcode", "ABC123"), number_cv("stock", 10)],
        item_id="5001",
    )
    return fake_board


# ===================
# CONFIGURATION
# ===================

@pytest.fixture
def catalog_config() -> CatalogConfig:
    return CatalogConfig(board_id=CATALOG_BOARD, barcode_column_id="barcode", stock_column_id="stock")


@pytest.fixture
def entry_config(catalog_config) -> EntryBatchConfig:
    """Entry flow with QC gate, report board and a price override."""
    return EntryBatchConfig(
        board_id=ENTRY_BOARD,
        group_id="topics",
        qty_column_id="qty",
        qc_checkbox_column_id="qc",
        count_checkbox_column_id="count",
        alert_people_column_id="owner",
        alert_user_ids=(ALERT_USER,),
        product_link_column_id="product",
        catalog=catalog_config,
        report=ReportConfig(
            board_id=REPORT_BOARD,
            date_column_id="r_date",
            person_column_id="r_person",
            product_link_column_id="r_product",
            overrides=(
                MappingOverride(target_column_id="r_price", source_column_id="price", type_hint="numeric"),
            ),
        ),
    )


@pytest.fixture
def exit_config(catalog_config) -> ExitBatchConfig:
    """Exit flow with an exit report board (no title matching)."""
    return ExitBatchConfig(
        board_id=EXIT_BOARD,
        group_id="topics",
        qty_column_id="e_qty",
        product_rel_column_id="e_product",
        target_rel_column_id="e_target",
        catalog=catalog_config,
        report=ReportConfig(
            board_id=EXIT_REPORT_BOARD,
            copy_columns=False,
            date_column_id="x_date",
            person_column_id="x_people",
            product_link_column_id="x_product",
            target_link_column_id="x_target",
            overrides=(
                MappingOverride(target_column_id="x_qty", source_column_id="e_qty", type_hint="numeric"),
                MappingOverride(target_column_id="x_unit", source_column_id="e_unit", type_hint="dropdown"),
            ),
        ),
    )


# ===================
# SERVICES ON THE FAKE
# ===================

@pytest.fixture
def catalog_service(fake_board) -> CatalogService:
    return CatalogService(board_service=fake_board, page_size=2)


@pytest.fixture
def stock_service(fake_board) -> StockService:
    return StockService(board_service=fake_board, locks=KeyedLock())


@pytest.fixture
def disposal_service(fake_board) -> DisposalService:
    return DisposalService(board_service=fake_board)


@pytest.fixture
def notification_service(fake_board) -> NotificationService:
    return NotificationService(board_service=fake_board)


@pytest.fixture
def qc_gate_service(notification_service, disposal_service) -> QCGateService:
    return QCGateService(
        notification_service=notification_service,
        disposal_service=disposal_service,
    )


@pytest.fixture
def report_mirror_service(fake_board) -> ReportMirrorService:
    return ReportMirrorService(board_service=fake_board)


@pytest.fixture
def batch_services(
    fake_board,
    catalog_service,
    stock_service,
    report_mirror_service,
    disposal_service,
) -> dict:
    """Keyword arguments wiring a batch service to the fake."""
    return {
        "board_service": fake_board,
        "catalog_service": catalog_service,
        "stock_service": stock_service,
        "report_mirror_service": report_mirror_service,
        "disposal_service": disposal_service,
    }


# ===================
# API TEST CLIENT
# ===================

@pytest.fixture
def test_client():
    """
    Create FastAPI test client.

    Usage:
        def test_endpoint(test_client):
            response = test_client.get("/health")
            assert response.status_code == 200
    """
    from fastapi.testclient import TestClient
    from main import app

    return TestClient(app)
