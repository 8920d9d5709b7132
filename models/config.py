"""
Immutable batch configuration.

Built from Settings (see config/settings.py) and injected into the batch
services, so a run never re-reads the environment halfway through.
"""

from typing import Optional

from models.base import FrozenSchema
from models.batch import DisposalMode, MappingOverride


class CatalogConfig(FrozenSchema):
    """Where products and their stock live."""

    board_id: Optional[str] = None
    barcode_column_id: Optional[str] = None
    stock_column_id: Optional[str] = None


class ReportConfig(FrozenSchema):
    """Report (audit) board a batch is mirrored into."""

    board_id: Optional[str] = None
    create_group: bool = True
    copy_columns: bool = True
    date_column_id: Optional[str] = None
    person_column_id: Optional[str] = None
    product_link_column_id: Optional[str] = None
    target_link_column_id: Optional[str] = None
    overrides: tuple[MappingOverride, ...] = ()

    @property
    def enabled(self) -> bool:
        return bool(self.board_id)


class EntryBatchConfig(FrozenSchema):
    """Configuration of the goods-received flow."""

    board_id: Optional[str] = None
    group_id: Optional[str] = None
    qty_column_id: Optional[str] = None
    barcode_source: str = "name"
    qc_checkbox_column_id: Optional[str] = None
    count_checkbox_column_id: Optional[str] = None
    alert_people_column_id: Optional[str] = None
    alert_user_ids: tuple[int, ...] = ()
    product_link_column_id: Optional[str] = None
    delete_mode: DisposalMode = DisposalMode.ARCHIVE
    complete_delete_mode: DisposalMode = DisposalMode.DELETE
    catalog: CatalogConfig = CatalogConfig()
    report: ReportConfig = ReportConfig()


class ExitBatchConfig(FrozenSchema):
    """Configuration of the goods-shipped flow."""

    board_id: Optional[str] = None
    group_id: Optional[str] = None
    qty_column_id: Optional[str] = None
    barcode_source: str = "name"
    product_rel_column_id: Optional[str] = None
    target_rel_column_id: Optional[str] = None
    delete_mode: DisposalMode = DisposalMode.DELETE
    complete_delete_mode: DisposalMode = DisposalMode.DELETE
    catalog: CatalogConfig = CatalogConfig()
    report: ReportConfig = ReportConfig(copy_columns=False)
