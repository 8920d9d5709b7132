"""
Batch services: post entry (goods received) and exit (goods shipped) batches.

A batch is every row of one group on the entry or exit board. Renaming
(or creating) a row "tamamla" in that group triggers the run:

    load rows -> QC gate (entry only) -> create report group
      -> for each row: find catalog item -> move stock -> mirror to report
         -> archive/delete the row

Rows are handled one at a time, in board order. A row that cannot be
posted (no barcode, no quantity, unknown product, API error) is left in
its group for manual correction; the rest of the batch continues.
Transport failures abort the run.
"""

from datetime import datetime
from typing import Optional
import structlog

from config import get_settings
from exceptions import ConfigurationError, MondayApiError
from models.batch import (
    BatchResult,
    MirrorExtras,
    RelationHint,
    RowOutcome,
    RowReason,
    StockDirection,
    TriggerContext,
)
from models.board import Item
from models.config import EntryBatchConfig, ExitBatchConfig
from services.board_service import BoardService, get_board_service
from services.catalog_service import CatalogService, get_catalog_service
from services.disposal_service import DisposalService, get_disposal_service
from services.qc_gate_service import QCGateService, get_qc_gate_service
from services.report_mirror_service import ReportMirrorService, get_report_mirror_service
from services.stock_service import StockService, get_stock_service
from utils.column_codec import decode_linked_ids, decode_number, decode_text
from utils.text_utils import is_eligible_name

logger = structlog.get_logger(__name__)


DEFAULT_PRODUCT_COLUMN_TITLE = "Ürün"
REPORT_GROUP_NAME_FORMAT = "%d.%m.%Y %H:%M:%S"


class BatchService:
    """
    Shared batch state machine.

    Subclasses set the flow name, stock direction and not-found reason,
    and decide how a row is mirrored to the report board.
    """

    flow = "batch"
    direction = StockDirection.INBOUND
    not_found_reason = RowReason.NO_CATALOG

    def __init__(
        self,
        config,
        board_service: Optional[BoardService] = None,
        catalog_service: Optional[CatalogService] = None,
        stock_service: Optional[StockService] = None,
        report_mirror_service: Optional[ReportMirrorService] = None,
        disposal_service: Optional[DisposalService] = None,
    ):
        self.config = config
        self.board_service = board_service or get_board_service()
        self.catalog_service = catalog_service or get_catalog_service()
        self.stock_service = stock_service or get_stock_service()
        self.report_mirror_service = report_mirror_service or get_report_mirror_service()
        self.disposal_service = disposal_service or get_disposal_service()

    # ===================
    # RUN
    # ===================

    def process(
        self,
        group_id: Optional[str] = None,
        context: Optional[TriggerContext] = None,
    ) -> BatchResult:
        """
        Post every eligible row of a group.

        Args:
            group_id: Group to process (defaults to the configured group)
            context: Trigger information (user who completed the batch)

        Returns:
            BatchResult; blocked=True if the QC gate stopped the run

        Raises:
            ConfigurationError: Required board/column ids are missing
            MondayTransportError: The platform could not be reached
        """
        context = context or TriggerContext()
        self.validate_config()
        group_id = group_id or self.config.group_id

        logger.info(
            "batch_started",
            flow=self.flow,
            board_id=self.config.board_id,
            group_id=group_id,
            trigger_user_id=context.trigger_user_id
        )

        items = self.board_service.list_group_items(self.config.board_id, group_id)

        blocked = self.gate(items, group_id)
        if blocked is not None:
            return blocked

        rows = [item for item in items if is_eligible_name(item.name)]
        report_group_id = self.create_report_group()

        results = [self.process_row(item, report_group_id, context) for item in rows]

        logger.info(
            "batch_completed",
            flow=self.flow,
            group_id=group_id,
            report_group_id=report_group_id,
            processed=len(results),
            succeeded=sum(1 for r in results if r.ok)
        )
        return BatchResult.completed(group_id, report_group_id, results)

    def validate_config(self) -> None:
        required = {
            "board_id": self.config.board_id,
            "qty_column_id": self.config.qty_column_id,
            "catalog.board_id": self.config.catalog.board_id,
            "catalog.barcode_column_id": self.config.catalog.barcode_column_id,
            "catalog.stock_column_id": self.config.catalog.stock_column_id,
        }
        missing = [name for name, value in required.items() if not value]
        if missing:
            raise ConfigurationError(self.flow, missing)

    def gate(self, items: list[Item], group_id: Optional[str]) -> Optional[BatchResult]:
        """Pre-condition over the whole batch; None lets it proceed."""
        return None

    def create_report_group(self) -> Optional[str]:
        report = self.config.report
        if not (report.enabled and report.create_group):
            return None
        name = datetime.now().strftime(REPORT_GROUP_NAME_FORMAT)
        return self.board_service.create_group(report.board_id, name)

    # ===================
    # ROWS
    # ===================

    def pick_barcode(self, item: Item) -> str:
        if self.config.barcode_source == "name":
            return item.clean_name
        return decode_text(item.column(self.config.barcode_source))

    def pick_qty(self, item: Item) -> float:
        return decode_number(item.column(self.config.qty_column_id))

    def process_row(
        self,
        item: Item,
        report_group_id: Optional[str],
        context: TriggerContext,
    ) -> RowOutcome:
        """Post one row; never raises for data or API errors."""
        barcode = self.pick_barcode(item)
        qty = self.pick_qty(item)
        outcome = RowOutcome(item_id=item.id, ok=False, barcode=barcode, qty=qty)

        if not barcode or qty <= 0:
            logger.info("row_skipped", flow=self.flow, item_id=item.id, barcode=barcode, qty=qty)
            outcome.reason = RowReason.MISSING_BARCODE_OR_QTY.value
            return outcome

        try:
            return self._post_row(item, barcode, qty, outcome, report_group_id, context)
        except MondayApiError as e:
            # reason already names the stage that failed, if past the stock update
            outcome.reason = outcome.reason or RowReason.REMOTE_ERROR.value
            logger.error(
                "row_failed",
                flow=self.flow,
                item_id=item.id,
                barcode=barcode,
                reason=outcome.reason,
                error=e.message
            )
            return outcome

    def _post_row(
        self,
        item: Item,
        barcode: str,
        qty: float,
        outcome: RowOutcome,
        report_group_id: Optional[str],
        context: TriggerContext,
    ) -> RowOutcome:
        catalog = self.config.catalog

        catalog_item = self.catalog_service.find_by_barcode(
            catalog.board_id, catalog.barcode_column_id, barcode
        )
        if catalog_item is None:
            logger.info("row_catalog_not_found", flow=self.flow, item_id=item.id, barcode=barcode)
            outcome.reason = self.not_found_reason.value
            return outcome
        outcome.catalog_id = catalog_item.id

        change = self.stock_service.apply(
            catalog_item,
            catalog.board_id,
            catalog.stock_column_id,
            qty,
            self.direction,
        )
        outcome.from_stock = change.previous
        outcome.to_stock = change.current

        if self.config.report.enabled:
            outcome.reason = RowReason.REPORT_FAILED.value
            outcome.report_item_id = self.mirror(item, catalog_item, report_group_id, context)
            if outcome.report_item_id is None:
                return outcome

        outcome.reason = RowReason.DISPOSE_FAILED.value
        self.disposal_service.dispose(item.id, self.config.delete_mode)

        outcome.reason = None
        outcome.ok = True
        logger.info(
            "row_posted",
            flow=self.flow,
            item_id=item.id,
            barcode=barcode,
            qty=qty,
            previous=change.previous,
            current=change.current
        )
        return outcome

    def mirror(
        self,
        item: Item,
        catalog_item: Item,
        report_group_id: Optional[str],
        context: TriggerContext,
    ) -> Optional[str]:
        raise NotImplementedError


class EntryBatchService(BatchService):
    """Goods received: QC gate, stock up, full column mirror."""

    flow = "entry"
    direction = StockDirection.INBOUND
    not_found_reason = RowReason.NO_CATALOG

    def __init__(
        self,
        config: EntryBatchConfig,
        qc_gate_service: Optional[QCGateService] = None,
        **services,
    ):
        super().__init__(config, **services)
        self.qc_gate_service = qc_gate_service or get_qc_gate_service()

    def gate(self, items: list[Item], group_id: Optional[str]) -> Optional[BatchResult]:
        return self.qc_gate_service.enforce(items, self.config, group_id)

    def mirror(
        self,
        item: Item,
        catalog_item: Item,
        report_group_id: Optional[str],
        context: TriggerContext,
    ) -> Optional[str]:
        report = self.config.report
        product = RelationHint(
            catalog_item_id=int(catalog_item.id),
            target_column_id=report.product_link_column_id,
            source_column_id=self.config.product_link_column_id,
            source_title=DEFAULT_PRODUCT_COLUMN_TITLE,
        )
        return self.report_mirror_service.copy(
            item,
            report.board_id,
            report_group_id,
            overrides=report.overrides,
            relation_hints=[product],
            extras=MirrorExtras(
                date_column_id=report.date_column_id,
                person_column_id=report.person_column_id,
                user_id=context.trigger_user_id,
            ),
            copy_columns=report.copy_columns,
        )


class ExitBatchService(BatchService):
    """Goods shipped: stock down (floored at 0), product + destination links."""

    flow = "exit"
    direction = StockDirection.OUTBOUND
    not_found_reason = RowReason.CATALOG_NOT_FOUND

    def __init__(self, config: ExitBatchConfig, **services):
        super().__init__(config, **services)

    def exit_target_id(self, item: Item) -> Optional[int]:
        """First item linked in the row's destination relation column."""
        linked = decode_linked_ids(item.column(self.config.target_rel_column_id))
        return linked[0] if linked else None

    def mirror(
        self,
        item: Item,
        catalog_item: Item,
        report_group_id: Optional[str],
        context: TriggerContext,
    ) -> Optional[str]:
        report = self.config.report
        hints = [
            RelationHint(
                catalog_item_id=int(catalog_item.id),
                target_column_id=report.product_link_column_id,
                source_column_id=self.config.product_rel_column_id,
                source_title=DEFAULT_PRODUCT_COLUMN_TITLE,
            )
        ]

        target_id = self.exit_target_id(item)
        if target_id is not None:
            hints.append(RelationHint(
                catalog_item_id=target_id,
                target_column_id=report.target_link_column_id,
                source_column_id=self.config.target_rel_column_id,
            ))

        return self.report_mirror_service.copy(
            item,
            report.board_id,
            report_group_id,
            overrides=report.overrides,
            relation_hints=hints,
            extras=MirrorExtras(
                date_column_id=report.date_column_id,
                person_column_id=report.person_column_id,
                user_id=context.trigger_user_id,
            ),
            copy_columns=report.copy_columns,
        )


def get_entry_batch_service() -> EntryBatchService:
    """Build an EntryBatchService from the current settings."""
    return EntryBatchService(get_settings().entry_config())


def get_exit_batch_service() -> ExitBatchService:
    """Build an ExitBatchService from the current settings."""
    return ExitBatchService(get_settings().exit_config())
