"""
QC gate for entry batches.

Every barcode-named row of an entry batch must have both the "Kontrol"
(QC) and "Sayım" (count) checkboxes ticked. If any row is missing one,
the whole batch is blocked: nothing is posted to stock, the people
responsible are alerted once, and the sentinel row is removed so the
batch is not re-triggered until someone renames a row to "tamamla" again.
"""

from typing import Optional
import structlog

from exceptions import MondayError
from models.batch import BatchResult, SideEffectResult
from models.board import Item
from models.config import EntryBatchConfig
from services.disposal_service import DisposalService, get_disposal_service
from services.notification_service import NotificationService, get_notification_service
from utils.column_codec import decode_checkbox
from utils.text_utils import is_eligible_name, is_sentinel, looks_like_barcode

logger = structlog.get_logger(__name__)


QC_COMMENT_TEXT = "Bu item için “Kontrol” ve/veya “Sayım” işaretlenmemiş. Lütfen tamamlayın."
QC_NOTIFICATION_TEXT = (
    "Toplam {count} itemde eksik kontrol tespit edildi. "
    "İlk örnek için lütfen iteme bakın."
)


class QCGateService:
    """
    All-or-nothing QC/count check of an entry batch.
    """

    def __init__(
        self,
        notification_service: Optional[NotificationService] = None,
        disposal_service: Optional[DisposalService] = None,
    ):
        self.notification_service = notification_service or get_notification_service()
        self.disposal_service = disposal_service or get_disposal_service()

    def find_missing(self, items: list[Item], config: EntryBatchConfig) -> list[Item]:
        """
        Rows that fail the gate.

        Only barcode-named, non-sentinel rows are checked. A checkbox whose
        column is not configured reads as unchecked, so the row fails.
        """
        missing = []
        for item in items:
            if not is_eligible_name(item.name) or not looks_like_barcode(item.name):
                continue

            qc_ok = decode_checkbox(item.column(config.qc_checkbox_column_id))
            count_ok = decode_checkbox(item.column(config.count_checkbox_column_id))
            logger.debug("qc_row_checked", item_id=item.id, qc=qc_ok, count=count_ok)

            if not (qc_ok and count_ok):
                missing.append(item)

        return missing

    def enforce(
        self,
        items: list[Item],
        config: EntryBatchConfig,
        group_id: Optional[str] = None,
    ) -> Optional[BatchResult]:
        """
        Run the gate over a loaded batch.

        Args:
            items: Every item of the batch group, sentinel included
            config: Entry configuration
            group_id: Group the batch was loaded from

        Returns:
            None if the batch may proceed, otherwise a blocked BatchResult
        """
        missing = self.find_missing(items, config)
        if not missing:
            return None

        diagnostics: list[SideEffectResult] = []

        # 1) Comment on each failing row
        for item in missing:
            diagnostics.append(self.notification_service.post_comment(item.id, QC_COMMENT_TEXT))

        # 2) One notification for the whole batch, pointing at the first row
        diagnostics.extend(self.notification_service.notify_users(
            config.alert_user_ids,
            missing[0].id,
            QC_NOTIFICATION_TEXT.format(count=len(missing)),
        ))

        # 3) Optional owner assignment on each failing row
        for item in missing:
            result = self.notification_service.assign_people(
                item.id,
                config.board_id,
                config.alert_people_column_id,
                config.alert_user_ids,
            )
            if result is not None:
                diagnostics.append(result)

        # 4) Remove the trigger row
        sentinel = next((i for i in items if is_sentinel(i.name)), None)
        if sentinel is not None:
            diagnostics.append(self._remove_sentinel(sentinel, config))

        logger.warning(
            "entry_batch_blocked",
            group_id=group_id,
            missing_count=len(missing),
            missing_item_ids=[i.id for i in missing]
        )

        return BatchResult.blocked_by_gate(group_id, len(missing), diagnostics)

    def _remove_sentinel(self, sentinel: Item, config: EntryBatchConfig) -> SideEffectResult:
        try:
            self.disposal_service.dispose(sentinel.id, config.complete_delete_mode)
            logger.info(
                "sentinel_removed",
                item_id=sentinel.id,
                mode=config.complete_delete_mode.value
            )
            return SideEffectResult.success("remove_sentinel", sentinel.id)
        except MondayError as e:
            logger.warning("sentinel_remove_failed", item_id=sentinel.id, error=e.message)
            return SideEffectResult.warned("remove_sentinel", sentinel.id, e)


# Singleton instance for convenience
_qc_gate_service: Optional[QCGateService] = None


def get_qc_gate_service() -> QCGateService:
    """Get or create QCGateService instance."""
    global _qc_gate_service
    if _qc_gate_service is None:
        _qc_gate_service = QCGateService()
    return _qc_gate_service
