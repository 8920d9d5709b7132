"""
Webhook service: route monday.com board events.

Events from the entry and exit boards are handled; everything else is
acknowledged and ignored. On either board:
- a created row gets its catalog product linked (best effort)
- a row created or renamed as "tamamla" runs the batch of its group,
  then the "tamamla" row itself is removed
"""

from typing import Any, Optional
import structlog

from exceptions import MondayError
from models.batch import BatchResult, DisposalMode, SideEffectResult, TriggerContext
from models.webhook import WebhookEvent, WebhookPayload
from services.auto_link_service import AutoLinkService, get_auto_link_service
from services.batch_service import (
    BatchService,
    EntryBatchService,
    ExitBatchService,
    get_entry_batch_service,
    get_exit_batch_service,
)
from services.disposal_service import DisposalService, get_disposal_service
from utils.text_utils import is_sentinel

logger = structlog.get_logger(__name__)


def serialize_result(result: BatchResult) -> dict[str, Any]:
    """Wire format of a batch result (camelCase, "from"/"to", no nulls)."""
    return result.model_dump(mode="json", by_alias=True, exclude_none=True)


class WebhookService:
    """
    Dispatches webhook events to the entry/exit flows.
    """

    def __init__(
        self,
        entry_service: Optional[EntryBatchService] = None,
        exit_service: Optional[ExitBatchService] = None,
        auto_link_service: Optional[AutoLinkService] = None,
        disposal_service: Optional[DisposalService] = None,
    ):
        self.entry_service = entry_service or get_entry_batch_service()
        self.exit_service = exit_service or get_exit_batch_service()
        self.auto_link_service = auto_link_service or get_auto_link_service()
        self.disposal_service = disposal_service or get_disposal_service()

    def handle(self, payload: WebhookPayload) -> dict[str, Any]:
        """
        Handle one webhook call.

        Returns:
            The challenge echo, a serialized BatchResult, or an
            {"ok": True, "ignored": True, ...} acknowledgement
        """
        if payload.challenge:
            return {"challenge": payload.challenge}

        event = payload.event
        logger.info(
            "webhook_received",
            type=event.type,
            board_id=event.board_id,
            group_id=event.group_id,
            item_id=event.target_item_id
        )

        entry_config = self.entry_service.config
        if _same_board(event.board_id, entry_config.board_id):
            return self._handle_flow(
                event,
                self.entry_service,
                entry_config.product_link_column_id,
                "ENTRY",
            )

        exit_config = self.exit_service.config
        if _same_board(event.board_id, exit_config.board_id):
            return self._handle_flow(
                event,
                self.exit_service,
                exit_config.product_rel_column_id,
                "EXIT",
            )

        return {"ok": True, "ignored": True, "type": event.type, "name": event.pulse_name}

    def _handle_flow(
        self,
        event: WebhookEvent,
        service: BatchService,
        link_column_id: Optional[str],
        label: str,
    ) -> dict[str, Any]:
        config = service.config
        item_id = event.target_item_id

        if event.is_create and item_id and not is_sentinel(event.pulse_name):
            self.auto_link_service.link_product(
                item_id,
                config.board_id,
                config.barcode_source,
                link_column_id,
                config.catalog,
            )

        if not ((event.is_create or event.is_rename) and is_sentinel(event.pulse_name)):
            return {"ok": True, "ignored": True, "board": label, "type": event.type, "name": event.pulse_name}

        logger.info("batch_triggered", flow=service.flow, group_id=event.group_id, item_id=item_id)
        result = service.process(
            group_id=event.group_id or None,
            context=TriggerContext(trigger_user_id=event.user_id),
        )

        # A blocked batch has already removed its trigger row
        if not result.blocked and item_id:
            result.diagnostics.append(
                self._remove_sentinel(item_id, config.complete_delete_mode)
            )

        return serialize_result(result)

    def _remove_sentinel(self, item_id: int, mode: DisposalMode) -> SideEffectResult:
        try:
            self.disposal_service.dispose(item_id, mode)
            return SideEffectResult.success("remove_sentinel", str(item_id))
        except MondayError as e:
            logger.warning("sentinel_remove_failed", item_id=item_id, error=e.message)
            return SideEffectResult.warned("remove_sentinel", str(item_id), e)


def _same_board(event_board_id: Optional[int], configured: Optional[str]) -> bool:
    if not event_board_id or not configured:
        return False
    return str(event_board_id) == str(configured).strip()


def get_webhook_service() -> WebhookService:
    """Build a WebhookService from the current settings."""
    return WebhookService()
