"""
Business logic services.

Each service handles one step of the batch flow.
"""

from services.board_service import BoardService, get_board_service
from services.catalog_service import CatalogService, get_catalog_service
from services.stock_service import StockService, get_stock_service, next_stock
from services.disposal_service import DisposalService, get_disposal_service
from services.notification_service import NotificationService, get_notification_service
from services.qc_gate_service import QCGateService, get_qc_gate_service
from services.report_mirror_service import (
    ReportMirrorService,
    MirrorPlan,
    get_report_mirror_service,
)
from services.batch_service import (
    BatchService,
    EntryBatchService,
    ExitBatchService,
    get_entry_batch_service,
    get_exit_batch_service,
)
from services.auto_link_service import AutoLinkService, get_auto_link_service
from services.webhook_service import WebhookService, get_webhook_service

__all__ = [
    "BoardService",
    "get_board_service",
    "CatalogService",
    "get_catalog_service",
    "StockService",
    "get_stock_service",
    "next_stock",
    "DisposalService",
    "get_disposal_service",
    "NotificationService",
    "get_notification_service",
    "QCGateService",
    "get_qc_gate_service",
    "ReportMirrorService",
    "MirrorPlan",
    "get_report_mirror_service",
    "BatchService",
    "EntryBatchService",
    "ExitBatchService",
    "get_entry_batch_service",
    "get_exit_batch_service",
    "AutoLinkService",
    "get_auto_link_service",
    "WebhookService",
    "get_webhook_service",
]
