"""
Unit tests for WebhookService and AutoLinkService.
"""

import pytest
from unittest.mock import MagicMock

from exceptions import MondayApiError
from models.batch import BatchResult, DisposalMode, RowOutcome, TriggerContext
from models.webhook import WebhookPayload
from services.auto_link_service import AutoLinkService
from services.webhook_service import WebhookService
from utils.column_codec import link_payload
from tests.factories import ENTRY_BOARD, EXIT_BOARD, cv


# ===================
# FIXTURES
# ===================

def _batch_service(config, flow: str) -> MagicMock:
    service = MagicMock()
    service.config = config
    service.flow = flow
    service.process.return_value = BatchResult.completed(
        "topics", "group_1", [RowOutcome(item_id="1", ok=True, barcode="ABC123", qty=5)]
    )
    return service


@pytest.fixture
def entry_service(entry_config) -> MagicMock:
    return _batch_service(entry_config, "entry")


@pytest.fixture
def exit_service(exit_config) -> MagicMock:
    return _batch_service(exit_config, "exit")


@pytest.fixture
def auto_link() -> MagicMock:
    return MagicMock()


@pytest.fixture
def disposal() -> MagicMock:
    return MagicMock()


@pytest.fixture
def webhook(entry_service, exit_service, auto_link, disposal) -> WebhookService:
    return WebhookService(
        entry_service=entry_service,
        exit_service=exit_service,
        auto_link_service=auto_link,
        disposal_service=disposal,
    )


def _event(**event) -> WebhookPayload:
    return WebhookPayload.model_validate({"event": event})


# ===================
# DISPATCH
# ===================

class TestHandle:
    """Tests for WebhookService.handle()"""

    def test_challenge_echo(self, webhook, entry_service):
        """Should echo the URL verification challenge."""
        result = webhook.handle(WebhookPayload(challenge="abc"))

        assert result == {"challenge": "abc"}
        entry_service.process.assert_not_called()

    def test_unrelated_board_ignored(self, webhook):
        result = webhook.handle(_event(type="change_name", boardId=999, pulseName="tamamla"))

        assert result["ok"] is True
        assert result["ignored"] is True

    def test_entry_rename_runs_batch(self, webhook, entry_service, disposal):
        """Renaming a row to "tamamla" should run its group and remove it."""
        result = webhook.handle(_event(
            type="change_name",
            boardId=int(ENTRY_BOARD),
            groupId="new_group",
            pulseId=555,
            pulseName=" Tamamla",
            userId="42",
        ))

        entry_service.process.assert_called_once_with(
            group_id="new_group",
            context=TriggerContext(trigger_user_id=42),
        )
        disposal.dispose.assert_called_once_with(555, DisposalMode.DELETE)
        assert result["ok"] is True
        assert result["reportGroupId"] == "group_1"
        assert result["diagnostics"][-1]["action"] == "remove_sentinel"

    def test_blocked_batch_keeps_sentinel_removal_to_gate(self, webhook, entry_service, disposal):
        entry_service.process.return_value = BatchResult.blocked_by_gate("topics", 2, [])

        result = webhook.handle(_event(
            type="change_name", boardId=int(ENTRY_BOARD), pulseId=555, pulseName="tamamla"
        ))

        disposal.dispose.assert_not_called()
        assert result["blocked"] is True
        assert result["missingCount"] == 2

    def test_exit_create_sentinel_runs_batch(self, webhook, exit_service, auto_link, disposal):
        """Creating a "tamamla" row should trigger without auto-linking it."""
        webhook.handle(_event(
            type="create_pulse", boardId=int(EXIT_BOARD), itemId=777, pulseName="tamamla"
        ))

        exit_service.process.assert_called_once()
        auto_link.link_product.assert_not_called()
        disposal.dispose.assert_called_once_with(777, DisposalMode.DELETE)

    def test_create_runs_auto_link(self, webhook, exit_service, auto_link, exit_config):
        result = webhook.handle(_event(
            type="create_item", boardId=int(EXIT_BOARD), pulseId=888, pulseName="ABC123"
        ))

        auto_link.link_product.assert_called_once_with(
            888, EXIT_BOARD, "name", "e_product", exit_config.catalog
        )
        exit_service.process.assert_not_called()
        assert result == {"ok": True, "ignored": True, "board": "EXIT", "type": "create_item", "name": "ABC123"}

    def test_rename_to_other_name_ignored(self, webhook, entry_service, auto_link):
        result = webhook.handle(_event(
            type="change_name", boardId=int(ENTRY_BOARD), pulseId=1, pulseName="ABC124"
        ))

        entry_service.process.assert_not_called()
        auto_link.link_product.assert_not_called()
        assert result["board"] == "ENTRY"

    def test_sentinel_removal_failure_recorded(self, webhook, disposal):
        disposal.dispose.side_effect = MondayApiError([{"message": "gone"}])

        result = webhook.handle(_event(
            type="change_name", boardId=int(ENTRY_BOARD), pulseId=555, pulseName="tamamla"
        ))

        assert result["diagnostics"][-1]["ok"] is False
        assert result["diagnostics"][-1]["error"] == "gone"


# ===================
# AUTO-LINK
# ===================

class TestAutoLink:
    """Tests for AutoLinkService.link_product()"""

    @pytest.fixture
    def service(self, boards, catalog_service) -> AutoLinkService:
        return AutoLinkService(board_service=boards, catalog_service=catalog_service)

    def test_links_catalog_item(self, boards, service, catalog_config):
        row = boards.add_item(ENTRY_BOARD, "ABC123")

        result = service.link_product(row.id, ENTRY_BOARD, "name", "product", catalog_config)

        assert result.ok is True
        assert boards.changes[-1]["column_values"] == {"product": link_payload([5001])}

    def test_barcode_from_column(self, boards, service, catalog_config):
        row = boards.add_item(ENTRY_BOARD, "Vida", columns=[cv("notes", "ABC123")])

        result = service.link_product(row.id, ENTRY_BOARD, "notes", "product", catalog_config)

        assert result.ok is True

    def test_skips_non_barcode_and_unknown(self, boards, service, catalog_config):
        """Should do nothing for non-barcode names or barcodes not in the catalog."""
        note = boards.add_item(ENTRY_BOARD, "bir not")
        unknown = boards.add_item(ENTRY_BOARD, "ZZZ999")

        assert service.link_product(note.id, ENTRY_BOARD, "name", "product", catalog_config) is None
        assert service.link_product(unknown.id, ENTRY_BOARD, "name", "product", catalog_config) is None
        assert boards.changes == []

    def test_skips_other_board(self, boards, service, catalog_config):
        row = boards.add_item(EXIT_BOARD, "ABC123")

        assert service.link_product(row.id, ENTRY_BOARD, "name", "product", catalog_config) is None

    def test_no_link_column(self, boards, service, catalog_config):
        row = boards.add_item(ENTRY_BOARD, "ABC123")

        assert service.link_product(row.id, ENTRY_BOARD, "name", None, catalog_config) is None

    def test_errors_are_reported_not_raised(self, boards, service, catalog_config):
        row = boards.add_item(ENTRY_BOARD, "ABC123")
        boards.failures["change_column_values"] = MondayApiError([{"message": "locked"}])

        result = service.link_product(row.id, ENTRY_BOARD, "name", "product", catalog_config)

        assert result.ok is False
        assert result.error == "locked"
