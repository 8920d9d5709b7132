"""
Notification service: best-effort messages to people.

Comments, bell notifications and people assignments are side channels:
a failure is logged and reported as a SideEffectResult, never raised.
"""

from typing import Any, Iterable, Optional
import structlog

from exceptions import MondayError
from models.batch import SideEffectResult
from services.board_service import BoardService, get_board_service
from utils.column_codec import people_payload

logger = structlog.get_logger(__name__)


class NotificationService:
    """Best-effort comments, notifications and assignments."""

    def __init__(self, board_service: Optional[BoardService] = None):
        self.board_service = board_service or get_board_service()

    def post_comment(self, item_id: Any, body: str) -> SideEffectResult:
        """Post an update on an item."""
        try:
            self.board_service.create_update(item_id, body)
            return SideEffectResult.success("comment", str(item_id))
        except MondayError as e:
            logger.warning("comment_failed", item_id=str(item_id), error=e.message)
            return SideEffectResult.warned("comment", str(item_id), e)

    def notify_users(
        self,
        user_ids: Iterable[int],
        target_item_id: Any,
        text: str,
    ) -> list[SideEffectResult]:
        """Send one notification per user, all pointing at the same item."""
        results = []
        for user_id in user_ids:
            try:
                self.board_service.create_notification(user_id, target_item_id, text)
                results.append(SideEffectResult.success("notify", str(user_id)))
            except MondayError as e:
                logger.warning("notification_failed", user_id=user_id, error=e.message)
                results.append(SideEffectResult.warned("notify", str(user_id), e))

        if results:
            logger.info(
                "users_notified",
                target_item_id=str(target_item_id),
                sent=sum(1 for r in results if r.ok),
                failed=sum(1 for r in results if not r.ok)
            )
        return results

    def assign_people(
        self,
        item_id: Any,
        board_id: Any,
        column_id: Optional[str],
        user_ids: Iterable[int],
    ) -> Optional[SideEffectResult]:
        """
        Assign users to a people column.

        Returns:
            None when there is nothing to do (no column or no users)
        """
        user_ids = list(user_ids)
        if not column_id or not user_ids:
            return None

        try:
            self.board_service.change_column_values(
                item_id,
                board_id,
                {column_id: people_payload(user_ids)}
            )
            return SideEffectResult.success("assign_people", str(item_id))
        except MondayError as e:
            logger.warning("assign_people_failed", item_id=str(item_id), error=e.message)
            return SideEffectResult.warned("assign_people", str(item_id), e)


# Singleton instance for convenience
_notification_service: Optional[NotificationService] = None


def get_notification_service() -> NotificationService:
    """Get or create NotificationService instance."""
    global _notification_service
    if _notification_service is None:
        _notification_service = NotificationService()
    return _notification_service
