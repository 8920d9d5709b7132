"""
Board service: typed monday.com calls.

Wraps the raw GraphQL client with one method per query or mutation the
application needs. Errors from the client (MondayTransportError,
MondayApiError) propagate unchanged.
"""

import json
from typing import Any, Iterator, Optional
import structlog

from config import get_monday_client
from integrations.monday import MondayClient
from models.board import Column, Group, Item

logger = structlog.get_logger(__name__)


DEFAULT_PAGE_SIZE = 200

ITEM_FIELDS = "id name column_values { id text value }"


def _id_list(value: Any) -> list[str]:
    return [str(value)]


class BoardService:
    """
    monday.com board operations.

    Board state is read at call time; nothing is cached between calls.
    """

    def __init__(self, client: Optional[MondayClient] = None):
        self.client = client or get_monday_client()

    # ===================
    # ACCOUNT / DISCOVERY
    # ===================

    def get_me(self) -> dict:
        """Get the user the API token belongs to."""
        data = self.client.execute("query { me { id name email } }")
        return data.get("me") or {}

    def list_workspaces(self) -> list[dict]:
        data = self.client.execute(
            "query { workspaces { id name kind } }",
            use_api_version=False
        )
        return data.get("workspaces") or []

    def list_boards(
        self,
        search: Optional[str] = None,
        workspace_id: Optional[str] = None,
        limit: int = 500,
    ) -> list[dict]:
        """
        List boards visible to the token.

        Args:
            search: Case-insensitive substring filter on the board name
            workspace_id: Only boards of this workspace
            limit: Maximum boards to fetch
        """
        query = """
            query($limit: Int, $workspaces: [ID]) {
                boards(limit: $limit, workspace_ids: $workspaces) {
                    id name state board_kind workspace { id name }
                }
            }
        """
        variables: dict[str, Any] = {"limit": limit}
        if workspace_id:
            variables["workspaces"] = _id_list(workspace_id)

        data = self.client.execute(query, variables, use_api_version=False)
        boards = data.get("boards") or []

        if workspace_id:
            boards = [
                b for b in boards
                if str((b.get("workspace") or {}).get("id")) == str(workspace_id)
            ]
        if search:
            needle = search.strip().lower()
            boards = [b for b in boards if needle in str(b.get("name", "")).lower()]

        return boards

    def get_board_groups(self, board_id: Any) -> list[Group]:
        query = """
            query($boardId: [ID!]) {
                boards(ids: $boardId) { id groups { id title } }
            }
        """
        data = self.client.execute(query, {"boardId": _id_list(board_id)})
        boards = data.get("boards") or []
        if not boards:
            return []
        return [Group(**g) for g in boards[0].get("groups") or []]

    def get_board_columns(self, board_id: Any) -> list[Column]:
        """Get the column definitions of a board (empty if board not found)."""
        query = """
            query($boardId: [ID!]) {
                boards(ids: $boardId) { id columns { id title type } }
            }
        """
        data = self.client.execute(
            query,
            {"boardId": _id_list(board_id)},
            use_api_version=False
        )
        boards = data.get("boards") or []
        if not boards:
            return []
        return [Column(**c) for c in boards[0].get("columns") or []]

    # ===================
    # ITEM READS
    # ===================

    def list_group_items(
        self,
        board_id: Any,
        group_id: str,
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> list[Item]:
        """
        Get every item of a group with its column values.

        Follows the items_page cursor until exhausted.
        """
        first_query = f"""
            query($boardId: [ID!], $groupId: [String], $limit: Int) {{
                boards(ids: $boardId) {{
                    groups(ids: $groupId) {{
                        id
                        items_page(limit: $limit) {{ cursor items {{ {ITEM_FIELDS} }} }}
                    }}
                }}
            }}
        """
        next_query = f"""
            query($cursor: String!, $limit: Int) {{
                next_items_page(cursor: $cursor, limit: $limit) {{
                    cursor items {{ {ITEM_FIELDS} }}
                }}
            }}
        """

        data = self.client.execute(
            first_query,
            {"boardId": _id_list(board_id), "groupId": [group_id], "limit": page_size}
        )
        boards = data.get("boards") or []
        groups = (boards[0].get("groups") or []) if boards else []
        page = (groups[0].get("items_page") if groups else None) or {}

        items: list[Item] = []
        while True:
            items.extend(
                Item.from_api(raw, board_id=board_id, group_id=group_id)
                for raw in page.get("items") or []
            )
            cursor = page.get("cursor")
            if not cursor:
                break
            data = self.client.execute(next_query, {"cursor": cursor, "limit": page_size})
            page = data.get("next_items_page") or {}

        logger.info(
            "group_items_loaded",
            board_id=str(board_id),
            group_id=group_id,
            count=len(items)
        )
        return items

    def iter_board_pages(
        self,
        board_id: Any,
        page_size: int = DEFAULT_PAGE_SIZE,
        max_pages: Optional[int] = None,
        with_columns: bool = True,
    ) -> Iterator[list[Item]]:
        """
        Yield a board's items one page at a time.

        Stops when the cursor is exhausted or after max_pages pages.
        """
        fields = ITEM_FIELDS if with_columns else "id name"
        query = f"""
            query($boardId: [ID!], $limit: Int, $cursor: String) {{
                boards(ids: $boardId) {{
                    id
                    items_page(limit: $limit, cursor: $cursor) {{ cursor items {{ {fields} }} }}
                }}
            }}
        """

        cursor = None
        pages = 0
        while max_pages is None or pages < max_pages:
            data = self.client.execute(
                query,
                {"boardId": _id_list(board_id), "limit": page_size, "cursor": cursor},
                use_api_version=False
            )
            boards = data.get("boards") or []
            page = (boards[0].get("items_page") if boards else None) or {}
            yield [Item.from_api(raw, board_id=board_id) for raw in page.get("items") or []]

            pages += 1
            cursor = page.get("cursor")
            if not cursor:
                return

    def get_item(self, item_id: Any) -> Optional[Item]:
        """Get one item with its board, group and column values."""
        query = f"""
            query($ids: [ID!]) {{
                items(ids: $ids) {{ {ITEM_FIELDS} board {{ id }} group {{ id title }} }}
            }}
        """
        data = self.client.execute(query, {"ids": _id_list(item_id)}, use_api_version=False)
        items = data.get("items") or []
        return Item.from_api(items[0]) if items else None

    def get_item_columns_with_titles(self, item_id: Any) -> Optional[dict]:
        """
        Describe an item's columns with their titles and types.

        Used by the setup screens to show what a row looks like.
        """
        item = self.get_item(item_id)
        if item is None:
            return None

        meta = {c.id: c for c in self.get_board_columns(item.board_id)} if item.board_id else {}
        columns = []
        for cv in item.column_values:
            column = meta.get(cv.id)
            columns.append({
                "id": cv.id,
                "title": column.title if column else "(?)",
                "type": column.type if column else "(?)",
                "text": cv.clean_text,
                "has_value": cv.has_structured,
                "value": cv.value,
            })

        return {
            "item": {
                "id": item.id,
                "name": item.name,
                "board_id": item.board_id,
                "group_id": item.group_id,
            },
            "columns": columns,
        }

    # ===================
    # WRITES
    # ===================

    def create_item(
        self,
        board_id: Any,
        group_id: Optional[str],
        name: str,
        column_values: Optional[dict[str, Any]] = None,
    ) -> Optional[str]:
        """
        Create an item.

        Returns:
            New item id, or None if the API returned no id
        """
        query = """
            mutation($boardId: ID!, $groupId: String, $name: String!, $cols: JSON) {
                create_item(board_id: $boardId, group_id: $groupId, item_name: $name, column_values: $cols) { id }
            }
        """
        variables = {
            "boardId": str(board_id),
            "groupId": group_id or None,
            "name": name,
            "cols": json.dumps(column_values) if column_values else None,
        }
        data = self.client.execute(query, variables, use_api_version=False)
        new_id = (data.get("create_item") or {}).get("id")

        logger.info(
            "item_created",
            board_id=str(board_id),
            group_id=group_id,
            item_id=new_id,
            columns=list((column_values or {}).keys())
        )
        return str(new_id) if new_id else None

    def change_column_values(
        self,
        item_id: Any,
        board_id: Any,
        column_values: dict[str, Any],
        use_api_version: bool = False,
    ) -> None:
        """Write several column values of one item in a single mutation."""
        query = """
            mutation($itemId: ID!, $boardId: ID!, $cols: JSON!) {
                change_multiple_column_values(item_id: $itemId, board_id: $boardId, column_values: $cols) { id }
            }
        """
        self.client.execute(
            query,
            {"itemId": str(item_id), "boardId": str(board_id), "cols": json.dumps(column_values)},
            use_api_version=use_api_version
        )
        logger.debug(
            "column_values_changed",
            item_id=str(item_id),
            columns=list(column_values.keys())
        )

    def create_group(self, board_id: Any, name: str) -> Optional[str]:
        query = """
            mutation($boardId: ID!, $name: String!) {
                create_group(board_id: $boardId, group_name: $name) { id }
            }
        """
        data = self.client.execute(query, {"boardId": str(board_id), "name": name})
        group_id = (data.get("create_group") or {}).get("id")
        logger.info("group_created", board_id=str(board_id), group_id=group_id, name=name)
        return group_id

    def delete_item(self, item_id: Any) -> None:
        self.client.execute(
            "mutation($id: ID!) { delete_item(item_id: $id) { id } }",
            {"id": str(item_id)},
            use_api_version=False
        )
        logger.info("item_deleted", item_id=str(item_id))

    def archive_item(self, item_id: Any) -> None:
        self.client.execute(
            "mutation($id: ID!) { archive_item(item_id: $id) { id } }",
            {"id": str(item_id)},
            use_api_version=False
        )
        logger.info("item_archived", item_id=str(item_id))

    def create_update(self, item_id: Any, body: str) -> Optional[str]:
        """Post an update (comment) on an item."""
        query = """
            mutation($id: ID!, $body: String!) {
                create_update(item_id: $id, body: $body) { id }
            }
        """
        data = self.client.execute(query, {"id": str(item_id), "body": body}, use_api_version=False)
        update_id = (data.get("create_update") or {}).get("id")
        return str(update_id) if update_id else None

    def create_notification(
        self,
        user_id: Any,
        target_id: Any,
        text: str,
        target_type: str = "Project",
    ) -> None:
        """
        Send a bell notification to a user.

        Args:
            target_type: "Project" for an item, "Post" for an update
        """
        query = f"""
            mutation($userId: ID!, $targetId: ID!, $text: String!) {{
                create_notification(user_id: $userId, target_id: $targetId, text: $text, target_type: {target_type}) {{ id }}
            }}
        """
        self.client.execute(
            query,
            {"userId": str(user_id), "targetId": str(target_id), "text": text},
            use_api_version=False
        )


# Singleton instance for convenience
_board_service: Optional[BoardService] = None


def get_board_service() -> BoardService:
    """Get or create BoardService instance."""
    global _board_service
    if _board_service is None:
        _board_service = BoardService()
    return _board_service
