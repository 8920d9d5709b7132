"""
Board, column and item schemas for monday.com data.

Column types arrive as free-form strings from the API. They are folded
into the closed ColumnKind enumeration here so the rest of the code can
branch on an enum instead of string literals.
"""

import json
from enum import Enum
from typing import Any, Optional

from pydantic import Field, field_validator

from models.base import FrozenSchema


class ColumnKind(str, Enum):
    """Column kinds the service knows how to read and write."""

    TEXT = "text"
    LONG_TEXT = "long_text"
    NUMBER = "numbers"
    STATUS = "status"
    DROPDOWN = "dropdown"
    DATE = "date"
    CHECKBOX = "checkbox"
    BOARD_RELATION = "board_relation"
    PEOPLE = "people"
    UNSUPPORTED = "unsupported"  # Never copied (mirror, formula, file, ...)
    OTHER = "other"              # Unknown type, copied as text

    @classmethod
    def from_api_type(cls, raw_type: Optional[str]) -> "ColumnKind":
        """
        Map a monday.com column type (or a configured type hint) to a kind.

        Both current and legacy type names are accepted:
        - "numbers" / "numeric"
        - "board_relation" / "board-relation"
        - "status" / "color"
        """
        key = str(raw_type or "").strip().lower()
        if key in API_TYPE_KINDS:
            return API_TYPE_KINDS[key]
        if key in DENIED_API_TYPES:
            return cls.UNSUPPORTED
        return cls.OTHER

    @property
    def is_creatable(self) -> bool:
        """Whether the value can be set in the create_item call itself."""
        return self in CREATABLE_KINDS

    @property
    def is_copyable(self) -> bool:
        """Whether values may be mirrored into a column of this kind."""
        return self is not ColumnKind.UNSUPPORTED


API_TYPE_KINDS: dict[str, ColumnKind] = {
    "name": ColumnKind.TEXT,
    "text": ColumnKind.TEXT,
    "short_text": ColumnKind.TEXT,
    "long_text": ColumnKind.LONG_TEXT,
    "long-text": ColumnKind.LONG_TEXT,
    "numbers": ColumnKind.NUMBER,
    "numeric": ColumnKind.NUMBER,
    "status": ColumnKind.STATUS,
    "color": ColumnKind.STATUS,
    "dropdown": ColumnKind.DROPDOWN,
    "date": ColumnKind.DATE,
    "checkbox": ColumnKind.CHECKBOX,
    "boolean": ColumnKind.CHECKBOX,
    "board_relation": ColumnKind.BOARD_RELATION,
    "board-relation": ColumnKind.BOARD_RELATION,
    "board_relation_column": ColumnKind.BOARD_RELATION,
    "people": ColumnKind.PEOPLE,
    "multiple-person": ColumnKind.PEOPLE,
}

DENIED_API_TYPES = frozenset({
    "mirror",
    "lookup",
    "formula",
    "auto",
    "auto_number",
    "creation_log",
    "last_updated",
    "file",
    "subtasks",
    "subitems",
})

CREATABLE_KINDS = frozenset({
    ColumnKind.TEXT,
    ColumnKind.LONG_TEXT,
    ColumnKind.NUMBER,
    ColumnKind.STATUS,
    ColumnKind.DROPDOWN,
    ColumnKind.DATE,
    ColumnKind.CHECKBOX,
})


def _as_id(value: Any) -> Optional[str]:
    if value is None or value == "":
        return None
    return str(value)


class Column(FrozenSchema):
    """Column definition of a board."""

    id: str
    title: str = ""
    type: str = ""

    @property
    def kind(self) -> ColumnKind:
        return ColumnKind.from_api_type(self.type)


class Group(FrozenSchema):
    """Group (section) of a board."""

    id: str
    title: str = ""


class ColumnValue(FrozenSchema):
    """
    Dual-encoded column value.

    text: display rendering produced by monday.com
    value: JSON string with the structured payload (may be absent)
    """

    id: str
    text: Optional[str] = None
    value: Optional[str] = None

    @field_validator("value", mode="before")
    @classmethod
    def serialize_value(cls, v: Any) -> Optional[str]:
        """Accept already-decoded payloads and store them as JSON text."""
        if v is None or isinstance(v, str):
            return v
        return json.dumps(v)

    @property
    def has_structured(self) -> bool:
        return isinstance(self.value, str) and self.value.strip() != ""

    @property
    def clean_text(self) -> str:
        return (self.text or "").strip()


class Item(FrozenSchema):
    """A board item (row)."""

    id: str
    name: str = ""
    board_id: Optional[str] = None
    group_id: Optional[str] = None
    column_values: list[ColumnValue] = Field(default_factory=list)

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v: Any) -> str:
        return str(v)

    @classmethod
    def from_api(cls, data: dict, board_id: Any = None, group_id: Any = None) -> "Item":
        """Build an Item from a GraphQL `items` node."""
        board = data.get("board") or {}
        group = data.get("group") or {}
        return cls(
            id=data["id"],
            name=data.get("name") or "",
            board_id=_as_id(board.get("id", board_id)),
            group_id=_as_id(group.get("id", group_id)),
            column_values=[
                ColumnValue(**cv) for cv in (data.get("column_values") or [])
            ],
        )

    @property
    def clean_name(self) -> str:
        return self.name.strip()

    def column(self, column_id: Optional[str]) -> Optional[ColumnValue]:
        """Get the value of a column, or None if the item has no such column."""
        if not column_id:
            return None
        for cv in self.column_values:
            if cv.id == column_id:
                return cv
        return None
