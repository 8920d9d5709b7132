"""
Typed column values.

A ColumnValue from monday.com is decoded into exactly one of these
variants, discriminated by `kind`. See utils/column_codec.py.
"""

from typing import Annotated, Any, Literal, Optional, Union

from pydantic import Field

from models.base import FrozenSchema


class NumberValue(FrozenSchema):
    kind: Literal["number"] = "number"
    number: float


class TextValue(FrozenSchema):
    kind: Literal["text"] = "text"
    text: str


class CheckboxValue(FrozenSchema):
    kind: Literal["checkbox"] = "checkbox"
    checked: bool


class DateValue(FrozenSchema):
    kind: Literal["date"] = "date"
    date: str  # YYYY-MM-DD
    time: Optional[str] = None


class LinkSetValue(FrozenSchema):
    """Linked items of a board relation column."""
    kind: Literal["link_set"] = "link_set"
    item_ids: tuple[int, ...] = ()


class PeopleValue(FrozenSchema):
    kind: Literal["people"] = "people"
    person_ids: tuple[int, ...] = ()


class UnknownValue(FrozenSchema):
    """Anything the codec cannot interpret; never written back."""
    kind: Literal["unknown"] = "unknown"
    raw: Any = None


TypedValue = Annotated[
    Union[
        NumberValue,
        TextValue,
        CheckboxValue,
        DateValue,
        LinkSetValue,
        PeopleValue,
        UnknownValue,
    ],
    Field(discriminator="kind"),
]
