"""
Column value codec.

Reads dual-encoded monday.com column values (display text + JSON value)
into typed values, and turns values back into payloads accepted by
create_item / change_multiple_column_values.

Reads never raise: malformed input resolves to 0, "" or False.
Writes return None when no valid payload can be produced; callers skip
the column in that case.
"""

import json
import math
import re
from typing import Any, Iterable, Optional

from models.board import ColumnKind, ColumnValue
from models.column_value import (
    CheckboxValue,
    DateValue,
    LinkSetValue,
    NumberValue,
    PeopleValue,
    TextValue,
    TypedValue,
    UnknownValue,
)


CHECKED_TOKENS = frozenset({"v", "true", "evet", "checked"})

_LEADING_NUMBER = re.compile(r"^[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?")


# ===================
# PRIMITIVES
# ===================

def parse_json(raw: Any) -> Any:
    """Parse a JSON string; anything unparseable is returned unchanged."""
    if not isinstance(raw, str):
        return raw
    try:
        return json.loads(raw)
    except ValueError:
        return raw


def parse_number(raw: Any) -> Optional[float]:
    """
    Parse the leading number of a value.

    Accepts a comma as decimal separator and ignores trailing text:
    "12,5" → 12.5, "7 adet" → 7.0, "abc" → None.
    """
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, (int, float)):
        return float(raw) if math.isfinite(raw) else None

    text = str(raw).strip().replace(",", ".", 1)
    match = _LEADING_NUMBER.match(text)
    if not match:
        return None
    number = float(match.group(0))
    return number if math.isfinite(number) else None


def format_number(number: float) -> str:
    """Render a number the way the numbers column stores it (15, not 15.0)."""
    if float(number).is_integer():
        return str(int(number))
    return repr(float(number))


def _structured(cv: Optional[ColumnValue]) -> Any:
    if cv is None or not cv.has_structured:
        return None
    return parse_json(cv.value)


# ===================
# DECODING
# ===================

def _cell_number(cv: ColumnValue) -> Optional[float]:
    payload = _structured(cv)
    if payload is not None:
        if isinstance(payload, dict):
            raw = next(
                (payload[k] for k in ("number", "value", "text") if payload.get(k) is not None),
                None,
            )
        else:
            raw = payload
        number = parse_number(raw)
        if number is not None:
            return number

    return parse_number(cv.clean_text)


def decode_number(cv: Optional[ColumnValue]) -> float:
    """Numeric reading of a column; 0 when absent or unparseable."""
    if cv is None:
        return 0.0

    number = _cell_number(cv)
    return number if number is not None else 0.0


def decode_text(cv: Optional[ColumnValue]) -> str:
    """Text reading of a column; "" when absent."""
    if cv is None:
        return ""

    payload = _structured(cv)
    if isinstance(payload, str) and payload.strip():
        return payload.strip()
    if isinstance(payload, (int, float)) and not isinstance(payload, bool):
        return format_number(payload)
    if isinstance(payload, dict):
        for key in ("display_value", "text", "value"):
            field = payload.get(key)
            if field not in (None, "") and not isinstance(field, (dict, list)):
                return str(field).strip()

    return cv.clean_text


def decode_checkbox(cv: Optional[ColumnValue]) -> bool:
    """Checkbox reading; anything that is not clearly checked is False."""
    if cv is None:
        return False

    payload = _structured(cv)
    if isinstance(payload, dict):
        checked = payload.get("checked")
        if isinstance(checked, bool):
            return checked
        if isinstance(checked, str):
            return checked.strip().lower() == "true"

    return cv.clean_text.lower() in CHECKED_TOKENS


def decode_linked_ids(cv: Optional[ColumnValue]) -> list[int]:
    """Item ids linked by a board relation column."""
    payload = _structured(cv)
    if not isinstance(payload, dict):
        return []

    entries = payload.get("linkedPulseIds")
    if not isinstance(entries, list):
        return []

    ids = []
    for entry in entries:
        raw = entry.get("linkedPulseId") if isinstance(entry, dict) else None
        number = parse_number(raw)
        if number is not None:
            ids.append(int(number))
    return ids


def decode_people(cv: Optional[ColumnValue]) -> list[int]:
    """Person ids assigned in a people column."""
    payload = _structured(cv)
    if not isinstance(payload, dict):
        return []

    ids = []
    for entry in payload.get("personsAndTeams") or []:
        if isinstance(entry, dict) and entry.get("kind", "person") == "person":
            number = parse_number(entry.get("id"))
            if number is not None:
                ids.append(int(number))
    return ids


def decode_date(cv: Optional[ColumnValue]) -> Optional[DateValue]:
    payload = _structured(cv)
    if isinstance(payload, dict) and payload.get("date"):
        return DateValue(date=str(payload["date"]), time=payload.get("time"))
    text = cv.clean_text if cv else ""
    if text:
        return DateValue(date=text[:10])
    return None


def decode(cv: Optional[ColumnValue], kind: ColumnKind) -> TypedValue:
    """
    Decode a column value according to the kind of column it is read as.

    Returns:
        One TypedValue variant; UnknownValue for unsupported kinds
    """
    if kind is ColumnKind.NUMBER:
        return NumberValue(number=decode_number(cv))
    elif kind is ColumnKind.CHECKBOX:
        return CheckboxValue(checked=decode_checkbox(cv))
    elif kind is ColumnKind.BOARD_RELATION:
        return LinkSetValue(item_ids=tuple(decode_linked_ids(cv)))
    elif kind is ColumnKind.PEOPLE:
        return PeopleValue(person_ids=tuple(decode_people(cv)))
    elif kind is ColumnKind.DATE:
        return decode_date(cv) or UnknownValue()
    elif kind in (
        ColumnKind.TEXT,
        ColumnKind.LONG_TEXT,
        ColumnKind.STATUS,
        ColumnKind.DROPDOWN,
        ColumnKind.OTHER,
    ):
        return TextValue(text=decode_text(cv))
    else:
        return UnknownValue(raw=cv.value if cv else None)


# ===================
# ENCODING
# ===================

def link_payload(item_ids: Iterable[Any]) -> dict:
    """Board relation payload linking the given items."""
    return {"linkedPulseIds": [{"linkedPulseId": int(i)} for i in item_ids]}


def people_payload(person_ids: Iterable[Any]) -> dict:
    return {"personsAndTeams": [{"id": int(i), "kind": "person"} for i in person_ids]}


def date_payload(date_iso: str) -> dict:
    """Date column payload from an ISO date or datetime string."""
    return {"date": date_iso[:10]}


def encode(value: TypedValue, kind: ColumnKind) -> Optional[Any]:
    """
    Turn a typed value into a writable payload for a column of `kind`.

    Returns:
        Payload, or None when the value cannot be written to that kind
    """
    if kind is ColumnKind.UNSUPPORTED or isinstance(value, UnknownValue):
        return None

    if kind is ColumnKind.NUMBER:
        if isinstance(value, NumberValue):
            return format_number(value.number)
        if isinstance(value, TextValue):
            number = parse_number(value.text)
            return format_number(number) if number is not None else None
        return None

    if kind is ColumnKind.BOARD_RELATION:
        if isinstance(value, LinkSetValue) and value.item_ids:
            return link_payload(value.item_ids)
        return None

    if kind is ColumnKind.PEOPLE:
        if isinstance(value, PeopleValue) and value.person_ids:
            return people_payload(value.person_ids)
        return None

    if kind is ColumnKind.CHECKBOX:
        if isinstance(value, CheckboxValue):
            return {"checked": "true"} if value.checked else None
        if isinstance(value, TextValue):
            return value.text or None
        return None

    if kind is ColumnKind.DATE:
        if isinstance(value, DateValue):
            payload = {"date": value.date}
            if value.time:
                payload["time"] = value.time
            return payload
        if isinstance(value, TextValue):
            return value.text or None
        return None

    # Text-like kinds: TEXT, LONG_TEXT, STATUS, DROPDOWN, OTHER
    if isinstance(value, TextValue):
        return value.text or None
    if isinstance(value, NumberValue):
        return format_number(value.number)
    return None


def to_write_payload(cv: Optional[ColumnValue], kind: ColumnKind) -> Optional[Any]:
    """
    Payload for copying a source value into a column of `kind`.

    A numbers target only takes a value that parses as a number. Any other
    structured source value is passed through as-is (it already is in the
    platform's format). Otherwise the display text is encoded for the
    target kind; relation columns cannot be written from text.
    """
    if cv is None or kind is ColumnKind.UNSUPPORTED:
        return None

    if kind is ColumnKind.NUMBER:
        number = _cell_number(cv)
        return format_number(number) if number is not None else None

    if cv.has_structured:
        return parse_json(cv.value)

    text = cv.clean_text
    if not text:
        return None
    return encode(TextValue(text=text), kind)
