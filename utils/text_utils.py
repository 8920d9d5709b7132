"""
Text utilities for item names and column titles.

Titles and names on the boards are Turkish, so comparisons must keep
non-ASCII letters (ü, ş, ı, ...) intact.
"""

import re
import unicodedata
from typing import Optional

from models.batch import SENTINEL_NAME


BARCODE_PATTERN = re.compile(r"^[A-Za-z0-9._-]{3,}$")
_WHITESPACE = re.compile(r"\s+")


def normalize_title(title: Optional[str]) -> str:
    """
    Normalize a column title for matching across boards.

    - "Son Alış  Fiyatı" → "son alış fiyatı"
    - "Kontrol Edildi mi?" → "kontrol edildi mi"
    - "Ürün (Katalog)" → "ürün katalog"

    Args:
        title: Column title as shown on the board

    Returns:
        Lowercase title with whitespace collapsed and anything that is
        not a letter, digit or space removed
    """
    if not title:
        return ""

    text = unicodedata.normalize("NFC", str(title)).lower()
    text = _WHITESPACE.sub(" ", text)

    # Keep letters (L*), digits (N*) and spaces
    kept = "".join(
        c for c in text
        if c == " " or unicodedata.category(c)[0] in ("L", "N")
    )
    return kept.strip()


def looks_like_barcode(value: Optional[str]) -> bool:
    """Letters, digits, '.', '_' or '-' only, at least 3 characters."""
    if not value:
        return False
    return bool(BARCODE_PATTERN.match(str(value).strip()))


def is_sentinel(name: Optional[str]) -> bool:
    """Check if an item name is the batch completion trigger."""
    return (name or "").strip().lower() == SENTINEL_NAME


def is_eligible_name(name: Optional[str]) -> bool:
    """Non-blank and not the sentinel."""
    cleaned = (name or "").strip()
    return cleaned != "" and not is_sentinel(cleaned)
