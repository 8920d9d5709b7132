"""
Batch processing schemas.

Covers the inputs of a batch run (trigger context, mapping overrides,
relation hints) and its outputs (per-row outcomes, batch result,
best-effort side effect results).
"""

from enum import Enum
from typing import Optional

from pydantic import Field

from models.base import CamelSchema, FrozenSchema


SENTINEL_NAME = "tamamla"


class DisposalMode(str, Enum):
    """What happens to a row once it has been handled."""

    ARCHIVE = "archive"
    DELETE = "delete"
    NONE = "none"

    @classmethod
    def parse(cls, value: Optional[str], default: "DisposalMode") -> "DisposalMode":
        """Parse a configured mode; unknown values fall back to default."""
        key = str(value or "").strip().lower()
        for mode in cls:
            if mode.value == key:
                return mode
        return default


class StockDirection(str, Enum):
    """Direction of a stock movement."""

    INBOUND = "inbound"    # Entry batch: stock goes up
    OUTBOUND = "outbound"  # Exit batch: stock goes down, floored at 0


class RowReason(str, Enum):
    """Why a row was not processed."""

    MISSING_BARCODE_OR_QTY = "missing-barcode-or-qty"
    NO_CATALOG = "no-catalog"
    CATALOG_NOT_FOUND = "catalog-not-found"
    REMOTE_ERROR = "remote-error"
    REPORT_FAILED = "report-failed"
    DISPOSE_FAILED = "dispose-failed"


# ===================
# INPUTS
# ===================

class TriggerContext(FrozenSchema):
    """Who or what triggered a batch run."""

    trigger_user_id: Optional[int] = None


class MappingOverride(FrozenSchema):
    """
    Explicit source -> target column pairing for the report mirror.

    Takes precedence over title matching. type_hint is used when the
    target column cannot be found on the report board.
    """

    target_column_id: str
    source_column_id: str
    type_hint: Optional[str] = None


class RelationHint(FrozenSchema):
    """
    Link the mirrored row to a known item (catalog product, exit target).

    The target column is resolved in order:
    1. target_column_id
    2. title of source_column_id on the source board
    3. source_title
    """

    catalog_item_id: int
    target_column_id: Optional[str] = None
    source_column_id: Optional[str] = None
    source_title: Optional[str] = None


class MirrorExtras(FrozenSchema):
    """Values stamped on the mirrored row that do not come from the source."""

    date_column_id: Optional[str] = None
    date_iso: Optional[str] = None
    person_column_id: Optional[str] = None
    user_id: Optional[int] = None


# ===================
# OUTPUTS
# ===================

class StockChange(FrozenSchema):
    """Stock value before and after a mutation."""

    catalog_id: str
    previous: float
    current: float


class SideEffectResult(CamelSchema):
    """Outcome of a best-effort call (comment, notification, assignment)."""

    action: str
    target_id: Optional[str] = None
    ok: bool = True
    error: Optional[str] = None

    @classmethod
    def success(cls, action: str, target_id: Optional[str] = None) -> "SideEffectResult":
        return cls(action=action, target_id=target_id)

    @classmethod
    def warned(cls, action: str, target_id: Optional[str], error: Exception) -> "SideEffectResult":
        return cls(action=action, target_id=target_id, ok=False, error=str(error))


class RowOutcome(CamelSchema):
    """Result for one row of a batch."""

    item_id: str
    ok: bool
    barcode: Optional[str] = None
    qty: Optional[float] = None
    from_stock: Optional[float] = Field(None, alias="from")
    to_stock: Optional[float] = Field(None, alias="to")
    catalog_id: Optional[str] = None
    report_item_id: Optional[str] = None
    reason: Optional[str] = None


class BatchResult(CamelSchema):
    """Result of a batch run."""

    ok: bool
    blocked: bool = False
    reason: Optional[str] = None
    missing_count: Optional[int] = None
    group_id: Optional[str] = None
    report_group_id: Optional[str] = None
    count: int = 0
    results: list[RowOutcome] = Field(default_factory=list)
    diagnostics: list[SideEffectResult] = Field(default_factory=list)

    @classmethod
    def completed(
        cls,
        group_id: Optional[str],
        report_group_id: Optional[str],
        results: list[RowOutcome],
        diagnostics: Optional[list[SideEffectResult]] = None,
    ) -> "BatchResult":
        return cls(
            ok=True,
            group_id=group_id,
            report_group_id=report_group_id,
            count=len(results),
            results=results,
            diagnostics=diagnostics or [],
        )

    @classmethod
    def blocked_by_gate(
        cls,
        group_id: Optional[str],
        missing_count: int,
        diagnostics: list[SideEffectResult],
    ) -> "BatchResult":
        return cls(
            ok=False,
            blocked=True,
            reason="qc_or_count_missing",
            missing_count=missing_count,
            group_id=group_id,
            diagnostics=diagnostics,
        )
