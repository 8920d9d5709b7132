"""
Pydantic models for validation and serialization.
"""

from models.base import (
    FrozenSchema,
    CamelSchema,
)
from models.board import (
    ColumnKind,
    Column,
    Group,
    ColumnValue,
    Item,
)
from models.column_value import (
    NumberValue,
    TextValue,
    CheckboxValue,
    DateValue,
    LinkSetValue,
    PeopleValue,
    UnknownValue,
    TypedValue,
)
from models.batch import (
    SENTINEL_NAME,
    DisposalMode,
    StockDirection,
    RowReason,
    TriggerContext,
    MappingOverride,
    RelationHint,
    MirrorExtras,
    StockChange,
    SideEffectResult,
    RowOutcome,
    BatchResult,
)
from models.config import (
    CatalogConfig,
    ReportConfig,
    EntryBatchConfig,
    ExitBatchConfig,
)
from models.webhook import (
    WebhookEvent,
    WebhookPayload,
    ProcessRequest,
    TokenRequest,
    BoardRequest,
    BoardsRequest,
)

__all__ = [
    # Base
    "FrozenSchema",
    "CamelSchema",

    # Board
    "ColumnKind",
    "Column",
    "Group",
    "ColumnValue",
    "Item",

    # Column values
    "NumberValue",
    "TextValue",
    "CheckboxValue",
    "DateValue",
    "LinkSetValue",
    "PeopleValue",
    "UnknownValue",
    "TypedValue",

    # Batch
    "SENTINEL_NAME",
    "DisposalMode",
    "StockDirection",
    "RowReason",
    "TriggerContext",
    "MappingOverride",
    "RelationHint",
    "MirrorExtras",
    "StockChange",
    "SideEffectResult",
    "RowOutcome",
    "BatchResult",

    # Config
    "CatalogConfig",
    "ReportConfig",
    "EntryBatchConfig",
    "ExitBatchConfig",

    # Webhook / requests
    "WebhookEvent",
    "WebhookPayload",
    "ProcessRequest",
    "TokenRequest",
    "BoardRequest",
    "BoardsRequest",
]
