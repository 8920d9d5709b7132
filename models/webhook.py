"""
Request schemas: monday.com webhook payloads and manual/setup requests.
"""

from typing import Any, Optional

from pydantic import ConfigDict, Field, field_validator

from models.base import CamelSchema


CREATE_EVENT_TYPES = frozenset({"create_pulse", "create_item"})
RENAME_EVENT_TYPES = frozenset({"change_name"})


def _optional_int(value: Any) -> Optional[int]:
    try:
        number = int(value)
    except (TypeError, ValueError):
        return None
    return number or None


class WebhookEvent(CamelSchema):
    """
    Event body sent by a monday.com board webhook.

    monday.com uses "pulse" for items; both spellings are accepted.
    """
    model_config = ConfigDict(extra="allow")

    type: Optional[str] = None
    board_id: Optional[int] = None
    group_id: Optional[str] = None
    pulse_id: Optional[int] = None
    item_id: Optional[int] = None
    pulse_name: Optional[str] = None
    user_id: Optional[int] = None

    @field_validator("board_id", "pulse_id", "item_id", "user_id", mode="before")
    @classmethod
    def coerce_ids(cls, v: Any) -> Optional[int]:
        return _optional_int(v)

    @property
    def target_item_id(self) -> Optional[int]:
        return self.pulse_id or self.item_id

    @property
    def is_create(self) -> bool:
        return self.type in CREATE_EVENT_TYPES

    @property
    def is_rename(self) -> bool:
        return self.type in RENAME_EVENT_TYPES


class WebhookPayload(CamelSchema):
    """Top-level webhook body: either a URL challenge or an event."""
    model_config = ConfigDict(extra="allow")

    challenge: Optional[str] = None
    event: WebhookEvent = Field(default_factory=WebhookEvent)


class ProcessRequest(CamelSchema):
    """Manual batch trigger."""

    group_id: Optional[str] = None


class TokenRequest(CamelSchema):
    """Setup request carrying an API token to try."""

    token: str = Field(..., min_length=1)

    @field_validator("token")
    @classmethod
    def strip_token(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("token required")
        return v


class BoardsRequest(TokenRequest):
    search: Optional[str] = None
    workspace_id: Optional[str] = None


class BoardRequest(TokenRequest):
    board_id: str = Field(..., min_length=1)
