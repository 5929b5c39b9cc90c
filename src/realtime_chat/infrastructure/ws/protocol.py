"""WebSocket message envelope and inbound payload models."""
from __future__ import annotations

from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class WsInbound(BaseModel):
    """Client -> Server."""

    type: str  # typing | delivered | seen | ping
    data: dict[str, Any] = {}


class WsOutbound(BaseModel):
    """Server -> Client."""

    type: str
    data: Any = None


class _InboundPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class TypingIn(_InboundPayload):
    to: UUID
    is_typing: bool = Field(True, alias="isTyping")


class DeliveredIn(_InboundPayload):
    to: UUID
    message_id: UUID = Field(alias="messageId")


class SeenIn(_InboundPayload):
    to: UUID
    message_ids: list[UUID] = Field(default_factory=list, alias="messageIds")
