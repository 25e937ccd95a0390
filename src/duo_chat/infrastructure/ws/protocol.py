"""WebSocket message envelope models."""
from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel

from duo_chat.domain.entities.message import Message
from duo_chat.domain.value_objects.ids import MessageId, UserId


class WsInbound(BaseModel):
    """Client → Server."""

    type: str  # ping
    data: dict[str, Any] = {}


class WsOutbound(BaseModel):
    """Server → Client."""

    type: str  # getOnlineUsers | newMessage | error | pong
    data: dict[str, Any] = {}


class WsMessage(BaseModel):
    """Wire form of a persisted message."""

    id: str
    sender_id: str
    receiver_id: str
    text: str | None = None
    image: str | None = None
    created_at: datetime

    model_config = {"from_attributes": True}

    def to_entity(self) -> Message:
        return Message(
            id=MessageId(self.id),
            sender_id=UserId(self.sender_id),
            receiver_id=UserId(self.receiver_id),
            text=self.text,
            image=self.image,
            created_at=self.created_at,
        )

    @classmethod
    def from_entity(cls, message: Message) -> WsMessage:
        return cls.model_validate(message, from_attributes=True)
