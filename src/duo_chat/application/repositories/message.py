from __future__ import annotations

from typing import Protocol

from duo_chat.domain.entities.message import Message
from duo_chat.domain.value_objects.ids import UserId


class MessageReader(Protocol):
    async def list_between(self, user_id: UserId, peer_id: UserId) -> list[Message]:
        """Messages exchanged in either direction, oldest first."""
        ...


class MessageWriter(Protocol):
    async def save(self, message: Message) -> Message: ...
