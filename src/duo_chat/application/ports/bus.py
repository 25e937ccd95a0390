from __future__ import annotations

from typing import Protocol

from duo_chat.domain.events.message_created import MessageCreated


class MessageBus(Protocol):
    """Hands persisted messages over to live delivery."""

    async def publish(self, event: MessageCreated) -> None: ...
