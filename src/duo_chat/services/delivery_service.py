from __future__ import annotations

import logging

from duo_chat.application.ports.transport import RealtimeTransport
from duo_chat.domain.entities.message import Message
from duo_chat.infrastructure.ws.registry import ConnectionRegistry

logger = logging.getLogger(__name__)


class MessageDeliveryRouter:
    """Best-effort live push of a persisted message to its receiver.

    Nothing is queued: if the receiver holds no connection the message is only
    reachable through the history endpoint.
    """

    def __init__(self, registry: ConnectionRegistry, transport: RealtimeTransport) -> None:
        self._registry = registry
        self._transport = transport

    async def deliver(self, message: Message) -> bool:
        """Return True if the message was pushed."""
        if message.receiver_id == message.sender_id:
            return False

        connection_id = self._registry.lookup(message.receiver_id)
        if connection_id is None:
            logger.debug("Receiver %s offline, message %s not pushed", message.receiver_id, message.id)
            return False

        try:
            await self._transport.push_message(connection_id, message)
        except Exception:
            logger.warning(
                "Push of message %s to %s failed", message.id, connection_id, exc_info=True,
            )
            return False
        return True
