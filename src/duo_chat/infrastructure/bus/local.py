"""In-process bus: hands events straight to the local delivery router."""
from __future__ import annotations

from duo_chat.domain.events.message_created import MessageCreated
from duo_chat.services.delivery_service import MessageDeliveryRouter


class LocalMessageBus:
    """Implements application.ports.bus.MessageBus."""

    def __init__(self, delivery: MessageDeliveryRouter) -> None:
        self._delivery = delivery

    async def publish(self, event: MessageCreated) -> None:
        await self._delivery.deliver(event.message)
