from __future__ import annotations

import logging

from duo_chat.application.ports.transport import RealtimeTransport
from duo_chat.infrastructure.ws.registry import ConnectionRegistry

logger = logging.getLogger(__name__)


class PresenceBroadcaster:
    """Pushes the full online set to every registered connection."""

    def __init__(self, registry: ConnectionRegistry, transport: RealtimeTransport) -> None:
        self._registry = registry
        self._transport = transport

    async def broadcast(self) -> None:
        connections = self._registry.snapshot()
        online = frozenset(connections)
        for user_id, connection_id in connections.items():
            try:
                await self._transport.push_presence(connection_id, online)
            except Exception:
                logger.warning(
                    "Presence push to %s (%s) failed", user_id, connection_id, exc_info=True,
                )
