"""Registry lifecycle hooks invoked by the websocket endpoint."""
from __future__ import annotations

import logging

from duo_chat.domain.value_objects.ids import ConnectionId, UserId
from duo_chat.infrastructure.ws.registry import ConnectionRegistry
from duo_chat.services.presence_service import PresenceBroadcaster

logger = logging.getLogger(__name__)


async def on_connect(
    user_id: UserId,
    connection_id: ConnectionId,
    registry: ConnectionRegistry,
    presence: PresenceBroadcaster,
) -> None:
    registry.register(user_id, connection_id)
    logger.debug("User %s online via %s (online=%d)", user_id, connection_id, len(registry))
    await presence.broadcast()


async def on_disconnect(
    user_id: UserId,
    connection_id: ConnectionId,
    registry: ConnectionRegistry,
    presence: PresenceBroadcaster,
) -> bool:
    """Drop the registry entry if it still belongs to ``connection_id``.

    Returns False for a stale disconnect; presence is then left untouched.
    """
    if not registry.unregister(user_id, connection_id):
        logger.debug("Stale disconnect %s for %s ignored", connection_id, user_id)
        return False
    logger.debug("User %s offline (online=%d)", user_id, len(registry))
    await presence.broadcast()
    return True
