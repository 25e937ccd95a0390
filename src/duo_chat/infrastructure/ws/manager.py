"""In-process WebSocket connection manager."""
from __future__ import annotations

import asyncio
import logging
import uuid
from collections.abc import Iterable
from typing import Any

from fastapi import WebSocket

from duo_chat.domain.entities.message import Message
from duo_chat.domain.value_objects.enums import EventType
from duo_chat.domain.value_objects.ids import ConnectionId, UserId
from duo_chat.infrastructure.ws.protocol import WsMessage, WsOutbound

logger = logging.getLogger(__name__)


class ConnectionClosedError(Exception):
    """Raised when pushing to a connection id that is no longer open."""


class ConnectionManager:
    """Owns accepted sockets by connection id and serializes sends on each."""

    def __init__(self) -> None:
        self._sockets: dict[ConnectionId, WebSocket] = {}
        self._send_locks: dict[ConnectionId, asyncio.Lock] = {}

    async def accept(self, ws: WebSocket) -> ConnectionId:
        await ws.accept()
        connection_id = ConnectionId(uuid.uuid4().hex)
        self._sockets[connection_id] = ws
        self._send_locks[connection_id] = asyncio.Lock()
        logger.debug("WS accepted: %s (open=%d)", connection_id, len(self._sockets))
        return connection_id

    def release(self, connection_id: ConnectionId) -> None:
        self._sockets.pop(connection_id, None)
        self._send_locks.pop(connection_id, None)
        logger.debug("WS released: %s", connection_id)

    async def send(self, connection_id: ConnectionId, event_type: str, data: dict[str, Any]) -> None:
        """Send one envelope; sends on a connection happen in call order."""
        ws = self._sockets.get(connection_id)
        lock = self._send_locks.get(connection_id)
        if ws is None or lock is None:
            raise ConnectionClosedError(connection_id)
        raw = WsOutbound(type=event_type, data=data).model_dump_json()
        async with lock:
            await ws.send_text(raw)

    async def push_presence(
        self, connection_id: ConnectionId, online_user_ids: Iterable[UserId],
    ) -> None:
        await self.send(
            connection_id,
            EventType.ONLINE_USERS,
            {"user_ids": sorted(online_user_ids)},
        )

    async def push_message(self, connection_id: ConnectionId, message: Message) -> None:
        await self.send(
            connection_id,
            EventType.NEW_MESSAGE,
            WsMessage.from_entity(message).model_dump(mode="json"),
        )
