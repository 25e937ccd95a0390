"""websockets-based client end of ``/ws/chat``."""
from __future__ import annotations

import asyncio
import logging
from urllib.parse import urlencode

import websockets
from pydantic import ValidationError

from duo_chat.client.ports import ClosedCallback, EventHandler
from duo_chat.infrastructure.ws.protocol import WsOutbound

logger = logging.getLogger(__name__)


class WebSocketTransport:
    """Implements client.ports.ChatTransport."""

    def __init__(self, ws_url: str, token: str) -> None:
        self._uri = f"{ws_url.rstrip('/')}/ws/chat?{urlencode({'token': token})}"
        self._handlers: dict[str, list[EventHandler]] = {}
        self._ws: websockets.ClientConnection | None = None
        self._reader: asyncio.Task[None] | None = None
        self._on_closed: ClosedCallback | None = None
        self._closing = False

    async def open(self, on_closed: ClosedCallback | None = None) -> None:
        if self._ws is not None:
            raise RuntimeError("Transport already open")
        self._closing = False
        self._on_closed = on_closed
        self._ws = await websockets.connect(self._uri)
        self._reader = asyncio.create_task(self._read_loop(), name="duo-chat-ws-reader")

    async def close(self) -> None:
        self._closing = True
        if self._reader is not None:
            self._reader.cancel()
            try:
                await self._reader
            except asyncio.CancelledError:
                pass
            self._reader = None
        if self._ws is not None:
            await self._ws.close()
            self._ws = None

    def on(self, event: str, handler: EventHandler) -> None:
        self._handlers.setdefault(event, []).append(handler)

    def off(self, event: str, handler: EventHandler) -> None:
        handlers = self._handlers.get(event)
        if handlers and handler in handlers:
            handlers.remove(handler)

    def _dispatch(self, raw: str | bytes) -> None:
        try:
            envelope = WsOutbound.model_validate_json(raw)
        except ValidationError:
            logger.warning("Ignoring invalid frame from server")
            return
        for handler in list(self._handlers.get(envelope.type, ())):
            try:
                handler(envelope.data)
            except Exception:
                logger.exception("Error handling %s event", envelope.type)

    async def _read_loop(self) -> None:
        assert self._ws is not None
        try:
            async for raw in self._ws:
                self._dispatch(raw)
        except websockets.ConnectionClosed:
            logger.debug("Server closed the connection", exc_info=True)
        finally:
            if not self._closing:
                self._ws = None
                self._reader = None
                if self._on_closed is not None:
                    await self._on_closed()
