from __future__ import annotations

from typing import Any, Awaitable, Callable, Protocol

from duo_chat.domain.entities.message import Message
from duo_chat.domain.value_objects.ids import UserId

EventHandler = Callable[[dict[str, Any]], None]
ClosedCallback = Callable[[], Awaitable[None]]


class ChatTransport(Protocol):
    """Client end of the realtime channel, authenticated as one user."""

    async def open(self, on_closed: ClosedCallback | None = None) -> None:
        """Connect. ``on_closed`` fires only when the remote side drops us."""
        ...

    async def close(self) -> None: ...

    def on(self, event: str, handler: EventHandler) -> None: ...

    def off(self, event: str, handler: EventHandler) -> None: ...


class HistoryFetcher(Protocol):
    async def fetch(self, peer_id: UserId) -> list[Message]:
        """Persisted conversation with ``peer_id``, oldest first."""
        ...
