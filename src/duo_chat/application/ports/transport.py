from __future__ import annotations

from collections.abc import Iterable
from typing import Protocol

from duo_chat.domain.entities.message import Message
from duo_chat.domain.value_objects.ids import ConnectionId, UserId


class RealtimeTransport(Protocol):
    """Per-connection send primitive of the websocket layer.

    Both methods raise when the connection is gone or the send fails.
    """

    async def push_presence(
        self, connection_id: ConnectionId, online_user_ids: Iterable[UserId],
    ) -> None: ...

    async def push_message(self, connection_id: ConnectionId, message: Message) -> None: ...
