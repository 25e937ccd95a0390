from __future__ import annotations

from dataclasses import dataclass

from duo_chat.domain.entities.message import Message


@dataclass(frozen=True, slots=True)
class MessageCreated:
    """Emitted once a message has been durably stored."""

    message: Message
