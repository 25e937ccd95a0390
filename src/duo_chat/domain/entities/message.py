from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from duo_chat.domain.value_objects.ids import MessageId, UserId


@dataclass(frozen=True, slots=True)
class Message:
    id: MessageId
    sender_id: UserId
    receiver_id: UserId
    text: str | None
    image: str | None
    created_at: datetime

    def involves(self, user_id: str) -> bool:
        return user_id in (self.sender_id, self.receiver_id)

    def peer_of(self, user_id: str) -> UserId:
        """The other side of the exchange as seen by ``user_id``."""
        return self.receiver_id if self.sender_id == user_id else self.sender_id
