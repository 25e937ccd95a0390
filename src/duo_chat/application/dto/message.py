from __future__ import annotations

from dataclasses import dataclass

from duo_chat.domain.value_objects.ids import UserId


@dataclass(frozen=True, slots=True)
class SendMessageDTO:
    receiver_id: UserId
    text: str | None = None
    image: str | None = None

    @property
    def is_empty(self) -> bool:
        return not self.text and not self.image
