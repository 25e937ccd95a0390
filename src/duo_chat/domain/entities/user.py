from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from duo_chat.domain.value_objects.ids import UserId


@dataclass(frozen=True, slots=True)
class User:
    id: UserId
    email: str
    full_name: str
    profile_pic: str | None
    created_at: datetime
