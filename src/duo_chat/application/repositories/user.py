from __future__ import annotations

from typing import Protocol

from duo_chat.domain.entities.user import User
from duo_chat.domain.value_objects.ids import UserId


class UserReader(Protocol):
    async def get_by_id(self, user_id: UserId) -> User | None: ...

    async def list_except(self, user_id: UserId) -> list[User]: ...


class UserWriter(Protocol):
    async def add(self, user: User) -> User: ...
