"""Shared test fixtures."""
from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any

import pytest

from duo_chat.application.dto.principal import Principal
from duo_chat.client.ports import ClosedCallback, EventHandler
from duo_chat.domain.entities.message import Message
from duo_chat.domain.entities.user import User
from duo_chat.domain.value_objects.ids import ConnectionId, MessageId, UserId

ALICE = UserId("alice")
BOB = UserId("bob")
CAROL = UserId("carol")

_BASE_TS = datetime(2026, 1, 1, tzinfo=timezone.utc)


@pytest.fixture
def alice_principal() -> Principal:
    return Principal(user_id=ALICE)


def make_user(user_id: str, *, full_name: str | None = None) -> User:
    return User(
        id=UserId(user_id),
        email=f"{user_id}@example.com",
        full_name=full_name or user_id.title(),
        profile_pic=None,
        created_at=_BASE_TS,
    )


def make_message(
    *,
    sender_id: str = BOB,
    receiver_id: str = ALICE,
    text: str | None = "hello",
    image: str | None = None,
    message_id: str | None = None,
    offset: int = 0,
) -> Message:
    return Message(
        id=MessageId(message_id or str(uuid.uuid4())),
        sender_id=UserId(sender_id),
        receiver_id=UserId(receiver_id),
        text=text,
        image=image,
        created_at=_BASE_TS + timedelta(seconds=offset),
    )


@dataclass
class FakeUserReader:
    _users: dict[str, User] = field(default_factory=dict)

    async def get_by_id(self, user_id: UserId) -> User | None:
        return self._users.get(user_id)

    async def list_except(self, user_id: UserId) -> list[User]:
        return sorted(
            (u for u in self._users.values() if u.id != user_id),
            key=lambda u: u.full_name,
        )


@dataclass
class FakeUserWriter:
    _reader: FakeUserReader

    async def add(self, user: User) -> User:
        self._reader._users[user.id] = user
        return user


@dataclass
class FakeMessageReader:
    _messages: list[Message] = field(default_factory=list)

    async def list_between(self, user_id: UserId, peer_id: UserId) -> list[Message]:
        pair = {user_id, peer_id}
        return sorted(
            (m for m in self._messages if {m.sender_id, m.receiver_id} == pair),
            key=lambda m: (m.created_at, m.id),
        )


@dataclass
class FakeMessageWriter:
    _reader: FakeMessageReader

    async def save(self, message: Message) -> Message:
        self._reader._messages.append(message)
        return message


@dataclass
class FakeUoW:
    """In-memory UoW for unit tests."""
    users: FakeUserReader = field(default_factory=FakeUserReader)
    users_w: FakeUserWriter | None = None
    messages: FakeMessageReader = field(default_factory=FakeMessageReader)
    messages_w: FakeMessageWriter | None = None
    _committed: bool = False

    def __post_init__(self) -> None:
        if self.users_w is None:
            self.users_w = FakeUserWriter(self.users)
        if self.messages_w is None:
            self.messages_w = FakeMessageWriter(self.messages)

    def add_users(self, *user_ids: str) -> None:
        for user_id in user_ids:
            user = make_user(user_id)
            self.users._users[user.id] = user

    async def flush(self) -> None:
        pass

    async def commit(self) -> None:
        self._committed = True

    async def rollback(self) -> None:
        pass


@dataclass
class FakeRealtimeTransport:
    """Records server-side pushes; connection ids in ``broken`` raise."""
    presence: list[tuple[ConnectionId, frozenset[UserId]]] = field(default_factory=list)
    messages: list[tuple[ConnectionId, Message]] = field(default_factory=list)
    broken: set[str] = field(default_factory=set)

    async def push_presence(self, connection_id: ConnectionId, online_user_ids) -> None:
        if connection_id in self.broken:
            raise ConnectionError(connection_id)
        self.presence.append((connection_id, frozenset(online_user_ids)))

    async def push_message(self, connection_id: ConnectionId, message: Message) -> None:
        if connection_id in self.broken:
            raise ConnectionError(connection_id)
        self.messages.append((connection_id, message))


@dataclass
class FakeMediaStore:
    resolved: list[str] = field(default_factory=list)

    async def resolve(self, image: str) -> str:
        self.resolved.append(image)
        if image.startswith("data:image"):
            return image
        return f"https://cdn.example.com/{len(self.resolved)}.png"


@dataclass
class FakeClientTransport:
    """In-memory ChatTransport; ``emit`` plays a server frame."""
    handlers: dict[str, list[EventHandler]] = field(default_factory=dict)
    is_open: bool = False
    open_count: int = 0
    close_count: int = 0
    on_closed: ClosedCallback | None = None
    events: list[str] = field(default_factory=list)

    async def open(self, on_closed: ClosedCallback | None = None) -> None:
        self.is_open = True
        self.open_count += 1
        self.on_closed = on_closed
        self.events.append("open")

    async def close(self) -> None:
        self.is_open = False
        self.close_count += 1
        self.events.append("close")

    def on(self, event: str, handler: EventHandler) -> None:
        self.handlers.setdefault(event, []).append(handler)
        self.events.append(f"on:{event}")

    def off(self, event: str, handler: EventHandler) -> None:
        self.handlers[event].remove(handler)
        self.events.append(f"off:{event}")

    def handler_count(self, event: str) -> int:
        return len(self.handlers.get(event, []))

    def emit(self, event: str, data: dict[str, Any]) -> None:
        for handler in list(self.handlers.get(event, [])):
            handler(data)

    async def drop(self) -> None:
        """Simulate the server going away."""
        self.is_open = False
        if self.on_closed is not None:
            await self.on_closed()


@dataclass
class FakeHistory:
    _messages: dict[str, list[Message]] = field(default_factory=dict)
    fetched: list[str] = field(default_factory=list)

    async def fetch(self, peer_id: UserId) -> list[Message]:
        self.fetched.append(peer_id)
        return list(self._messages.get(peer_id, []))
