"""Seed development data: creates two demo users and a short exchange."""
from __future__ import annotations

import asyncio
import logging
import uuid
from datetime import datetime, timedelta, timezone

from duo_chat.domain.entities.message import Message
from duo_chat.domain.entities.user import User
from duo_chat.domain.value_objects.ids import MessageId, UserId
from duo_chat.infrastructure.db.session import AsyncSessionLocal
from duo_chat.infrastructure.db.uow import SqlAlchemyUoW

logger = logging.getLogger(__name__)


async def seed() -> None:
    async with AsyncSessionLocal() as session:
        uow = SqlAlchemyUoW(session)
        now = datetime.now(timezone.utc)

        alice = User(
            id=UserId(str(uuid.uuid4())),
            email="alice@example.com",
            full_name="Alice",
            profile_pic=None,
            created_at=now,
        )
        bob = User(
            id=UserId(str(uuid.uuid4())),
            email="bob@example.com",
            full_name="Bob",
            profile_pic=None,
            created_at=now,
        )
        await uow.users_w.add(alice)
        await uow.users_w.add(bob)

        exchange = [
            (alice, bob, "Hi Bob!"),
            (bob, alice, "Hey Alice, how are you?"),
            (alice, bob, "Good, thanks. Lunch tomorrow?"),
        ]
        for i, (sender, receiver, text) in enumerate(exchange):
            await uow.messages_w.save(
                Message(
                    id=MessageId(str(uuid.uuid4())),
                    sender_id=sender.id,
                    receiver_id=receiver.id,
                    text=text,
                    image=None,
                    created_at=now + timedelta(seconds=i),
                )
            )

        await uow.commit()
        logger.info("Seeded users %s, %s with %d messages", alice.id, bob.id, len(exchange))


def main() -> None:
    logging.basicConfig(level=logging.INFO)
    asyncio.run(seed())


if __name__ == "__main__":
    main()
