from __future__ import annotations

import uuid

from duo_chat.application.dto.message import SendMessageDTO
from duo_chat.application.dto.principal import Principal
from duo_chat.application.exceptions import ValidationError
from duo_chat.application.policies.permissions import assert_valid_peer
from duo_chat.application.ports.clock import Clock, SystemClock
from duo_chat.application.ports.media import MediaStore
from duo_chat.application.uow import UnitOfWork
from duo_chat.domain.entities.message import Message
from duo_chat.domain.entities.user import User
from duo_chat.domain.value_objects.ids import MessageId, UserId


async def send_message(
    principal: Principal,
    dto: SendMessageDTO,
    uow: UnitOfWork,
    media: MediaStore,
    clock: Clock | None = None,
) -> Message:
    """Persist a message from the caller to ``dto.receiver_id``.

    The returned message is committed; live delivery is the caller's job and
    must only start after this returns.
    """
    if dto.is_empty:
        raise ValidationError("Message must have text or an image")

    receiver = await uow.users.get_by_id(dto.receiver_id)
    assert_valid_peer(principal, receiver)

    image = await media.resolve(dto.image) if dto.image else None

    msg = Message(
        id=MessageId(str(uuid.uuid4())),
        sender_id=principal.user_id,
        receiver_id=dto.receiver_id,
        text=dto.text or None,
        image=image,
        created_at=(clock or SystemClock()).now(),
    )
    msg = await uow.messages_w.save(msg)
    await uow.commit()
    return msg


async def list_messages(
    principal: Principal,
    peer_id: UserId,
    uow: UnitOfWork,
) -> list[Message]:
    peer = await uow.users.get_by_id(peer_id)
    assert_valid_peer(principal, peer)
    return await uow.messages.list_between(principal.user_id, peer_id)


async def list_roster(principal: Principal, uow: UnitOfWork) -> list[User]:
    """Everyone the caller can chat with."""
    return await uow.users.list_except(principal.user_id)
