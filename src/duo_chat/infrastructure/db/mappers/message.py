from __future__ import annotations

from duo_chat.domain.entities.message import Message
from duo_chat.domain.value_objects.ids import MessageId, UserId
from duo_chat.infrastructure.db.models.message import MessageModel


def model_to_entity(model: MessageModel) -> Message:
    return Message(
        id=MessageId(model.id),
        sender_id=UserId(model.sender_id),
        receiver_id=UserId(model.receiver_id),
        text=model.text,
        image=model.image,
        created_at=model.created_at,
    )


def entity_to_model(entity: Message) -> MessageModel:
    return MessageModel(
        id=entity.id,
        sender_id=entity.sender_id,
        receiver_id=entity.receiver_id,
        text=entity.text,
        image=entity.image,
        created_at=entity.created_at,
    )
