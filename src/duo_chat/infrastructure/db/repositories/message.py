from __future__ import annotations

from sqlalchemy import and_, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from duo_chat.domain.entities.message import Message
from duo_chat.domain.value_objects.ids import UserId
from duo_chat.infrastructure.db.mappers import message as mapper
from duo_chat.infrastructure.db.models.message import MessageModel


class MessageReaderRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def list_between(self, user_id: UserId, peer_id: UserId) -> list[Message]:
        stmt = (
            select(MessageModel)
            .where(
                or_(
                    and_(MessageModel.sender_id == user_id, MessageModel.receiver_id == peer_id),
                    and_(MessageModel.sender_id == peer_id, MessageModel.receiver_id == user_id),
                )
            )
            .order_by(MessageModel.created_at.asc(), MessageModel.id.asc())
        )
        result = await self._session.execute(stmt)
        return [mapper.model_to_entity(m) for m in result.scalars().all()]


class MessageWriterRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def save(self, message: Message) -> Message:
        model = mapper.entity_to_model(message)
        self._session.add(model)
        await self._session.flush()
        return mapper.model_to_entity(model)
