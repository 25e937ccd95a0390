from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from duo_chat.domain.entities.user import User
from duo_chat.domain.value_objects.ids import UserId
from duo_chat.infrastructure.db.mappers import user as mapper
from duo_chat.infrastructure.db.models.user import UserModel


class UserReaderRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_id(self, user_id: UserId) -> User | None:
        model = await self._session.get(UserModel, user_id)
        return mapper.model_to_entity(model) if model else None

    async def list_except(self, user_id: UserId) -> list[User]:
        stmt = (
            select(UserModel)
            .where(UserModel.id != user_id)
            .order_by(UserModel.full_name.asc())
        )
        result = await self._session.execute(stmt)
        return [mapper.model_to_entity(m) for m in result.scalars().all()]


class UserWriterRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def add(self, user: User) -> User:
        model = mapper.entity_to_model(user)
        self._session.add(model)
        await self._session.flush()
        return mapper.model_to_entity(model)
