from __future__ import annotations

from duo_chat.domain.entities.user import User
from duo_chat.domain.value_objects.ids import UserId
from duo_chat.infrastructure.db.models.user import UserModel


def model_to_entity(model: UserModel) -> User:
    return User(
        id=UserId(model.id),
        email=model.email,
        full_name=model.full_name,
        profile_pic=model.profile_pic,
        created_at=model.created_at,
    )


def entity_to_model(entity: User) -> UserModel:
    return UserModel(
        id=entity.id,
        email=entity.email,
        full_name=entity.full_name,
        profile_pic=entity.profile_pic,
        created_at=entity.created_at,
    )
