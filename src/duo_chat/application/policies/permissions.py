from __future__ import annotations

from duo_chat.application.dto.principal import Principal
from duo_chat.application.exceptions import NotFoundError, ValidationError
from duo_chat.domain.entities.user import User


def assert_valid_peer(principal: Principal, peer: User | None) -> User:
    """Raise if the peer doesn't exist or is the caller."""
    if peer is None:
        raise NotFoundError("User not found")

    if peer.id == principal.user_id:
        raise ValidationError("Cannot start a conversation with yourself")

    return peer
