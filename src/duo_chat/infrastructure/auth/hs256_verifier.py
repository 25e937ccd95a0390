from __future__ import annotations

import jwt

from duo_chat.application.dto.principal import Principal
from duo_chat.domain.value_objects.ids import UserId


class HS256Verifier:
    """Verify JWTs signed with a shared HS256 secret."""

    def __init__(self, secret: str, algorithm: str = "HS256") -> None:
        self._secret = secret
        self._algorithm = algorithm

    async def verify(self, token: str) -> Principal:
        payload = jwt.decode(token, self._secret, algorithms=[self._algorithm])
        subject = payload.get("sub") or payload.get("userId")
        if not subject:
            raise jwt.InvalidTokenError("Token has no subject")
        return Principal(user_id=UserId(str(subject)))
