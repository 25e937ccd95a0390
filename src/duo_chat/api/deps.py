"""FastAPI dependency injection helpers."""
from __future__ import annotations

from typing import Annotated, AsyncIterator

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from duo_chat.application.dto.principal import Principal
from duo_chat.application.ports.auth import TokenVerifier
from duo_chat.application.ports.bus import MessageBus
from duo_chat.application.ports.media import MediaStore
from duo_chat.config import settings
from duo_chat.infrastructure.auth.hs256_verifier import HS256Verifier
from duo_chat.infrastructure.db.session import AsyncSessionLocal
from duo_chat.infrastructure.db.uow import SqlAlchemyUoW
from duo_chat.infrastructure.ws.registry import ConnectionRegistry

_bearer_scheme = HTTPBearer()


async def get_uow() -> AsyncIterator[SqlAlchemyUoW]:
    async with AsyncSessionLocal() as session:
        uow = SqlAlchemyUoW(session)
        try:
            yield uow
        finally:
            await session.close()


UoWDep = Annotated[SqlAlchemyUoW, Depends(get_uow)]


_verifier: TokenVerifier | None = None


def get_verifier() -> TokenVerifier:
    global _verifier  # noqa: PLW0603
    if _verifier is None:
        _verifier = HS256Verifier(settings.JWT_SECRET, settings.JWT_ALGORITHM)
    return _verifier


async def get_current_principal(
    credentials: Annotated[HTTPAuthorizationCredentials, Depends(_bearer_scheme)],
) -> Principal:
    verifier = get_verifier()
    try:
        return await verifier.verify(credentials.credentials)
    except Exception as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(exc),
        ) from exc


CurrentPrincipal = Annotated[Principal, Depends(get_current_principal)]


def get_message_bus(request: Request) -> MessageBus:
    return request.app.state.message_bus


def get_media_store(request: Request) -> MediaStore:
    return request.app.state.media_store


def get_registry(request: Request) -> ConnectionRegistry:
    return request.app.state.registry


MessageBusDep = Annotated[MessageBus, Depends(get_message_bus)]
MediaStoreDep = Annotated[MediaStore, Depends(get_media_store)]
RegistryDep = Annotated[ConnectionRegistry, Depends(get_registry)]
