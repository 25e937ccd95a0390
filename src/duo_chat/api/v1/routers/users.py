from __future__ import annotations

from fastapi import APIRouter

from duo_chat.api.deps import CurrentPrincipal, RegistryDep, UoWDep
from duo_chat.api.v1.schemas.user import PresenceResponse, UserResponse
from duo_chat.services import message_service

router = APIRouter(prefix="/api/v1/chat", tags=["users"])


@router.get("/users", response_model=list[UserResponse])
async def list_users(
    principal: CurrentPrincipal,
    uow: UoWDep,
) -> list[UserResponse]:
    users = await message_service.list_roster(principal, uow)
    return [UserResponse.model_validate(u, from_attributes=True) for u in users]


@router.get("/presence", response_model=PresenceResponse)
async def get_presence(
    _principal: CurrentPrincipal,
    registry: RegistryDep,
) -> PresenceResponse:
    return PresenceResponse(user_ids=sorted(registry.snapshot_identities()))
