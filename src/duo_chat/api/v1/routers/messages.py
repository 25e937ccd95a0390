from __future__ import annotations

from fastapi import APIRouter, BackgroundTasks

from duo_chat.api.deps import CurrentPrincipal, MediaStoreDep, MessageBusDep, UoWDep
from duo_chat.api.v1.schemas.message import MessageResponse, SendMessageRequest
from duo_chat.application.dto.message import SendMessageDTO
from duo_chat.domain.events.message_created import MessageCreated
from duo_chat.domain.value_objects.ids import UserId
from duo_chat.services import message_service

router = APIRouter(prefix="/api/v1/chat/messages", tags=["messages"])


@router.get("/{peer_id}", response_model=list[MessageResponse])
async def list_messages(
    peer_id: str,
    principal: CurrentPrincipal,
    uow: UoWDep,
) -> list[MessageResponse]:
    messages = await message_service.list_messages(principal, UserId(peer_id), uow)
    return [MessageResponse.model_validate(m, from_attributes=True) for m in messages]


@router.post("/send/{receiver_id}", response_model=MessageResponse, status_code=201)
async def send_message(
    receiver_id: str,
    body: SendMessageRequest,
    principal: CurrentPrincipal,
    uow: UoWDep,
    media: MediaStoreDep,
    bus: MessageBusDep,
    background_tasks: BackgroundTasks,
) -> MessageResponse:
    msg = await message_service.send_message(
        principal,
        SendMessageDTO(receiver_id=UserId(receiver_id), text=body.text, image=body.image),
        uow,
        media,
    )
    # Runs after the response is sent; persistence has already committed.
    background_tasks.add_task(bus.publish, MessageCreated(message=msg))
    return MessageResponse.model_validate(msg, from_attributes=True)
