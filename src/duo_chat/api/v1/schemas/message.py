from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel


class SendMessageRequest(BaseModel):
    text: str | None = None
    image: str | None = None


class MessageResponse(BaseModel):
    id: str
    sender_id: str
    receiver_id: str
    text: str | None
    image: str | None
    created_at: datetime

    model_config = {"from_attributes": True}
