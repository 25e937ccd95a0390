from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel


class UserResponse(BaseModel):
    id: str
    email: str
    full_name: str
    profile_pic: str | None
    created_at: datetime

    model_config = {"from_attributes": True}


class PresenceResponse(BaseModel):
    user_ids: list[str]
