from __future__ import annotations

import json
from datetime import datetime
from typing import Any
from uuid import UUID

from duo_chat.domain.entities.message import Message
from duo_chat.infrastructure.ws.protocol import WsMessage


class _Encoder(json.JSONEncoder):
    def default(self, o: object) -> Any:
        if isinstance(o, UUID):
            return str(o)
        if isinstance(o, datetime):
            return o.isoformat()
        return super().default(o)


def serialize_event(event_type: str, payload: dict[str, Any]) -> str:
    envelope = {"event": event_type, "data": payload}
    return json.dumps(envelope, cls=_Encoder)


def deserialize_event(raw: str | bytes) -> tuple[str, dict[str, Any]]:
    data = json.loads(raw)
    return data["event"], data["data"]


def message_to_payload(message: Message) -> dict[str, Any]:
    return WsMessage.from_entity(message).model_dump()


def payload_to_message(payload: dict[str, Any]) -> Message:
    return WsMessage.model_validate(payload).to_entity()
