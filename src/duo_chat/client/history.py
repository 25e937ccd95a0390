from __future__ import annotations

import httpx

from duo_chat.domain.entities.message import Message
from duo_chat.domain.value_objects.ids import UserId
from duo_chat.infrastructure.ws.protocol import WsMessage


class HttpHistoryFetcher:
    """Implements client.ports.HistoryFetcher against the REST API."""

    def __init__(
        self,
        base_url: str,
        token: str,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._client = client or httpx.AsyncClient(base_url=base_url, timeout=httpx.Timeout(10.0))
        self._headers = {"Authorization": f"Bearer {token}"}

    async def fetch(self, peer_id: UserId) -> list[Message]:
        resp = await self._client.get(f"/api/v1/chat/messages/{peer_id}", headers=self._headers)
        resp.raise_for_status()
        return [WsMessage.model_validate(item).to_entity() for item in resp.json()]

    async def aclose(self) -> None:
        await self._client.aclose()
