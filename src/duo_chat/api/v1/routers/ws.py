from __future__ import annotations

import asyncio
import logging

from fastapi import APIRouter, Query, WebSocket, WebSocketDisconnect

from duo_chat.api.deps import get_verifier
from duo_chat.application.dto.principal import Principal
from duo_chat.config import settings
from duo_chat.domain.value_objects.enums import EventType
from duo_chat.domain.value_objects.ids import ConnectionId
from duo_chat.infrastructure.ws.manager import ConnectionManager
from duo_chat.infrastructure.ws.protocol import WsInbound
from duo_chat.services import connection_service

logger = logging.getLogger(__name__)
router = APIRouter(tags=["websocket"])


async def _authenticate(token: str) -> Principal | None:
    try:
        verifier = get_verifier()
        return await verifier.verify(token)
    except Exception:
        logger.debug("WS auth failed", exc_info=True)
        return None


@router.websocket("/ws/chat")
async def ws_chat(
    websocket: WebSocket,
    token: str = Query(...),
) -> None:
    principal = await _authenticate(token)
    if principal is None:
        await websocket.close(code=4001, reason="Authentication failed")
        return

    state = websocket.app.state
    manager: ConnectionManager = state.connections
    connection_id = await manager.accept(websocket)
    await connection_service.on_connect(
        principal.user_id, connection_id, state.registry, state.presence,
    )

    heartbeat_task = asyncio.create_task(
        _heartbeat(manager, connection_id), name=f"ws-heartbeat-{connection_id}",
    )
    try:
        await _read_loop(websocket, manager, connection_id)
    except WebSocketDisconnect:
        pass
    except Exception:
        logger.exception("WS error for %s", principal.user_id)
    finally:
        heartbeat_task.cancel()
        manager.release(connection_id)
        await connection_service.on_disconnect(
            principal.user_id, connection_id, state.registry, state.presence,
        )


async def _heartbeat(manager: ConnectionManager, connection_id: ConnectionId) -> None:
    interval = settings.WS_HEARTBEAT_SECONDS
    try:
        while True:
            await asyncio.sleep(interval)
            await manager.send(connection_id, EventType.PONG, {})
    except asyncio.CancelledError:
        pass
    except Exception:
        logger.debug("Heartbeat stopped for %s", connection_id, exc_info=True)


async def _read_loop(
    ws: WebSocket, manager: ConnectionManager, connection_id: ConnectionId,
) -> None:
    while True:
        raw = await ws.receive_text()
        try:
            msg = WsInbound.model_validate_json(raw)
        except Exception:
            await manager.send(connection_id, EventType.ERROR, {"code": "invalid_payload"})
            continue

        if msg.type == EventType.PING:
            await manager.send(connection_id, EventType.PONG, {})
        else:
            await manager.send(
                connection_id, EventType.ERROR, {"code": "unknown_type", "type": msg.type},
            )
