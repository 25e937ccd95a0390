from __future__ import annotations

import pytest

from duo_chat.domain.value_objects.ids import ConnectionId
from duo_chat.infrastructure.ws.registry import ConnectionRegistry
from duo_chat.services import connection_service
from duo_chat.services.presence_service import PresenceBroadcaster
from tests.conftest import ALICE, BOB, CAROL, FakeRealtimeTransport


@pytest.fixture
def hub():
    registry = ConnectionRegistry()
    transport = FakeRealtimeTransport()
    return registry, transport, PresenceBroadcaster(registry, transport)


@pytest.mark.asyncio
async def test_connect_registers_and_announces_to_everyone(hub):
    registry, transport, presence = hub
    await connection_service.on_connect(BOB, ConnectionId("b1"), registry, presence)
    transport.presence.clear()

    await connection_service.on_connect(ALICE, ConnectionId("a1"), registry, presence)

    assert registry.lookup(ALICE) == "a1"
    assert {c: online for c, online in transport.presence} == {
        "a1": {ALICE, BOB},
        "b1": {ALICE, BOB},
    }


@pytest.mark.asyncio
async def test_disconnect_announces_remaining_users(hub):
    registry, transport, presence = hub
    await connection_service.on_connect(ALICE, ConnectionId("a1"), registry, presence)
    await connection_service.on_connect(BOB, ConnectionId("b1"), registry, presence)
    transport.presence.clear()

    removed = await connection_service.on_disconnect(ALICE, ConnectionId("a1"), registry, presence)

    assert removed is True
    assert transport.presence == [("b1", frozenset({BOB}))]


@pytest.mark.asyncio
async def test_stale_disconnect_after_reconnect_keeps_new_connection(hub):
    registry, transport, presence = hub
    await connection_service.on_connect(CAROL, ConnectionId("c-old"), registry, presence)
    # Reconnect lands before the old socket's disconnect is processed.
    await connection_service.on_connect(CAROL, ConnectionId("c-new"), registry, presence)
    transport.presence.clear()

    removed = await connection_service.on_disconnect(CAROL, ConnectionId("c-old"), registry, presence)

    assert removed is False
    assert registry.lookup(CAROL) == "c-new"
    assert transport.presence == []
