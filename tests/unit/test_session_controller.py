from __future__ import annotations

import pytest

from duo_chat.client.exceptions import SessionStateError, SubscriptionError
from duo_chat.client.reconciler import ConversationReconciler
from duo_chat.client.session import ChatSessionController, SessionState, Subscription
from duo_chat.infrastructure.ws.protocol import WsMessage
from tests.conftest import ALICE, BOB, CAROL, FakeClientTransport, FakeHistory, make_message

NEW_MESSAGE = "newMessage"
ONLINE_USERS = "getOnlineUsers"


def _wire(msg) -> dict:
    return WsMessage.from_entity(msg).model_dump(mode="json")


@pytest.fixture
def transport() -> FakeClientTransport:
    return FakeClientTransport()


@pytest.fixture
def history() -> FakeHistory:
    return FakeHistory()


@pytest.fixture
def controller(transport, history) -> ChatSessionController:
    return ChatSessionController(transport, ConversationReconciler(history))


@pytest.mark.asyncio
async def test_connect_opens_once_and_subscribes_once(controller, transport):
    await controller.connect(ALICE)

    assert controller.state is SessionState.CONNECTED
    assert controller.current_user_id == ALICE
    assert transport.open_count == 1
    assert transport.handler_count(NEW_MESSAGE) == 1
    assert transport.handler_count(ONLINE_USERS) == 1


@pytest.mark.asyncio
async def test_connect_twice_is_rejected(controller, transport):
    await controller.connect(ALICE)

    with pytest.raises(SessionStateError):
        await controller.connect(ALICE)
    assert transport.handler_count(NEW_MESSAGE) == 1


@pytest.mark.asyncio
async def test_presence_event_updates_online_users(controller, transport):
    await controller.connect(ALICE)

    transport.emit(ONLINE_USERS, {"user_ids": [ALICE, BOB]})

    assert controller.get_online_users() == frozenset({ALICE, BOB})


@pytest.mark.asyncio
async def test_incoming_message_reaches_reconciler(controller, transport):
    await controller.connect(ALICE)

    transport.emit(NEW_MESSAGE, _wire(make_message(sender_id=BOB, receiver_id=ALICE)))

    assert controller.get_unread_count(BOB) == 1


@pytest.mark.asyncio
async def test_unread_then_select_scenario(controller, transport, history):
    await controller.connect(ALICE)
    transport.emit(ONLINE_USERS, {"user_ids": [ALICE, BOB]})

    transport.emit(NEW_MESSAGE, _wire(make_message(sender_id=BOB, receiver_id=ALICE)))
    assert controller.get_unread_count(BOB) == 1
    assert controller.reconciler.visible_messages == ()

    await controller.reconciler.select_conversation(BOB)

    assert controller.get_unread_count(BOB) == 0
    assert controller.is_selected(BOB)
    assert history.fetched == [BOB]


@pytest.mark.asyncio
async def test_malformed_event_is_dropped(controller, transport):
    await controller.connect(ALICE)

    transport.emit(NEW_MESSAGE, {"id": "x", "text": "no ids"})

    assert controller.reconciler.unread_counts() == {}


@pytest.mark.asyncio
async def test_disconnect_releases_before_closing_and_clears_state(controller, transport):
    await controller.connect(ALICE)
    transport.emit(ONLINE_USERS, {"user_ids": [ALICE, BOB]})
    transport.emit(NEW_MESSAGE, _wire(make_message(sender_id=BOB)))
    transport.events.clear()

    await controller.disconnect()

    assert transport.events.index(f"off:{NEW_MESSAGE}") < transport.events.index("close")
    assert controller.state is SessionState.DISCONNECTED
    assert controller.get_online_users() == frozenset()
    assert controller.get_unread_count(BOB) == 0
    assert transport.handler_count(NEW_MESSAGE) == 0


@pytest.mark.asyncio
async def test_disconnect_when_disconnected_is_noop(controller, transport):
    await controller.disconnect()

    assert transport.close_count == 0


@pytest.mark.asyncio
async def test_reconnect_keeps_single_listener(controller, transport):
    await controller.connect(ALICE)
    await controller.disconnect()
    await controller.connect(ALICE)

    assert transport.handler_count(NEW_MESSAGE) == 1
    transport.emit(NEW_MESSAGE, _wire(make_message(sender_id=CAROL)))
    assert controller.get_unread_count(CAROL) == 1


@pytest.mark.asyncio
async def test_transport_drop_tears_down_and_allows_reconnect(controller, transport):
    await controller.connect(ALICE)
    transport.emit(NEW_MESSAGE, _wire(make_message(sender_id=BOB)))

    await transport.drop()

    assert controller.state is SessionState.DISCONNECTED
    assert transport.handler_count(NEW_MESSAGE) == 0
    assert controller.get_unread_count(BOB) == 0

    await controller.connect(ALICE)
    assert transport.handler_count(NEW_MESSAGE) == 1


@pytest.mark.asyncio
async def test_second_message_subscription_is_refused(controller, transport):
    await controller.connect(ALICE)

    with pytest.raises(SubscriptionError):
        controller.listen_messages()
    assert transport.handler_count(NEW_MESSAGE) == 1


def test_released_subscription_stays_released(transport):
    def handler(data: dict) -> None:
        pass

    sub = Subscription(transport, NEW_MESSAGE, handler)
    sub.release()
    sub.release()

    assert sub.active is False
    assert transport.handler_count(NEW_MESSAGE) == 0
