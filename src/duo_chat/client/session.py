"""Connection lifecycle of one logged-in client."""
from __future__ import annotations

import logging
from enum import StrEnum
from typing import Any

from pydantic import ValidationError

from duo_chat.client.exceptions import SessionStateError, SubscriptionError
from duo_chat.client.ports import ChatTransport, EventHandler
from duo_chat.client.reconciler import ConversationReconciler, Outcome
from duo_chat.domain.value_objects.enums import EventType
from duo_chat.domain.value_objects.ids import UserId
from duo_chat.infrastructure.ws.protocol import WsMessage

logger = logging.getLogger(__name__)


class SessionState(StrEnum):
    DISCONNECTED = "disconnected"
    CONNECTED = "connected"


class Subscription:
    """One handler bound to one event on one open transport.

    Created when a connection opens, released before it closes. A released
    subscription cannot be re-activated; a fresh connection gets a fresh one.
    """

    def __init__(self, transport: ChatTransport, event: str, handler: EventHandler) -> None:
        self._transport = transport
        self._event = event
        self._handler = handler
        self._active = True
        transport.on(event, handler)

    @property
    def active(self) -> bool:
        return self._active

    def release(self) -> None:
        if not self._active:
            return
        self._transport.off(self._event, self._handler)
        self._active = False


class ChatSessionController:
    def __init__(self, transport: ChatTransport, reconciler: ConversationReconciler) -> None:
        self._transport = transport
        self._reconciler = reconciler
        self._state = SessionState.DISCONNECTED
        self._user_id: UserId | None = None
        self._online: frozenset[UserId] = frozenset()
        self._messages_sub: Subscription | None = None
        self._presence_sub: Subscription | None = None

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def current_user_id(self) -> UserId | None:
        return self._user_id

    @property
    def reconciler(self) -> ConversationReconciler:
        return self._reconciler

    async def connect(self, user_id: UserId) -> None:
        """Open the channel for an authenticated user and start listening."""
        if self._state is SessionState.CONNECTED:
            raise SessionStateError("Session is already connected")

        self._user_id = user_id
        await self._transport.open(on_closed=self._on_transport_closed)
        self._presence_sub = Subscription(self._transport, EventType.ONLINE_USERS, self._on_presence)
        self.listen_messages()
        self._state = SessionState.CONNECTED
        logger.info("Session connected for %s", user_id)

    async def disconnect(self) -> None:
        """Logout path: stop handlers, close the channel, forget local state."""
        if self._state is SessionState.DISCONNECTED:
            return
        self._release_subscriptions()
        await self._transport.close()
        self._teardown()
        logger.info("Session disconnected")

    def listen_messages(self) -> None:
        """Route incoming messages to the reconciler.

        Called once per connection by ``connect``. Raises ``SubscriptionError``
        while a previous subscription is still active.
        """
        if self._messages_sub is not None and self._messages_sub.active:
            raise SubscriptionError("Incoming-message subscription already active")
        self._messages_sub = Subscription(self._transport, EventType.NEW_MESSAGE, self._on_new_message)

    def _release_subscriptions(self) -> None:
        for sub in (self._messages_sub, self._presence_sub):
            if sub is not None:
                sub.release()
        self._messages_sub = None
        self._presence_sub = None

    def _teardown(self) -> None:
        self._state = SessionState.DISCONNECTED
        self._online = frozenset()
        self._reconciler.reset()

    async def _on_transport_closed(self) -> None:
        if self._state is SessionState.DISCONNECTED:
            return
        logger.warning("Connection lost for %s", self._user_id)
        self._release_subscriptions()
        self._teardown()

    def _on_presence(self, data: dict[str, Any]) -> None:
        self._online = frozenset(UserId(str(u)) for u in data.get("user_ids") or ())

    def _on_new_message(self, data: dict[str, Any]) -> None:
        if self._user_id is None:
            return
        try:
            message = WsMessage.model_validate(data).to_entity()
        except ValidationError:
            logger.warning("Dropping malformed message event: %r", data)
            return
        outcome = self._reconciler.on_incoming_message(message, self._user_id)
        if outcome is Outcome.DROPPED:
            logger.warning("Dropping message %s not addressed to %s", message.id, self._user_id)

    def get_online_users(self) -> frozenset[UserId]:
        return self._online

    def get_unread_count(self, user_id: UserId) -> int:
        return self._reconciler.get_unread_count(user_id)

    def is_selected(self, user_id: UserId) -> bool:
        return self._reconciler.is_selected(user_id)
