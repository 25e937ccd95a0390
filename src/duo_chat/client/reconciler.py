"""Client-side routing of incoming messages.

Every incoming message ends up in exactly one place: the visible history of
the selected conversation, the unread counter of its peer, or nowhere (own
echoes for a conversation that isn't open, duplicates, malformed input).

The transitions are plain functions over an immutable ``ReconcilerState`` so
they can be exercised without a socket; ``ConversationReconciler`` wraps them
with the current state and the history fetch.
"""
from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, replace
from enum import StrEnum
from types import MappingProxyType

from duo_chat.client.ports import HistoryFetcher
from duo_chat.domain.entities.message import Message
from duo_chat.domain.value_objects.ids import UserId

logger = logging.getLogger(__name__)


class Outcome(StrEnum):
    APPENDED = "appended"
    COUNTED = "counted"
    IGNORED = "ignored"
    DROPPED = "dropped"


@dataclass(frozen=True, slots=True)
class ReconcilerState:
    selected_user: UserId | None = None
    unread: Mapping[UserId, int] = field(default_factory=lambda: MappingProxyType({}))
    visible: tuple[Message, ...] = ()


def _without(unread: Mapping[UserId, int], user_id: UserId) -> Mapping[UserId, int]:
    if user_id not in unread:
        return unread
    return MappingProxyType({k: v for k, v in unread.items() if k != user_id})


def apply_incoming(
    state: ReconcilerState,
    message: Message,
    current_user_id: UserId,
) -> tuple[ReconcilerState, Outcome]:
    if not message.sender_id or not message.receiver_id or not message.involves(current_user_id):
        return state, Outcome.DROPPED

    peer = message.peer_of(current_user_id)

    if state.selected_user is not None and peer == state.selected_user:
        if any(m.id == message.id for m in state.visible):
            return state, Outcome.IGNORED
        return replace(state, visible=state.visible + (message,)), Outcome.APPENDED

    # Own echo for a conversation that isn't open: never a notification.
    if message.sender_id == current_user_id:
        return state, Outcome.IGNORED

    unread = dict(state.unread)
    unread[peer] = unread.get(peer, 0) + 1
    return replace(state, unread=MappingProxyType(unread)), Outcome.COUNTED


def select(state: ReconcilerState, user_id: UserId) -> ReconcilerState:
    return ReconcilerState(
        selected_user=user_id,
        unread=_without(state.unread, user_id),
        visible=(),
    )


def deselect(state: ReconcilerState) -> ReconcilerState:
    return replace(state, selected_user=None)


def load_history(
    state: ReconcilerState,
    user_id: UserId,
    history: Iterable[Message],
) -> ReconcilerState:
    """Install fetched history for ``user_id`` if it is still selected.

    Live messages appended while the fetch was in flight are kept after the
    fetched ones unless the fetch already returned them.
    """
    if state.selected_user != user_id:
        return state
    fetched = tuple(history)
    seen = {m.id for m in fetched}
    live = tuple(m for m in state.visible if m.id not in seen)
    return replace(state, visible=fetched + live, unread=_without(state.unread, user_id))


class ConversationReconciler:
    def __init__(self, history: HistoryFetcher) -> None:
        self._history = history
        self._state = ReconcilerState()

    @property
    def state(self) -> ReconcilerState:
        return self._state

    @property
    def selected_user(self) -> UserId | None:
        return self._state.selected_user

    @property
    def visible_messages(self) -> tuple[Message, ...]:
        return self._state.visible

    def on_incoming_message(self, message: Message, current_user_id: UserId) -> Outcome:
        self._state, outcome = apply_incoming(self._state, message, current_user_id)
        return outcome

    async def select_conversation(self, user_id: UserId) -> None:
        self._state = select(self._state, user_id)
        messages = await self._history.fetch(user_id)
        self._state = load_history(self._state, user_id, messages)
        if self._state.selected_user != user_id:
            logger.debug("Discarded history for %s, selection moved on", user_id)

    def deselect_conversation(self) -> None:
        self._state = deselect(self._state)

    def get_unread_count(self, user_id: UserId) -> int:
        return self._state.unread.get(user_id, 0)

    def unread_counts(self) -> dict[UserId, int]:
        return dict(self._state.unread)

    def is_selected(self, user_id: UserId) -> bool:
        return self._state.selected_user == user_id

    def reset(self) -> None:
        self._state = ReconcilerState()
