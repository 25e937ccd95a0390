from __future__ import annotations

from enum import StrEnum


class EventType(StrEnum):
    """Realtime event names pushed to and received from clients."""

    ONLINE_USERS = "getOnlineUsers"
    NEW_MESSAGE = "newMessage"
    PING = "ping"
    PONG = "pong"
    ERROR = "error"
