"""Process-wide map of users to their live websocket connection."""
from __future__ import annotations

import logging
import threading

from duo_chat.domain.value_objects.ids import ConnectionId, UserId

logger = logging.getLogger(__name__)


class ConnectionRegistry:
    """Holds at most one connection id per user; the latest connect wins.

    A replaced connection is not closed here. Its own disconnect later calls
    ``unregister`` with the old id, which is ignored.
    """

    def __init__(self) -> None:
        self._connections: dict[UserId, ConnectionId] = {}
        self._lock = threading.Lock()

    def register(self, user_id: UserId, connection_id: ConnectionId) -> None:
        with self._lock:
            previous = self._connections.get(user_id)
            self._connections[user_id] = connection_id
        if previous is not None and previous != connection_id:
            logger.debug("Connection %s replaced %s for %s", connection_id, previous, user_id)

    def unregister(self, user_id: UserId, connection_id: ConnectionId) -> bool:
        """Remove the entry only if it still points at ``connection_id``.

        Returns True when an entry was removed.
        """
        with self._lock:
            if self._connections.get(user_id) != connection_id:
                return False
            del self._connections[user_id]
        return True

    def lookup(self, user_id: UserId) -> ConnectionId | None:
        with self._lock:
            return self._connections.get(user_id)

    def snapshot(self) -> dict[UserId, ConnectionId]:
        with self._lock:
            return dict(self._connections)

    def snapshot_identities(self) -> frozenset[UserId]:
        with self._lock:
            return frozenset(self._connections)

    def __len__(self) -> int:
        with self._lock:
            return len(self._connections)
