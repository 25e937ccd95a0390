from __future__ import annotations


class ClientError(Exception):
    """Base client-side error."""


class SubscriptionError(ClientError):
    """A second incoming-message subscription was requested on one session."""


class SessionStateError(ClientError):
    """Operation not valid in the session's current state."""
