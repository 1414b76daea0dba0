"""Session registry: identity -> set of live connection IDs."""

from __future__ import annotations

import logging

from campuslive.model import ConnectionID, Identity, UserID

from .locks import StripedLock

logger = logging.getLogger(__name__)


class SessionRegistry(object):
    """Tracks which connections each identity holds.

    An identity is online iff its session set is non-empty. Mutations for one
    identity are serialized, so across any interleaving of `register` and
    `unregister` exactly one call reports the empty -> non-empty edge and
    exactly one reports the non-empty -> empty edge.
    """

    def __init__(self, stripes: int = 64) -> None:
        self._sessions: dict[UserID, set[ConnectionID]] = {}
        self._locks = StripedLock(stripes)

    async def register(self, identity: Identity, connection_id: ConnectionID) -> bool:
        """Add a session. Returns True if this is the identity's first session."""
        async with self._locks.lock_for(identity.user_id):
            sessions = self._sessions.setdefault(identity.user_id, set())
            was_first = not sessions
            sessions.add(connection_id)

        logger.debug(
            "registered session",
            extra={
                "user_id": identity.user_id,
                "connection_id": str(connection_id),
                "first": was_first,
            },
        )
        return was_first

    async def unregister(self, identity: Identity, connection_id: ConnectionID) -> bool:
        """Remove a session. Returns True if it was the identity's last session.

        Removing a connection that is not registered is a no-op returning False.
        """
        async with self._locks.lock_for(identity.user_id):
            sessions = self._sessions.get(identity.user_id)
            if sessions is None or connection_id not in sessions:
                return False
            sessions.discard(connection_id)
            was_last = not sessions
            if was_last:
                del self._sessions[identity.user_id]

        logger.debug(
            "unregistered session",
            extra={
                "user_id": identity.user_id,
                "connection_id": str(connection_id),
                "last": was_last,
            },
        )
        return was_last

    def is_online(self, user_id: UserID) -> bool:
        return bool(self._sessions.get(user_id))

    def online_count(self) -> int:
        return len(self._sessions)

    def sessions_of(self, user_id: UserID) -> frozenset[ConnectionID]:
        return frozenset(self._sessions.get(user_id, ()))

    def online_identities(self) -> frozenset[UserID]:
        return frozenset(self._sessions)

    def clear(self) -> None:
        self._sessions.clear()
