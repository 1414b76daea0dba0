from __future__ import annotations

import logging

from campuslive.model import BroadcastAll, Identity, PresenceStatus

from .dispatch import EventDispatcher

logger = logging.getLogger(__name__)


class PresenceTracker(object):
    """Announces online/offline transitions reported by the session registry.

    No history is kept. The announcement goes to every other connected
    identity, not to the user's contacts only.
    """

    def __init__(self, dispatcher: EventDispatcher, enabled: bool = True) -> None:
        self._dispatcher = dispatcher
        self._enabled = enabled

    def online(self, identity: Identity) -> int:
        return self._announce(identity, PresenceStatus.Online)

    def offline(self, identity: Identity) -> int:
        return self._announce(identity, PresenceStatus.Offline)

    def _announce(self, identity: Identity, status: PresenceStatus) -> int:
        if not self._enabled:
            return 0

        # NOTE: broadcast to all connections, not contact-scoped
        event = BroadcastAll(
            topic=f"user:{status.value}",
            body={
                "user_id": identity.user_id,
                "display_name": identity.display_name,
                "status": status.value,
            },
            exclude=identity.user_id,
        )
        delivered = self._dispatcher.dispatch(event)
        logger.info(
            "presence changed",
            extra={"user_id": identity.user_id, "status": status.value, "delivered": delivered},
        )
        return delivered
