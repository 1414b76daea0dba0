"""Disconnect handling: unwind a connection's registrations in a fixed order."""

from __future__ import annotations

import logging

from campuslive.model import BroadcastChannel, ChannelKind, ConnectionID, Identity, parse_channel

from .channel import MembershipChange
from .dispatch import EventDispatcher
from .errors import InternalInconsistency
from .presence import PresenceTracker
from .state import RealtimeState

logger = logging.getLogger(__name__)


def participant_event(change: MembershipChange, identity: Identity, topic: str) -> BroadcastChannel:
    """Roster update for the remaining members of a course channel."""
    ref = parse_channel(change.channel)
    return BroadcastChannel(
        target=change.channel,
        topic=topic,
        body={
            "course_id": ref.key,
            "user_id": identity.user_id,
            "display_name": identity.display_name,
            "role": identity.role.value,
            "participant_count": change.member_count,
        },
    )


class CleanupHandler(object):
    """Moves a connection from Open to Closed exactly once.

    On the transition: leave every channel (telling remaining course members the
    new participant count), unregister the session, then announce offline if it
    was the identity's last session. A failing step is logged and the remaining
    steps still run. Cleanup of an unknown or already-closed connection is a
    logged no-op.
    """

    def __init__(self, state: RealtimeState, dispatcher: EventDispatcher, presence: PresenceTracker) -> None:
        self._state = state
        self._dispatcher = dispatcher
        self._presence = presence

    async def cleanup(self, connection_id: ConnectionID) -> bool:
        """Returns True if this call performed the Open -> Closed transition."""
        connection = self._state.get(connection_id)
        if connection is None or not connection.mark_closed():
            logger.info(
                "cleanup skipped, connection unknown or closed",
                extra={"connection_id": str(connection_id), "code": InternalInconsistency.code},
            )
            return False

        connection.stop()
        identity = connection.identity
        try:
            try:
                changes = await self._state.channels.leave_all(connection_id)
            except Exception:
                logger.exception("cleanup failed to leave channels", extra={"connection_id": str(connection_id)})
            else:
                self._report_departures(identity, changes)

            was_last = False
            try:
                was_last = await self._state.sessions.unregister(identity, connection_id)
            except Exception:
                logger.exception("cleanup failed to unregister session", extra={"connection_id": str(connection_id)})

            if was_last:
                try:
                    self._presence.offline(identity)
                except Exception:
                    logger.exception("cleanup failed to announce offline", extra={"user_id": identity.user_id})
        finally:
            self._state.discard(connection_id)

        logger.info(
            "connection closed",
            extra={"connection_id": str(connection_id), "user_id": identity.user_id},
        )
        return True

    def _report_departures(self, identity: Identity, changes: list[MembershipChange]) -> None:
        for change in changes:
            try:
                if change.kind is not ChannelKind.Course or change.member_count == 0:
                    continue
                self._dispatcher.dispatch(participant_event(change, identity, "class:participant:left"))
            except Exception:
                logger.exception("cleanup failed to report departure", extra={"channel": change.channel})
