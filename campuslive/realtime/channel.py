"""Channel manager: channel name -> set of member connection IDs."""

from __future__ import annotations

import logging
import typing as t

from campuslive.model import ChannelKind, ConnectionID, parse_channel

from .locks import StripedLock

logger = logging.getLogger(__name__)


class MembershipChange(t.NamedTuple):
    """Outcome of a membership mutation on one channel."""

    channel: str
    changed: bool
    member_count: int

    @property
    def kind(self) -> ChannelKind:
        return parse_channel(self.channel).kind


class ChannelManager(object):
    """Rosters for every channel, plus the reverse index used by cleanup.

    Rosters are sets, so a connection appears at most once per channel. Joins and
    leaves are idempotent and serialized per channel name; unrelated channels do
    not contend unless they hash to the same lock stripe. Empty channels are
    discarded.
    """

    def __init__(self, stripes: int = 64) -> None:
        self._members: dict[str, set[ConnectionID]] = {}
        self._memberships: dict[ConnectionID, set[str]] = {}
        self._locks = StripedLock(stripes)

    async def join(self, connection_id: ConnectionID, channel: str) -> MembershipChange:
        async with self._locks.lock_for(channel):
            members = self._members.setdefault(channel, set())
            changed = connection_id not in members
            if changed:
                members.add(connection_id)
                self._memberships.setdefault(connection_id, set()).add(channel)
            count = len(members)

        if changed:
            logger.debug(
                "joined channel",
                extra={"channel": channel, "connection_id": str(connection_id), "members": count},
            )
        return MembershipChange(channel, changed, count)

    async def leave(self, connection_id: ConnectionID, channel: str) -> MembershipChange:
        async with self._locks.lock_for(channel):
            changed, count = self._remove(connection_id, channel)

        if changed:
            logger.debug(
                "left channel",
                extra={"channel": channel, "connection_id": str(connection_id), "members": count},
            )
        return MembershipChange(channel, changed, count)

    async def leave_all(self, connection_id: ConnectionID) -> list[MembershipChange]:
        """Remove a connection from every channel it belongs to.

        Returns one change per channel whose roster shrank, carrying the
        remaining member count. Other connections' memberships are untouched.
        """
        changes: list[MembershipChange] = []
        for channel in sorted(self.channels_of(connection_id)):
            async with self._locks.lock_for(channel):
                changed, count = self._remove(connection_id, channel)
            if changed:
                changes.append(MembershipChange(channel, changed, count))

        # drop the reverse entry even if a concurrent leave already emptied it
        self._memberships.pop(connection_id, None)
        return changes

    def members_of(self, channel: str) -> frozenset[ConnectionID]:
        return frozenset(self._members.get(channel, ()))

    def member_count(self, channel: str) -> int:
        return len(self._members.get(channel, ()))

    def channels_of(self, connection_id: ConnectionID) -> frozenset[str]:
        return frozenset(self._memberships.get(connection_id, ()))

    def channels(self) -> frozenset[str]:
        return frozenset(self._members)

    def clear(self) -> None:
        self._members.clear()
        self._memberships.clear()

    def _remove(self, connection_id: ConnectionID, channel: str) -> tuple[bool, int]:
        """Remove under the channel's lock; caller must hold it."""
        members = self._members.get(channel)
        if members is None or connection_id not in members:
            return False, len(members or ())

        members.discard(connection_id)
        count = len(members)
        if not members:
            del self._members[channel]

        joined = self._memberships.get(connection_id)
        if joined is not None:
            joined.discard(channel)
            if not joined:
                del self._memberships[connection_id]
        return True, count
