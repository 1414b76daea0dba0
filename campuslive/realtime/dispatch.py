"""Event dispatcher: routes one event to the connections subscribed to its target."""

from __future__ import annotations

import datetime
import logging
import typing as t

from campuslive.model import BroadcastAll, BroadcastChannel, BroadcastRole, chat_channel, ConnectionID, Event, \
    GlobalChannel, MessageIdentity, notifications_channel, NotifyIdentity, OutboundMessage, role_channel, UserID
from campuslive.model.base import utcnow

from .connection import Connection
from .errors import TargetUnreachable
from .state import RealtimeState

logger = logging.getLogger(__name__)

TimestampProvider = t.Callable[[], datetime.datetime]


def resolve_channel(event: Event) -> str:
    """The channel whose roster receives `event`."""
    match event:
        case NotifyIdentity(target=user_id):
            return notifications_channel(user_id)
        case MessageIdentity(target=user_id):
            return chat_channel(user_id)
        case BroadcastChannel(target=channel):
            return channel
        case BroadcastRole(target=role):
            return role_channel(role)
        case BroadcastAll():
            return GlobalChannel
        case _:
            t.assert_never(event)


def excluded_identity(event: Event) -> UserID | None:
    match event:
        case BroadcastRole(exclude=user_id) | BroadcastAll(exclude=user_id):
            return user_id
        case NotifyIdentity() | MessageIdentity() | BroadcastChannel():
            return None
        case _:
            t.assert_never(event)


class EventDispatcher(object):
    """Fans events out to member connections.

    Dispatch only reads in-memory rosters and enqueues onto per-connection
    outboxes; it never awaits I/O. Delivery is at-most-once per connection, and
    a target with no sessions simply yields zero deliveries.
    """

    def __init__(self, state: RealtimeState, utcnow: TimestampProvider = utcnow) -> None:
        self._state = state
        self._utcnow = utcnow

    def dispatch(self, event: Event) -> int:
        """Deliver `event` to every current member of its target channel.

        Returns the number of connections the event was handed to.
        """
        channel = resolve_channel(event)
        recipients = self.recipients(channel, exclude=excluded_identity(event))
        message = OutboundMessage.from_event(event, server_timestamp=self._utcnow())
        delivered = self.fan_out(recipients, message)

        if delivered == 0 and isinstance(event, NotifyIdentity | MessageIdentity):
            logger.debug(
                "target unreachable, dropping event",
                extra={
                    "kind": event.kind,
                    "target": event.target,
                    "event_id": str(event.event_id),
                    "code": TargetUnreachable.code,
                },
            )
        else:
            logger.debug(
                "dispatched event",
                extra={
                    "kind": event.kind,
                    "channel": channel,
                    "topic": event.topic,
                    "event_id": str(event.event_id),
                    "delivered": delivered,
                },
            )
        return delivered

    def recipients(self, channel: str, exclude: UserID | None = None) -> list[Connection]:
        connections = self._state.resolve(self._state.channels.members_of(channel))
        if exclude is None:
            return connections
        return [c for c in connections if c.identity.user_id != exclude]

    def fan_out(self, connections: t.Iterable[Connection], message: OutboundMessage) -> int:
        return sum(1 for c in connections if c.deliver(message))

    def deliver_to(self, connection_id: ConnectionID, message: OutboundMessage) -> bool:
        """Push a message to a single connection (acks, errors)."""
        connection = self._state.get(connection_id)
        if connection is None:
            return False
        return connection.deliver(message)
