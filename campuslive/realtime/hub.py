"""The realtime hub: the one object transports and producers talk to.

Transports call `connect`, the inbound operations and `on_transport_closed`.
Producers call `publish` after persisting their own state; fan-out is
fire-and-forget.
"""

from __future__ import annotations

import logging
import typing as t

from campuslive.auth import ConnectionAuthenticator, Rejected
from campuslive.model import BroadcastChannel, ChannelKind, ChannelRef, chat_channel, ConnectionID, CourseID, \
    course_channel, Event, EventAdapter, GlobalChannel, Identity, MessageIdentity, notifications_channel, \
    OutboundMessage, parse_channel, role_channel, UserID
from campuslive.model.base import utcnow

from .channel import MembershipChange
from .cleanup import CleanupHandler, participant_event
from .connection import Connection, Transport
from .dispatch import EventDispatcher, TimestampProvider
from .errors import AuthenticationFailure, ChannelNotPermitted, UnknownConnection
from .presence import PresenceTracker
from .state import RealtimeState

logger = logging.getLogger(__name__)

# application-defined websocket close codes
CloseForced: t.Final[int] = 4403
CloseShutdown: t.Final[int] = 1001


class RealtimeHub(object):
    state: RealtimeState
    dispatcher: EventDispatcher
    presence: PresenceTracker
    cleanup_handler: CleanupHandler

    def __init__(
        self,
        state: RealtimeState,
        authenticator: ConnectionAuthenticator,
        queue_size: int = 256,
        presence_enabled: bool = True,
        utcnow: TimestampProvider = utcnow,
    ) -> None:
        self.state = state
        self.authenticator = authenticator
        self.dispatcher = EventDispatcher(state, utcnow=utcnow)
        self.presence = PresenceTracker(self.dispatcher, enabled=presence_enabled)
        self.cleanup_handler = CleanupHandler(state, self.dispatcher, self.presence)
        self._queue_size = queue_size

    # lifecycle

    async def connect(self, credential: str | None, transport: Transport) -> Connection:
        """Authenticate a handshake and bring the connection to life.

        Raises:
            AuthenticationFailure: the credential was rejected; nothing was registered.
        """
        outcome = await self.authenticator.authenticate(credential)
        if isinstance(outcome, Rejected):
            raise AuthenticationFailure(outcome.reason)
        return await self.attach(outcome, transport)

    async def attach(self, identity: Identity, transport: Transport) -> Connection:
        """Register an already-authenticated identity's new connection."""
        connection = Connection(identity, transport, queue_size=self._queue_size)
        cid = connection.connection_id
        self.state.add(connection)

        was_first = await self.state.sessions.register(identity, cid)
        for channel in self.implicit_channels(identity):
            await self.state.channels.join(cid, channel)

        if not connection.is_open:
            # force-closed while attaching; cleanup already unregistered the session
            await self.state.channels.leave_all(cid)
            raise UnknownConnection(cid)

        connection.start(on_failure=self.on_transport_closed)
        if was_first:
            self.presence.online(identity)

        logger.info(
            "connection opened",
            extra={
                "connection_id": str(cid),
                "user_id": identity.user_id,
                "role": identity.role.value,
                "first_session": was_first,
            },
        )
        return connection

    async def on_transport_closed(self, connection_id: ConnectionID) -> bool:
        """Transport close/error callback. Idempotent."""
        return await self.cleanup_handler.cleanup(connection_id)

    async def disconnect(self, user_id: UserID, reason: str = "account_deactivated") -> int:
        """Server-initiated disconnect of every session an identity holds."""
        closed = 0
        for cid in self.state.sessions.sessions_of(user_id):
            connection = self.state.get(cid)
            if not await self.cleanup_handler.cleanup(cid):
                continue
            closed += 1
            if connection is not None:
                await connection.close_transport(code=CloseForced, reason=reason)

        logger.info("forced disconnect", extra={"user_id": user_id, "reason": reason, "closed": closed})
        return closed

    async def shutdown(self) -> None:
        for connection in self.state.connections():
            await connection.close_transport(code=CloseShutdown, reason="server shutdown")
        self.state.clear()

    # channel membership

    @staticmethod
    def implicit_channels(identity: Identity) -> tuple[str, ...]:
        """Channels every connection of `identity` belongs to from birth."""
        return (
            notifications_channel(identity.user_id),
            chat_channel(identity.user_id),
            role_channel(identity.role),
            GlobalChannel,
        )

    async def join(self, connection_id: ConnectionID, channel: str) -> MembershipChange:
        """Join a channel on behalf of a connection.

        Raises:
            ChannelNotPermitted: the channel is someone else's, implicit, or malformed.
            UnknownConnection: the connection is not live.
        """
        connection = self._require(connection_id)
        ref = self._check_membership(connection, channel)
        change = await self.state.channels.join(connection_id, channel)
        if not connection.is_open:
            # closed while waiting on the channel lock; cleanup has already run
            await self.state.channels.leave(connection_id, channel)
            raise UnknownConnection(connection_id)

        if ref.kind is ChannelKind.Course:
            connection.deliver(
                OutboundMessage.ack(
                    "class:joined", channel=channel, course_id=ref.key, participant_count=change.member_count
                )
            )
            if change.changed:
                self._notify_others(connection, change, "class:participant:joined")
        elif ref.kind is ChannelKind.Announcements:
            connection.deliver(OutboundMessage.ack("announcements:joined", channel=channel, course_id=ref.key))
        else:
            connection.deliver(OutboundMessage.ack(f"{ref.kind.value}:joined", channel=channel))
        return change

    async def leave(self, connection_id: ConnectionID, channel: str) -> MembershipChange:
        connection = self._require(connection_id)
        ref = self._check_membership(connection, channel)
        change = await self.state.channels.leave(connection_id, channel)

        if ref.kind is ChannelKind.Course:
            connection.deliver(
                OutboundMessage.ack(
                    "class:left", channel=channel, course_id=ref.key, participant_count=change.member_count
                )
            )
            if change.changed and change.member_count > 0:
                self._notify_others(connection, change, "class:participant:left")
        else:
            connection.deliver(OutboundMessage.ack(f"{ref.kind.value}:left", channel=channel))
        return change

    # sending

    def publish(self, event: Event | t.Mapping[str, t.Any]) -> int:
        """Collaborator entry point: fan out an event to its current audience.

        Returns the number of deliveries; zero when nobody is listening.
        """
        if isinstance(event, t.Mapping):
            event = EventAdapter.validate_python(event)
        return self.dispatcher.dispatch(event)

    def send_direct(self, sender: Identity, to: UserID, payload: t.Mapping[str, t.Any]) -> int:
        event = MessageIdentity(
            target=to,
            sender=sender.user_id,
            topic="new:message",
            body={
                **payload,
                "sender": {
                    "user_id": sender.user_id,
                    "display_name": sender.display_name,
                    "role": sender.role.value,
                },
            },
        )
        return self.dispatcher.dispatch(event)

    def typing(self, sender: Identity, to: UserID, active: bool = True) -> int:
        event = MessageIdentity(
            target=to,
            sender=sender.user_id,
            topic="user:typing" if active else "user:typing:stop",
            body={"user_id": sender.user_id, "display_name": sender.display_name},
        )
        return self.dispatcher.dispatch(event)

    def broadcast(self, connection_id: ConnectionID, channel: str, topic: str, body: t.Mapping[str, t.Any]) -> int:
        """Client-initiated broadcast to a course or course announcements channel; faculty and admins only.

        Raises:
            ChannelNotPermitted: the sender's role may not broadcast, or the channel does not belong to a course.
        """
        connection = self._require(connection_id)
        identity = connection.identity
        if not identity.role.is_privileged:
            raise ChannelNotPermitted(channel, f"role {identity.role.value!r} may not broadcast")

        ref = self._parse(channel)
        if ref.course_id is None:
            raise ChannelNotPermitted(channel, "broadcasts are limited to course channels")

        event = BroadcastChannel(
            target=channel,
            topic=topic,
            body={
                "course_id": ref.course_id,
                **body,
                "updated_by": {"user_id": identity.user_id, "display_name": identity.display_name},
            },
        )
        return self.dispatcher.dispatch(event)

    def reply(self, connection_id: ConnectionID, message: OutboundMessage) -> bool:
        return self.dispatcher.deliver_to(connection_id, message)

    # queries

    def is_online(self, user_id: UserID) -> bool:
        return self.state.sessions.is_online(user_id)

    def online_count(self) -> int:
        return self.state.sessions.online_count()

    def participant_count(self, course_id: CourseID | str) -> int:
        return self.state.channels.member_count(course_channel(course_id))

    # helpers

    def _require(self, connection_id: ConnectionID) -> Connection:
        connection = self.state.get(connection_id)
        if connection is None or not connection.is_open:
            raise UnknownConnection(connection_id)
        return connection

    @staticmethod
    def _parse(channel: str) -> ChannelRef:
        try:
            return parse_channel(channel)
        except ValueError as e:
            raise ChannelNotPermitted(channel, str(e)) from e

    def _check_membership(self, connection: Connection, channel: str) -> ChannelRef:
        ref = self._parse(channel)
        if ref.is_implicit:
            raise ChannelNotPermitted(channel, "membership is derived from role")
        if ref.is_personal and not ref.is_owned_by(connection.identity.user_id):
            raise ChannelNotPermitted(channel)
        return ref

    def _notify_others(self, connection: Connection, change: MembershipChange, topic: str) -> int:
        event = participant_event(change, connection.identity, topic)
        message = OutboundMessage.from_event(event)
        others = [c for c in self.dispatcher.recipients(change.channel) if c.connection_id != connection.connection_id]
        return self.dispatcher.fan_out(others, message)

