"""Per-connection inbound message handling, independent of the transport."""

from __future__ import annotations

import logging
import typing as t

import pydantic as p

from campuslive.model import BroadcastMessage, ClientMessage, ClientMessageAdapter, JoinMessage, LeaveMessage, \
    OutboundMessage, PingMessage, SendMessage, TypingMessage

from .connection import Connection
from .errors import RealtimeError
from .hub import RealtimeHub

logger = logging.getLogger(__name__)


class ConnectionHandler(object):
    """Decodes client messages for one connection and routes them to the hub.

    Rejected requests are answered with an `error` message to this connection
    only; the connection stays open.
    """

    def __init__(self, hub: RealtimeHub, connection: Connection) -> None:
        self.hub = hub
        self.connection = connection

    async def receive(self, data: str | bytes) -> None:
        try:
            message = ClientMessageAdapter.validate_json(data)
        except p.ValidationError as e:
            logger.debug(
                "invalid client message",
                extra={"connection_id": str(self.connection.connection_id), "errors": e.error_count()},
            )
            self._reply(OutboundMessage.error("invalid_message", "message could not be parsed"))
            return
        await self.handle(message)

    async def handle(self, message: ClientMessage) -> None:
        try:
            await self._route(message)
        except RealtimeError as e:
            logger.info(
                "request rejected",
                extra={
                    "connection_id": str(self.connection.connection_id),
                    "type": message.type,
                    "code": e.code,
                },
            )
            self._reply(OutboundMessage.error(e.code, str(e), request=message.type))

    async def _route(self, message: ClientMessage) -> None:
        cid = self.connection.connection_id
        identity = self.connection.identity
        match message:
            case JoinMessage(channel=channel):
                await self.hub.join(cid, channel)
            case LeaveMessage(channel=channel):
                await self.hub.leave(cid, channel)
            case SendMessage(to=to, body=body):
                self.hub.send_direct(identity, to, body)
                self._reply(OutboundMessage.ack("message:sent", receiver_id=to))
            case BroadcastMessage(channel=channel, topic=topic, body=body):
                delivered = self.hub.broadcast(cid, channel, topic, body)
                self._reply(OutboundMessage.ack("broadcast:sent", channel=channel, delivered=delivered))
            case TypingMessage(to=to, active=active):
                self.hub.typing(identity, to, active)
            case PingMessage():
                self._reply(OutboundMessage(kind="pong", topic="pong"))
            case _:
                t.assert_never(message)

    def _reply(self, message: OutboundMessage) -> None:
        self.hub.reply(self.connection.connection_id, message)
