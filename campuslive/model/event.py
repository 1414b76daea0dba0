"""Event types accepted by the dispatcher and messages pushed to clients."""

from __future__ import annotations

import datetime
import typing as t

import pydantic as p

from .base import FrozenModel, utcnow
from .enum import UserRole
from .id import EventID, UserID

EventKind = t.Literal["notify-identity", "message-identity", "broadcast-channel", "broadcast-role", "broadcast-all"]
OutboundKind = EventKind | t.Literal["ack", "error", "pong"]


class BaseEvent(FrozenModel):
    event_id: EventID = p.Field(default_factory=EventID)
    topic: str | None = None
    body: dict[str, t.Any] = p.Field(default_factory=dict)
    timestamp: datetime.datetime = p.Field(default_factory=utcnow)


class NotifyIdentity(BaseEvent):
    """Deliver to every active session of `target` via its notification channel."""

    kind: t.Literal["notify-identity"] = "notify-identity"
    target: UserID


class MessageIdentity(BaseEvent):
    """Point-to-point delivery to `target`'s mailbox channel."""

    kind: t.Literal["message-identity"] = "message-identity"
    target: UserID
    sender: UserID | None = None


class BroadcastChannel(BaseEvent):
    kind: t.Literal["broadcast-channel"] = "broadcast-channel"
    target: str


class BroadcastRole(BaseEvent):
    kind: t.Literal["broadcast-role"] = "broadcast-role"
    target: UserRole
    exclude: UserID | None = None


class BroadcastAll(BaseEvent):
    kind: t.Literal["broadcast-all"] = "broadcast-all"
    target: None = None
    exclude: UserID | None = None


Event = t.Annotated[
    NotifyIdentity | MessageIdentity | BroadcastChannel | BroadcastRole | BroadcastAll,
    p.Field(discriminator="kind"),
]
EventAdapter: p.TypeAdapter[Event] = p.TypeAdapter(Event)


class DisconnectIdentity(FrozenModel):
    """Bridge control message: close every session `target` holds, in every listening process."""

    kind: t.Literal["disconnect-identity"] = "disconnect-identity"
    command_id: EventID = p.Field(default_factory=EventID)
    target: UserID
    reason: str = "account_deactivated"


# everything that travels over the cross-process bridge
BridgeMessage = t.Annotated[
    NotifyIdentity | MessageIdentity | BroadcastChannel | BroadcastRole | BroadcastAll | DisconnectIdentity,
    p.Field(discriminator="kind"),
]
BridgeMessageAdapter: p.TypeAdapter[BridgeMessage] = p.TypeAdapter(BridgeMessage)


class OutboundMessage(FrozenModel):
    """Envelope pushed to a client connection."""

    kind: OutboundKind
    topic: str | None = None
    payload: dict[str, t.Any] = p.Field(default_factory=dict)
    server_timestamp: datetime.datetime = p.Field(default_factory=utcnow)

    @classmethod
    def from_event(cls, event: Event, server_timestamp: datetime.datetime | None = None) -> OutboundMessage:
        return cls(
            kind=event.kind,
            topic=event.topic,
            payload=event.body,
            server_timestamp=server_timestamp or utcnow(),
        )

    @classmethod
    def ack(cls, topic: str, **payload: t.Any) -> OutboundMessage:
        return cls(kind="ack", topic=topic, payload=payload)

    @classmethod
    def error(cls, code: str, message: str, **payload: t.Any) -> OutboundMessage:
        return cls(kind="error", topic="error", payload={"code": code, "message": message, **payload})
