"""Inbound client messages (JSON over the websocket), discriminated on `type`."""

import typing as t

import pydantic as p

from .base import FrozenModel
from .id import UserID


class JoinMessage(FrozenModel):
    type: t.Literal["join"]
    channel: str


class LeaveMessage(FrozenModel):
    type: t.Literal["leave"]
    channel: str


class SendMessage(FrozenModel):
    type: t.Literal["send"]
    to: UserID
    body: dict[str, t.Any] = p.Field(default_factory=dict)


class BroadcastMessage(FrozenModel):
    type: t.Literal["broadcast"]
    channel: str
    topic: str
    body: dict[str, t.Any] = p.Field(default_factory=dict)


class TypingMessage(FrozenModel):
    type: t.Literal["typing"]
    to: UserID
    active: bool = True


class PingMessage(FrozenModel):
    type: t.Literal["ping"]


ClientMessage = t.Annotated[
    JoinMessage | LeaveMessage | SendMessage | BroadcastMessage | TypingMessage | PingMessage,
    p.Field(discriminator="type"),
]
ClientMessageAdapter: p.TypeAdapter[ClientMessage] = p.TypeAdapter(ClientMessage)
