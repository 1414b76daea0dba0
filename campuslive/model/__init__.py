__all__ = [
    # Base
    "BaseModel",
    "FrozenModel",
    # Enums
    "DeploymentEnvironment",
    "PresenceStatus",
    "UserRole",
    # ID Types
    "ConnectionID",
    "CourseID",
    "EventID",
    "UserID",
    # Identity
    "Identity",
    "IdentityRecord",
    # Channels
    "ChannelKind",
    "ChannelRef",
    "GlobalChannel",
    "announcements_channel",
    "chat_channel",
    "course_channel",
    "notifications_channel",
    "parse_channel",
    "role_channel",
    # Events
    "BroadcastAll",
    "BroadcastChannel",
    "BroadcastRole",
    "BridgeMessage",
    "BridgeMessageAdapter",
    "DisconnectIdentity",
    "Event",
    "EventAdapter",
    "EventKind",
    "MessageIdentity",
    "NotifyIdentity",
    "OutboundMessage",
    # Client messages
    "BroadcastMessage",
    "ClientMessage",
    "ClientMessageAdapter",
    "JoinMessage",
    "LeaveMessage",
    "PingMessage",
    "SendMessage",
    "TypingMessage",
]

from .base import BaseModel, FrozenModel
from .channel import announcements_channel, ChannelKind, ChannelRef, chat_channel, course_channel, GlobalChannel, \
    notifications_channel, parse_channel, role_channel
from .enum import DeploymentEnvironment, PresenceStatus, UserRole
from .event import BridgeMessage, BridgeMessageAdapter, BroadcastAll, BroadcastChannel, BroadcastRole, \
    DisconnectIdentity, Event, EventAdapter, EventKind, MessageIdentity, NotifyIdentity, OutboundMessage
from .id import ConnectionID, CourseID, EventID, UserID
from .identity import Identity, IdentityRecord
from .message import BroadcastMessage, ClientMessage, ClientMessageAdapter, JoinMessage, LeaveMessage, PingMessage, \
    SendMessage, TypingMessage
