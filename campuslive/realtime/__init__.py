"""Realtime session multiplexing, channel membership and fan-out."""

__all__ = [
    "AuthenticationFailure",
    "ChannelManager",
    "ChannelNotPermitted",
    "CleanupHandler",
    "Connection",
    "ConnectionHandler",
    "ConnectionState",
    "EventBridge",
    "EventDispatcher",
    "InternalInconsistency",
    "LocalEventBridge",
    "MembershipChange",
    "PresenceTracker",
    "RealtimeError",
    "RealtimeHub",
    "RealtimeState",
    "RedisEventBridge",
    "SessionRegistry",
    "StripedLock",
    "TargetUnreachable",
    "Transport",
    "UnknownConnection",
]

from .bridge import EventBridge, LocalEventBridge, RedisEventBridge
from .channel import ChannelManager, MembershipChange
from .cleanup import CleanupHandler
from .connection import Connection, ConnectionState, Transport
from .dispatch import EventDispatcher
from .errors import AuthenticationFailure, ChannelNotPermitted, InternalInconsistency, RealtimeError, \
    TargetUnreachable, UnknownConnection
from .handler import ConnectionHandler
from .hub import RealtimeHub
from .locks import StripedLock
from .presence import PresenceTracker
from .session import SessionRegistry
from .state import RealtimeState
