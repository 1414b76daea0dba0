"""Error taxonomy for the realtime core."""

from __future__ import annotations

from campuslive.auth.authenticator import RejectionReason
from campuslive.model import ConnectionID


class RealtimeError(Exception):
    code: str = "realtime_error"

    def __init__(self, message: str, code: str | None = None):
        super().__init__(message)
        if code is not None:
            self.code = code


class AuthenticationFailure(RealtimeError):
    """Handshake refused; the connection never enters the session registry."""

    code = "authentication_failure"

    def __init__(self, reason: RejectionReason):
        super().__init__(f"authentication failed: {reason.value}", code=reason.value)
        self.reason = reason


class ChannelNotPermitted(RealtimeError):
    """The request is rejected but the connection stays open."""

    code = "channel_not_permitted"

    def __init__(self, channel: str, message: str | None = None):
        super().__init__(message or f"not permitted on channel {channel!r}")
        self.channel = channel


class TargetUnreachable(RealtimeError):
    """Names a dispatch to an identity with no active sessions.

    Never raised to publishers: fan-out is fire-and-forget.
    """

    code = "target_unreachable"


class UnknownConnection(RealtimeError):
    code = "unknown_connection"

    def __init__(self, connection_id: ConnectionID):
        super().__init__(f"unknown connection: {connection_id}")
        self.connection_id = connection_id


class InternalInconsistency(RealtimeError):
    """Cleanup invoked for an unknown or already-closed connection."""

    code = "internal_inconsistency"
