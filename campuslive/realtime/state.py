"""Process-local realtime state, constructed explicitly and passed by handle."""

from __future__ import annotations

import logging
import typing as t

from campuslive.model import ConnectionID

from .channel import ChannelManager
from .connection import Connection
from .session import SessionRegistry

logger = logging.getLogger(__name__)


class RealtimeState(object):
    """Owns the session registry, channel rosters and the live connection table.

    Created at server start and cleared at shutdown; nothing here survives a
    restart. Tests construct independent instances freely.
    """

    sessions: SessionRegistry
    channels: ChannelManager

    def __init__(self, stripes: int = 64) -> None:
        self.sessions = SessionRegistry(stripes=stripes)
        self.channels = ChannelManager(stripes=stripes)
        self._connections: dict[ConnectionID, Connection] = {}

    def __len__(self) -> int:
        return len(self._connections)

    def __contains__(self, connection_id: object) -> bool:
        return connection_id in self._connections

    def add(self, connection: Connection) -> None:
        self._connections[connection.connection_id] = connection

    def get(self, connection_id: ConnectionID) -> Connection | None:
        return self._connections.get(connection_id)

    def discard(self, connection_id: ConnectionID) -> Connection | None:
        return self._connections.pop(connection_id, None)

    def connections(self) -> list[Connection]:
        return list(self._connections.values())

    def resolve(self, connection_ids: t.Iterable[ConnectionID]) -> list[Connection]:
        """Map IDs to open connections, skipping any that are gone or closing."""
        resolved: list[Connection] = []
        for cid in connection_ids:
            connection = self._connections.get(cid)
            if connection is not None and connection.is_open:
                resolved.append(connection)
        return resolved

    def clear(self) -> None:
        for connection in self._connections.values():
            connection.mark_closed()
            connection.stop()
        count = len(self._connections)
        self._connections.clear()
        self.sessions.clear()
        self.channels.clear()
        logger.info("cleared realtime state", extra={"connections": count})


def provide_realtime_state(stripes: int = 64) -> t.Generator[RealtimeState, None, None]:
    """Resource lifecycle: created at start, cleared at shutdown."""
    state = RealtimeState(stripes=stripes)
    yield state
    state.clear()
