"""Live connections and the transport seam.

A `Connection` owns a transport handle and a back-reference to its identity. It
is born at a successful handshake and closed exactly once. Pushes are enqueued
onto a bounded outbox and written by a per-connection task, so fan-out never
waits on a slow client.
"""

from __future__ import annotations

import asyncio
import enum
import logging
import typing as t

from campuslive.model import ConnectionID, Identity, OutboundMessage

logger = logging.getLogger(__name__)

FailureCallback = t.Callable[[ConnectionID], t.Awaitable[t.Any]]


class Transport(t.Protocol):
    """What the realtime core needs from a concrete transport (websocket, etc.)."""

    async def send(self, message: OutboundMessage) -> None: ...

    async def close(self, code: int = 1000, reason: str = "") -> None: ...


class ConnectionState(enum.Enum):
    Open = "open"
    Closed = "closed"


class Connection(object):
    connection_id: ConnectionID
    identity: Identity
    transport: Transport

    def __init__(
        self,
        identity: Identity,
        transport: Transport,
        queue_size: int = 256,
        connection_id: ConnectionID | None = None,
    ) -> None:
        self.connection_id = connection_id or ConnectionID()
        self.identity = identity
        self.transport = transport
        self._state = ConnectionState.Open
        self._outbox: asyncio.Queue[OutboundMessage] = asyncio.Queue(maxsize=queue_size)
        self._writer: asyncio.Task[None] | None = None

    def __repr__(self) -> str:
        return f"<Connection {self.connection_id.key} user={self.identity.user_id} {self._state.value}>"

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def is_open(self) -> bool:
        return self._state is ConnectionState.Open

    @property
    def pending(self) -> int:
        return self._outbox.qsize()

    def start(self, on_failure: FailureCallback | None = None) -> None:
        """Start the writer task. Must be called from within the event loop."""
        if self._writer is not None:
            return
        self._writer = asyncio.create_task(
            self._write_loop(on_failure), name=f"campuslive-writer-{self.connection_id.key}"
        )

    def deliver(self, message: OutboundMessage) -> bool:
        """Enqueue a message for this connection; never waits.

        Returns False when the connection is closed or its outbox is full, in
        which case the message is dropped for this connection only.
        """
        if not self.is_open:
            return False
        try:
            self._outbox.put_nowait(message)
        except asyncio.QueueFull:
            logger.warning(
                "outbox full, dropping message",
                extra={
                    "connection_id": str(self.connection_id),
                    "user_id": self.identity.user_id,
                    "kind": message.kind,
                    "topic": message.topic,
                },
            )
            return False
        return True

    async def drain(self) -> None:
        """Wait until every enqueued message has been handed to the transport."""
        await self._outbox.join()

    def mark_closed(self) -> bool:
        """Transition Open -> Closed. Returns False if already closed."""
        if self._state is ConnectionState.Closed:
            return False
        self._state = ConnectionState.Closed
        return True

    def stop(self) -> None:
        """Stop the writer and discard anything still queued."""
        writer, self._writer = self._writer, None
        if writer is not None and writer is not asyncio.current_task() and not writer.done():
            writer.cancel()
        self._discard_pending()

    async def close_transport(self, code: int = 1000, reason: str = "") -> None:
        try:
            await self.transport.close(code=code, reason=reason)
        except Exception:
            logger.debug(
                "transport close failed",
                exc_info=True,
                extra={"connection_id": str(self.connection_id)},
            )

    def _discard_pending(self) -> None:
        while True:
            try:
                self._outbox.get_nowait()
            except asyncio.QueueEmpty:
                return
            self._outbox.task_done()

    async def _write_loop(self, on_failure: FailureCallback | None) -> None:
        while True:
            message = await self._outbox.get()
            try:
                await self.transport.send(message)
            except Exception:
                logger.warning(
                    "transport send failed",
                    exc_info=True,
                    extra={"connection_id": str(self.connection_id), "user_id": self.identity.user_id},
                )
                self._discard_pending()
                if on_failure is not None:
                    await on_failure(self.connection_id)
                return
            finally:
                self._outbox.task_done()
