"""Tests for per-connection outboxes and the writer task."""

from __future__ import annotations

import asyncio
import typing as t

import pytest

from campuslive.model import ConnectionID, Identity, OutboundMessage, UserID, UserRole
from campuslive.realtime import Connection, ConnectionState

ALICE = Identity(user_id=UserID("alice"), role=UserRole.Student, display_name="Alice")


class TestConnection(object):
    """Delivery never blocks the caller; a full or closed outbox drops."""

    @pytest.mark.anyio
    async def test_writer_sends_in_order(self, recording_transport: t.Callable[..., t.Any]) -> None:
        transport = recording_transport()
        connection = Connection(ALICE, transport)
        connection.start()

        for i in range(5):
            assert connection.deliver(OutboundMessage.ack(f"n{i}"))
        await connection.drain()

        assert transport.topics() == ["n0", "n1", "n2", "n3", "n4"]
        connection.stop()

    def test_full_outbox_drops(self, recording_transport: t.Callable[..., t.Any]) -> None:
        connection = Connection(ALICE, recording_transport(), queue_size=2)

        assert connection.deliver(OutboundMessage.ack("a"))
        assert connection.deliver(OutboundMessage.ack("b"))
        assert not connection.deliver(OutboundMessage.ack("c"))
        assert connection.pending == 2

    def test_closed_connection_drops(self, recording_transport: t.Callable[..., t.Any]) -> None:
        connection = Connection(ALICE, recording_transport())

        assert connection.mark_closed() is True
        assert connection.mark_closed() is False
        assert connection.state is ConnectionState.Closed
        assert not connection.deliver(OutboundMessage.ack("a"))

    def test_stop_discards_pending(self, recording_transport: t.Callable[..., t.Any]) -> None:
        connection = Connection(ALICE, recording_transport())
        connection.deliver(OutboundMessage.ack("a"))
        connection.deliver(OutboundMessage.ack("b"))

        connection.stop()

        assert connection.pending == 0

    @pytest.mark.anyio
    async def test_send_failure_reports_connection(self, recording_transport: t.Callable[..., t.Any]) -> None:
        failed: list[ConnectionID] = []

        async def on_failure(connection_id: ConnectionID) -> None:
            failed.append(connection_id)

        connection = Connection(ALICE, recording_transport(fail=True))
        connection.start(on_failure=on_failure)
        connection.deliver(OutboundMessage.ack("a"))
        connection.deliver(OutboundMessage.ack("b"))

        await asyncio.wait_for(connection.drain(), timeout=1)

        assert failed == [connection.connection_id]
        assert connection.pending == 0

    @pytest.mark.anyio
    async def test_close_transport_swallows_transport_errors(self) -> None:
        class BrokenTransport(object):
            async def send(self, message: OutboundMessage) -> None: ...

            async def close(self, code: int = 1000, reason: str = "") -> None:
                raise RuntimeError("already closed")

        connection = Connection(ALICE, BrokenTransport())
        await connection.close_transport(code=4403, reason="bye")
