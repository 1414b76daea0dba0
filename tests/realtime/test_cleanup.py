"""Cleanup keeps unwinding when one of its steps fails."""

from __future__ import annotations

import typing as t

import pytest

from campuslive.model import ConnectionID, Identity, UserID
from campuslive.realtime import RealtimeHub

OpenConnection = t.Callable[[str], t.Awaitable[tuple[t.Any, t.Any]]]


class TestCleanupHandler(object):
    @pytest.mark.anyio
    async def test_presence_failure_still_releases_connection(
        self, hub: RealtimeHub, open_connection: OpenConnection, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        alice, _ = await open_connection("alice")

        def explode(identity: Identity) -> int:
            raise RuntimeError("presence unavailable")

        monkeypatch.setattr(hub.presence, "offline", explode)

        assert await hub.on_transport_closed(alice.connection_id) is True
        assert alice.connection_id not in hub.state
        assert not hub.is_online(UserID("alice"))
        assert hub.state.channels.channels_of(alice.connection_id) == frozenset()

    @pytest.mark.anyio
    async def test_channel_failure_still_unregisters(
        self, hub: RealtimeHub, open_connection: OpenConnection, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        alice, _ = await open_connection("alice")

        async def explode(connection_id: t.Any) -> list[t.Any]:
            raise RuntimeError("roster corrupted")

        monkeypatch.setattr(hub.state.channels, "leave_all", explode)

        assert await hub.on_transport_closed(alice.connection_id) is True
        assert not hub.is_online(UserID("alice"))
        assert alice.connection_id not in hub.state

    @pytest.mark.anyio
    async def test_unknown_connection_is_noop(self, hub: RealtimeHub) -> None:
        assert await hub.cleanup_handler.cleanup(ConnectionID()) is False
