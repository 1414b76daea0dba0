"""Tests for the cross-process event bridge."""

from __future__ import annotations

import typing as t

import pytest

from campuslive.model import BridgeMessageAdapter, DisconnectIdentity, EventAdapter, NotifyIdentity, UserID
from campuslive.realtime import LocalEventBridge, RealtimeHub, RedisEventBridge
from campuslive.realtime.hub import CloseForced

OpenConnection = t.Callable[[str], t.Awaitable[tuple[t.Any, t.Any]]]
Settle = t.Callable[[], t.Awaitable[None]]


class FakePubSub(object):
    def __init__(self, messages: list[dict[str, t.Any]]) -> None:
        self.messages = messages
        self.subscribed: list[str] = []
        self.closed = False

    async def subscribe(self, *channels: str) -> None:
        self.subscribed.extend(channels)

    async def unsubscribe(self, *channels: str) -> None:
        for channel in channels:
            self.subscribed.remove(channel)

    async def listen(self) -> t.AsyncIterator[dict[str, t.Any]]:
        for message in self.messages:
            yield message

    async def aclose(self) -> None:
        self.closed = True


class FakeRedis(object):
    """Just enough of redis.asyncio.Redis for the bridge."""

    def __init__(self, messages: t.Iterable[dict[str, t.Any]] = ()) -> None:
        self.published: list[tuple[str, bytes]] = []
        self.pubsub_kwargs: dict[str, t.Any] = {}
        self._pubsub = FakePubSub(list(messages))

    async def publish(self, channel: str, data: bytes) -> int:
        self.published.append((channel, data))
        return 1

    def pubsub(self, **kwargs: t.Any) -> FakePubSub:
        self.pubsub_kwargs = kwargs
        return self._pubsub


def bridged(message: NotifyIdentity | DisconnectIdentity, channel: str = "campuslive:events") -> dict[str, t.Any]:
    return {"type": "message", "channel": channel.encode(), "data": BridgeMessageAdapter.dump_json(message)}


class TestLocalEventBridge(object):
    @pytest.mark.anyio
    async def test_publish_dispatches_locally(
        self, hub: RealtimeHub, open_connection: OpenConnection, settle: Settle
    ) -> None:
        _, alice_t = await open_connection("alice")

        await LocalEventBridge(hub).publish(NotifyIdentity(target=UserID("alice"), topic="new:grade"))
        await settle()

        assert alice_t.topics() == ["new:grade"]

    @pytest.mark.anyio
    async def test_disconnect_closes_locally(self, hub: RealtimeHub, open_connection: OpenConnection) -> None:
        alice, alice_t = await open_connection("alice")

        await LocalEventBridge(hub).disconnect(UserID("alice"), "account_deactivated")

        assert not alice.is_open
        assert alice_t.closed == (CloseForced, "account_deactivated")
        assert not hub.is_online(UserID("alice"))


class TestRedisEventBridge(object):
    """Published events travel as JSON and come back through the subscription."""

    @pytest.mark.anyio
    async def test_publish_serializes_event(self, hub: RealtimeHub) -> None:
        client = FakeRedis()
        event = NotifyIdentity(target=UserID("alice"), topic="new:grade", body={"grade": "B+"})

        await RedisEventBridge(client, hub).publish(event)  # type: ignore[arg-type]

        assert len(client.published) == 1
        channel, data = client.published[0]
        assert channel == "campuslive:events"
        assert EventAdapter.validate_json(data) == event

    @pytest.mark.anyio
    async def test_publish_does_not_dispatch_directly(
        self, hub: RealtimeHub, open_connection: OpenConnection, settle: Settle
    ) -> None:
        _, alice_t = await open_connection("alice")

        await RedisEventBridge(FakeRedis(), hub).publish(  # type: ignore[arg-type]
            NotifyIdentity(target=UserID("alice"), topic="new:grade")
        )
        await settle()

        assert alice_t.topics() == []

    @pytest.mark.anyio
    async def test_listen_dispatches_and_unsubscribes(
        self, hub: RealtimeHub, open_connection: OpenConnection, settle: Settle
    ) -> None:
        _, alice_t = await open_connection("alice")
        client = FakeRedis([
            bridged(NotifyIdentity(target=UserID("alice"), topic="new:grade")),
            {"type": "message", "channel": b"campuslive:events", "data": b"{not json"},
            bridged(NotifyIdentity(target=UserID("alice"), topic="new:assignment")),
        ])

        await RedisEventBridge(client, hub).listen()  # type: ignore[arg-type]
        await settle()

        assert alice_t.topics() == ["new:grade", "new:assignment"]
        assert client.pubsub_kwargs == {"ignore_subscribe_messages": True}
        assert client._pubsub.subscribed == []  # pyright: ignore [reportPrivateUsage]
        assert client._pubsub.closed  # pyright: ignore [reportPrivateUsage]

    @pytest.mark.anyio
    async def test_receive_ignores_other_message_types(self, hub: RealtimeHub) -> None:
        bridge = RedisEventBridge(FakeRedis(), hub)  # type: ignore[arg-type]
        assert await bridge.receive({"type": "subscribe", "channel": b"campuslive:events", "data": 1}) == 0

    @pytest.mark.anyio
    async def test_receive_counts_deliveries(self, hub: RealtimeHub, open_connection: OpenConnection) -> None:
        await open_connection("alice")
        await open_connection("alice")
        bridge = RedisEventBridge(FakeRedis(), hub, channel="campus:test")  # type: ignore[arg-type]

        assert bridge.channel == "campus:test"
        assert await bridge.receive(bridged(NotifyIdentity(target=UserID("alice")), "campus:test")) == 2

    @pytest.mark.anyio
    async def test_disconnect_is_published_not_applied(self, hub: RealtimeHub, open_connection: OpenConnection) -> None:
        alice, _ = await open_connection("alice")
        client = FakeRedis()

        await RedisEventBridge(client, hub).disconnect(UserID("alice"), "suspended")  # type: ignore[arg-type]

        assert alice.is_open
        command = BridgeMessageAdapter.validate_json(client.published[0][1])
        assert isinstance(command, DisconnectIdentity)
        assert command.target == "alice"
        assert command.reason == "suspended"

    @pytest.mark.anyio
    async def test_bridged_disconnect_closes_every_session(
        self, hub: RealtimeHub, open_connection: OpenConnection
    ) -> None:
        laptop, laptop_t = await open_connection("alice")
        phone, _ = await open_connection("alice")
        bob, _ = await open_connection("bob")
        bridge = RedisEventBridge(FakeRedis(), hub)  # type: ignore[arg-type]

        closed = await bridge.receive(bridged(DisconnectIdentity(target=UserID("alice"))))

        assert closed == 2
        assert not laptop.is_open and not phone.is_open
        assert laptop_t.closed == (CloseForced, "account_deactivated")
        assert bob.is_open
        assert not hub.is_online(UserID("alice"))
