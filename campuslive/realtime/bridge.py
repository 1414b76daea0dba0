"""Cross-process publish bridge.

Producers in other processes (API workers, task queues) publish through the
bridge; every realtime process listening on it dispatches into its local hub.
There is no persistence: an event published while no listener is subscribed
is lost.
"""

from __future__ import annotations

import logging
import typing as t

import pydantic as p
import redis.asyncio as redis

from campuslive.model import BridgeMessageAdapter, DisconnectIdentity, Event, EventAdapter, UserID

from .hub import RealtimeHub

logger = logging.getLogger(__name__)


class EventBridge(t.Protocol):
    async def publish(self, event: Event) -> None:
        """Hand an event to every listening hub."""
        ...

    async def disconnect(self, user_id: UserID, reason: str = "account_deactivated") -> None:
        """Ask every listening hub to close the sessions `user_id` holds."""
        ...

    async def listen(self) -> None:
        """Dispatch bridged events into the local hub until cancelled."""
        ...


class LocalEventBridge(object):
    """Single-process bridge: publishing dispatches directly."""

    def __init__(self, hub: RealtimeHub) -> None:
        self._hub = hub

    async def publish(self, event: Event) -> None:
        self._hub.publish(event)

    async def disconnect(self, user_id: UserID, reason: str = "account_deactivated") -> None:
        await self._hub.disconnect(user_id, reason)

    async def listen(self) -> None:
        return None


class RedisEventBridge(object):
    """Bridge over Redis pub/sub.

    A local publish is not dispatched directly; it comes back through the
    subscription like any other process's, so each hub dispatches it once.
    Disconnect requests travel the same channel as `disconnect-identity`
    control messages.
    """

    def __init__(
        self,
        client: redis.Redis,  # type: ignore[type-arg]
        hub: RealtimeHub,
        channel: str = "campuslive:events",
    ) -> None:
        self._client = client
        self._hub = hub
        self._channel = channel

    @property
    def channel(self) -> str:
        return self._channel

    async def publish(self, event: Event) -> None:
        await self._client.publish(self._channel, EventAdapter.dump_json(event))

    async def disconnect(self, user_id: UserID, reason: str = "account_deactivated") -> None:
        command = DisconnectIdentity(target=user_id, reason=reason)
        await self._client.publish(self._channel, BridgeMessageAdapter.dump_json(command))

    async def listen(self) -> None:
        pubsub = self._client.pubsub(ignore_subscribe_messages=True)
        await pubsub.subscribe(self._channel)
        logger.info("listening for bridged events", extra={"channel": self._channel})
        try:
            async for message in pubsub.listen():
                await self.receive(message)
        finally:
            await pubsub.unsubscribe(self._channel)
            await pubsub.aclose()

    async def receive(self, message: t.Mapping[str, t.Any]) -> int:
        """Handle one pub/sub message.

        Returns the number of deliveries for an event, or the number of sessions
        closed for a disconnect request.
        """
        if message.get("type") != "message":
            return 0
        try:
            bridged = BridgeMessageAdapter.validate_json(message["data"])
        except p.ValidationError:
            logger.warning("discarding malformed bridged event", extra={"channel": self._channel}, exc_info=True)
            return 0

        if isinstance(bridged, DisconnectIdentity):
            return await self._hub.disconnect(bridged.target, bridged.reason)
        return self._hub.publish(bridged)
