"""Realtime container: the hub, its state, and the cross-process event bridge."""

from __future__ import annotations

import typing as t

import redis.asyncio as aioredis
from dependency_injector.containers import DeclarativeContainer
from dependency_injector.providers import Configuration, Dependency, Provider, Resource, Singleton

from campuslive.auth import ConnectionAuthenticator
from campuslive.realtime import EventBridge, LocalEventBridge, RealtimeHub, RealtimeState, RedisEventBridge
from campuslive.realtime.state import provide_realtime_state

from ..config.storage import RedisSettings
from ..provider import TimestampProvider


def provide_redis_client(config: dict[str, t.Any] | None) -> aioredis.Redis | None:  # type: ignore[type-arg]
    """Create an async Redis client.

    Uses Unix socket if configured, otherwise TCP connection.
    Returns None if Redis is not configured.
    """
    if config is None:
        return None

    settings = RedisSettings(config)
    if settings.socket_path:
        return aioredis.Redis(
            unix_socket_path=str(settings.socket_path),
            db=settings.database,
            decode_responses=False,
        )

    return aioredis.Redis(
        host=settings.host,
        port=settings.port,
        db=settings.database,
        decode_responses=False,
    )


def provide_event_bridge(
    client: aioredis.Redis | None,  # type: ignore[type-arg]
    hub: RealtimeHub,
    channel: str,
) -> EventBridge:
    """Provide the event bridge implementation.

    Uses RedisEventBridge if Redis is configured, otherwise LocalEventBridge.
    """
    if client is not None:
        return RedisEventBridge(client, hub, channel=channel)
    return LocalEventBridge(hub)


class RealtimeContainer(DeclarativeContainer):
    config: Configuration = Configuration()
    storage: Configuration = Configuration()

    authenticator: Provider[ConnectionAuthenticator] = Dependency(instance_of=ConnectionAuthenticator)
    utcnow: Provider[TimestampProvider] = Dependency()

    state: Provider[RealtimeState] = Resource(provide_realtime_state, stripes=config.lock_stripes)

    hub: Provider[RealtimeHub] = Singleton(
        RealtimeHub,
        state=state,
        authenticator=authenticator,
        queue_size=config.queue_size,
        presence_enabled=config.presence_enabled,
        utcnow=utcnow,
    )

    redis_client: Provider[aioredis.Redis | None] = Singleton(  # type: ignore[type-arg]
        provide_redis_client,
        config=storage.redis,
    )

    bridge: Provider[EventBridge] = Singleton(
        provide_event_bridge,
        client=redis_client,
        hub=hub,
        channel=config.bridge_channel,
    )
