import typing as t

import annotated_types as ant

from .base import BaseSettings


class RealtimeSettings(BaseSettings):
    """Tuning for the in-process hub."""

    # per-connection outbox; messages beyond this are dropped for that connection only
    queue_size: t.Annotated[int, ant.Gt(0)] = 256
    lock_stripes: t.Annotated[int, ant.Gt(0)] = 64
    presence_enabled: bool = True
    bridge_channel: str = "campuslive:events"
