from __future__ import annotations

from pathlib import Path
import typing as t

import annotated_types as ant

from .base import BaseSettings


class StorageSettings(BaseSettings):
    # without redis, events published here reach only this process's connections
    redis: RedisSettings | None = None


class RedisSettings(BaseSettings):
    """Redis used for the publish bridge; `socket_path`, when set, is used instead of host and port."""

    socket_path: Path | None = None
    host: str = "localhost"
    port: t.Annotated[int, ant.Gt(0), ant.Le(65535)] = 6379
    database: t.Annotated[int, ant.Ge(0)] = 0
