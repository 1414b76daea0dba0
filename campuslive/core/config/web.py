from __future__ import annotations

import typing as t

import annotated_types as ant
import pydantic as p

from .base import BaseSettings


class ServeSettings(BaseSettings):
    host: p.IPvAnyAddress
    port: t.Annotated[int, ant.Gt(0), ant.Le(65535)]


class WebSocketSettings(BaseSettings):
    # transport-level keepalive, handled by uvicorn
    ping_interval: t.Annotated[float, ant.Gt(0)] = 20.0
    ping_timeout: t.Annotated[float, ant.Gt(0)] = 20.0


class WebSettings(BaseSettings):
    backend: ServeSettings
    allowed_origins: list[str] = []
    websocket: WebSocketSettings = WebSocketSettings()
