import os
import typing as t

import uvicorn

import campuslive.lib.cli as click
from campuslive.core import BootConfiguration, di
from campuslive.core.config import LoggingSettings, WebSettings
from campuslive.web.main import BootVariable

AppSpec: t.Final[str] = "campuslive.web.main:create_app"


class ServeConfig(t.TypedDict):
    host: str
    port: int
    ws_ping_interval: float
    ws_ping_timeout: float


def _get_serve_config(web_cf: WebSettings) -> ServeConfig:
    return {
        "host": str(web_cf.backend.host),
        "port": web_cf.backend.port,
        "ws_ping_interval": web_cf.websocket.ping_interval,
        "ws_ping_timeout": web_cf.websocket.ping_timeout,
    }


@click.group()
def web(): ...


@web.command(name="serve")
@click.option("-w", "--workers", type=click.IntRange(min=1), default=1)
@di.inject
def serve(
    workers: int,
    boot_cf: BootConfiguration = di.Provide["_boot_config"],
    logging_cf: LoggingSettings = di.Provide["config.logging", di.as_(LoggingSettings)],  # noqa: B008
    web_cf: WebSettings = di.Provide["config.web", di.as_(WebSettings)],  # noqa: B008
    redis_cf: dict[str, t.Any] | None = di.Provide["config.storage.redis"],  # noqa: B008
):
    """Start the realtime backend."""
    if workers > 1 and redis_cf is None:
        # hubs are per worker process
        raise click.ClickException("multiple workers require storage.redis to be configured")

    os.environ[BootVariable] = boot_cf.model_dump_json()
    uvicorn.run(AppSpec, factory=True, workers=workers, log_config=logging_cf.model_dump(), **_get_serve_config(web_cf))


@web.command(name="develop")
@di.inject
def develop(
    boot_cf: BootConfiguration = di.Provide["_boot_config"],
    logging_cf: LoggingSettings = di.Provide["config.logging", di.as_(LoggingSettings)],  # noqa: B008
    web_cf: WebSettings = di.Provide["config.web", di.as_(WebSettings)],  # noqa: B008
):
    """Start the realtime backend with live-reload."""
    os.environ[BootVariable] = boot_cf.model_dump_json()
    uvicorn.run(AppSpec, factory=True, reload=True, log_config=logging_cf.model_dump(), **_get_serve_config(web_cf))
