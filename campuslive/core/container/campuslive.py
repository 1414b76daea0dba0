from __future__ import annotations

import sys
import types
import typing as t
from pathlib import Path

import pydantic as p
from dependency_injector.containers import DeclarativeContainer
from dependency_injector.providers import Configuration, Container, Object, Provider, Resource, Singleton

import campuslive
from campuslive.model import BaseModel, DeploymentEnvironment
from campuslive.model.base import utcnow

from ..config import Secrets, Settings
from ..di import NotReady
from ..provider import LoggingProvider, TimestampProvider
from .auth import AuthContainer
from .realtime import RealtimeContainer


class BootConfiguration(BaseModel):
    debug: bool
    env: DeploymentEnvironment
    config_root: p.AnyUrl
    override: tuple[str, ...]


class CampusLiveContainer(DeclarativeContainer):
    """Root container; its providers become usable once `boot` has loaded settings and secrets."""

    config: Configuration = Configuration()
    secrets: Configuration = Configuration()

    debug: Provider[bool] = Singleton(bool)
    env: Provider[DeploymentEnvironment] = Singleton(DeploymentEnvironment)
    root: Object[NotReady | Path] = Object(NotReady())

    logging: Provider[LoggingProvider] = Resource(LoggingProvider, config=config.logging, debug=debug)
    utcnow: Provider[TimestampProvider] = Object(utcnow)

    auth: Provider[AuthContainer] = Container(AuthContainer, config=config.auth, secrets=secrets.auth)
    realtime: Provider[RealtimeContainer] = Container(
        RealtimeContainer,
        config=config.realtime,
        storage=config.storage,
        authenticator=auth.authenticator,
        utcnow=utcnow,
    )

    _boot_config: Provider[BootConfiguration | NotReady] = Object(NotReady())

    @staticmethod
    def boot(
        ct: CampusLiveContainer,
        /,
        debug: bool,
        env: DeploymentEnvironment,
        config_root: p.FileUrl,
        override: tuple[str, ...] | None = None,
        wiring: tuple[str | types.ModuleType, ...] | None = None,
    ):
        """Load settings and secrets for `env` from `config_root`, then wire the web and CLI modules.

        Raises:
            ValueError: the root is not a file:// URI, or no JWT secret is configured.
        """
        if config_root.scheme != "file":
            raise ValueError(f"unsupported scheme for config root: {config_root.scheme}")
        override = tuple(override or ())
        settings = Settings(env=env, root=config_root, override=override)
        secrets = Secrets(env=env, root=config_root)
        if secrets.auth is None:
            raise ValueError("no auth.jwt secret configured; set CAMPUSLIVE_AUTH__JWT or add it to secrets.yaml")

        ct.config.from_pydantic(settings)
        ct.secrets.from_pydantic(secrets)
        ct.debug.override(debug)
        ct.env.override(env)
        ct.root.override(Path(campuslive.__file__).resolve().parents[1])
        CampusLiveContainer._wire(ct, wiring or ())

        logger = ct.logging().get_logger()
        for option in override:
            key, _, value = option.partition("=")
            logger.info("configuration overridden", extra={"key": key.strip(), "value": value.strip()})
        logger.debug(
            "container booted",
            extra={
                "config": str(config_root),
                "env": env.value,
                "redis": settings.storage.redis is not None,
            },
        )
        ct._boot_config.override(BootConfiguration(debug=debug, env=env, config_root=config_root, override=override))

    @staticmethod
    def _wire(ct: CampusLiveContainer, extra: t.Iterable[str | types.ModuleType]) -> None:
        commands = [mod for name, mod in sys.modules.items() if name.startswith("campuslive.cli.")]
        modules = list(dict.fromkeys([*extra, *commands]))
        ct.wire(modules=modules or None, packages=["campuslive.web"])

    @staticmethod
    def boot_config(ct: CampusLiveContainer) -> BootConfiguration:
        config = ct._boot_config()
        if isinstance(config, NotReady):
            raise RuntimeError("container has not been booted")
        return t.cast(BootConfiguration, config)
