from __future__ import annotations

import pydantic as p
from pydantic_settings import BaseSettings as PydanticBaseSettings
from pydantic_settings import PydanticBaseSettingsSource, SettingsConfigDict

from campuslive.model import DeploymentEnvironment

from .base import BaseSettings
from .source import YAMLSecretsSource


class AuthSecrets(BaseSettings):
    """Authentication secrets."""

    jwt: p.Secret[str]


class Secrets(BaseSettings):
    """Secrets come from the environment (`CAMPUSLIVE_AUTH__JWT`) or `secrets.yaml`, in that order."""

    model_config = SettingsConfigDict(env_prefix="CAMPUSLIVE_", env_nested_delimiter="__")

    root: p.AnyUrl
    env: DeploymentEnvironment

    auth: AuthSecrets | None = None

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[PydanticBaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return init_settings, env_settings, YAMLSecretsSource(settings_cls)
