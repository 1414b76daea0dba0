"""Tests for the cascading YAML settings and secrets."""

from __future__ import annotations

from pathlib import Path

import pydantic as p
from pydantic_settings import SettingsError
import pytest

import campuslive
from campuslive.core import Secrets, Settings
from campuslive.core.config.source import merge_layers
from campuslive.model import DeploymentEnvironment

CONFIG_ROOT = p.FileUrl(f"file://{Path(campuslive.__file__).resolve().parents[1] / 'config'}")


class TestSettings(object):
    """Environment directories are merged over the root configuration."""

    def test_environment_overlays_root(self) -> None:
        settings = Settings(env=DeploymentEnvironment.Test, root=CONFIG_ROOT)

        # from env.d/test
        assert settings.auth.directory == "memory"
        assert settings.web.allowed_origins == []
        assert settings.logging.root.level == "WARNING"
        # from the root, untouched by env.d/test
        assert settings.auth.jwt_algorithm == "HS256"
        assert settings.web.backend.port == 8700
        assert settings.realtime.queue_size == 256
        assert settings.storage.redis is None

    def test_nested_merge_keeps_sibling_keys(self) -> None:
        settings = Settings(env=DeploymentEnvironment.Test, root=CONFIG_ROOT)

        # env.d/test only sets handlers.console.level
        console = settings.logging.handlers["console"]
        assert console.level == "WARNING"
        assert console.formatter == "console"

    def test_local_reads_root_only(self) -> None:
        settings = Settings(env=DeploymentEnvironment.Local, root=CONFIG_ROOT)

        assert settings.auth.directory == "claims"
        assert settings.web.allowed_origins == ["http://localhost:5173"]

    def test_overrides_win(self) -> None:
        settings = Settings(
            env=DeploymentEnvironment.Test,
            root=CONFIG_ROOT,
            override=("realtime.queue_size=8", "web.backend.port=9000", "storage.redis.port=6380"),
        )

        assert settings.realtime.queue_size == 8
        assert settings.web.backend.port == 9000
        assert str(settings.web.backend.host) == "127.0.0.1"
        assert settings.storage.redis is not None
        assert settings.storage.redis.port == 6380
        assert settings.storage.redis.host == "localhost"

    def test_invalid_override_is_rejected(self) -> None:
        with pytest.raises(p.ValidationError):
            Settings(env=DeploymentEnvironment.Test, root=CONFIG_ROOT, override=("realtime.queue_size=0",))

    @pytest.mark.parametrize("option", ["realtime.queue_size", "=8", "realtime=1,realtime.queue_size=8"])
    def test_malformed_override(self, option: str) -> None:
        with pytest.raises(SettingsError):
            Settings(env=DeploymentEnvironment.Test, root=CONFIG_ROOT, override=tuple(option.split(",")))

    def test_logging_dumps_dict_config(self) -> None:
        settings = Settings(env=DeploymentEnvironment.Test, root=CONFIG_ROOT)

        dumped = settings.logging.model_dump()

        console = dumped["formatters"]["console"]
        assert console["()"] == "campuslive.lib.logging.ExtraFormatter"
        assert console["base"] == "ext://colorlog.ColoredFormatter"
        assert console["stream"] == "ext://sys.stderr"
        assert dumped["handlers"]["console"]["class"] == "colorlog.StreamHandler"
        assert dumped["handlers"]["console"]["stream"] == "ext://sys.stderr"


class TestSecrets(object):
    def test_reads_environment_secrets_file(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("CAMPUSLIVE_AUTH__JWT", raising=False)

        secrets = Secrets(env=DeploymentEnvironment.Test, root=CONFIG_ROOT)

        assert secrets.auth is not None
        assert secrets.auth.jwt.get_secret_value().startswith("test-secret")

    def test_environment_variable_wins(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CAMPUSLIVE_AUTH__JWT", "from-the-environment-0123456789abcdef")

        secrets = Secrets(env=DeploymentEnvironment.Test, root=CONFIG_ROOT)

        assert secrets.auth is not None
        assert secrets.auth.jwt.get_secret_value() == "from-the-environment-0123456789abcdef"

    def test_missing_secrets_file(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("CAMPUSLIVE_AUTH__JWT", raising=False)

        secrets = Secrets(env=DeploymentEnvironment.Local, root=CONFIG_ROOT)

        assert secrets.auth is None


class TestMergeLayers(object):
    def test_nested_mappings_merge(self) -> None:
        base = {"handlers": {"console": {"level": "DEBUG", "formatter": "console"}}, "version": 1}

        merged = merge_layers(base, {"handlers": {"console": {"level": "WARNING"}}})

        assert merged == {"handlers": {"console": {"level": "WARNING", "formatter": "console"}}, "version": 1}
        assert base["handlers"]["console"]["level"] == "DEBUG"

    def test_scalars_and_lists_replace(self) -> None:
        merged = merge_layers({"redis": None, "origins": ["a", "b"]}, {"redis": {"port": 1}, "origins": ["c"]})

        assert merged == {"redis": {"port": 1}, "origins": ["c"]}


class TestProductionLogging(object):
    def test_console_formatter_drops_color(self) -> None:
        settings = Settings(env=DeploymentEnvironment.Production, root=CONFIG_ROOT)

        console = settings.logging.formatters["console"]
        assert console.factory == "campuslive.lib.logging.ExtraFormatter"
        assert console.no_color is True
        assert console.format is not None and "log_color" not in console.format
