"""Where settings come from: `-o` overrides, per-section YAML files and `secrets.yaml`.

Sources run after the init kwargs, so `current_state` already carries the
`root` and `env` that locate the files.
"""

import functools
import typing as t
from pathlib import Path

import pydantic as p
import yaml
from pydantic_settings import PydanticBaseSettingsSource, SettingsError

from campuslive.model import DeploymentEnvironment

# fields that say where configuration lives rather than what it is
LocatorFields: t.Final[frozenset[str]] = frozenset({"env", "root", "override"})


class CurrentState(t.TypedDict, total=False):
    root: t.Required[p.AnyUrl]
    env: t.Required[DeploymentEnvironment]
    override: tuple[str, ...]


def config_directory(root: p.AnyUrl) -> Path:
    if root.scheme != "file" or not root.path:
        raise SettingsError(f"configuration root must be a file:// URI, not {root}")
    return Path(root.path)


def environment_path(root: p.AnyUrl, env: DeploymentEnvironment) -> Path:
    """`local` reads the root itself; other environments overlay `env.d/<env>`."""
    base = config_directory(root)
    env = DeploymentEnvironment(env)
    if env is DeploymentEnvironment.Local:
        return base
    return base / "env.d" / env.value


def merge_layers(base: dict[str, t.Any], overlay: t.Mapping[str, t.Any]) -> dict[str, t.Any]:
    """Overlay one YAML layer on another: nested mappings merge, anything else replaces."""
    merged = dict(base)
    for key, value in overlay.items():
        current = merged.get(key)
        if isinstance(value, t.Mapping) and isinstance(current, t.Mapping):
            merged[key] = merge_layers(dict(current), value)
        else:
            merged[key] = value
    return merged


class SectionSource(PydanticBaseSettingsSource):
    """A source producing whole sections, keyed by the settings field they populate."""

    @property
    def state(self) -> CurrentState:
        return t.cast(CurrentState, self.current_state)

    def load(self) -> dict[str, t.Any]:
        raise NotImplementedError

    @functools.cached_property
    def sections(self) -> dict[str, t.Any]:
        try:
            loaded = self.load()
        except (OSError, yaml.YAMLError) as e:
            raise SettingsError(f"could not load settings in {self.__class__.__name__}") from e
        if not isinstance(loaded, dict):
            raise SettingsError(f"{self.__class__.__name__} expected a mapping of sections")
        fields = self.settings_cls.model_fields
        return {name: value for name, value in loaded.items() if name in fields and name not in LocatorFields}

    def get_field_value(self, field: p.fields.FieldInfo, field_name: str) -> tuple[t.Any, str, bool]:
        value = self.sections.get(field_name)
        return value, field_name, isinstance(value, dict)

    def __call__(self) -> dict[str, t.Any]:
        return dict(self.sections)


class OverrideSettingsSource(SectionSource):
    """Command line `-o section.key=value` overrides; each value is parsed as YAML."""

    def load(self) -> dict[str, t.Any]:
        tree: dict[str, t.Any] = {}
        for option in self.state.get("override", ()):
            path, eq, raw = option.partition("=")
            if not eq or not path.strip():
                raise SettingsError(f"override {option!r} is not of the form key.path=value")

            *parents, leaf = [k.strip() for k in path.split(".")]
            node = tree
            for key in parents:
                node = node.setdefault(key, {})
                if not isinstance(node, dict):
                    raise SettingsError(f"override {option!r} conflicts with an earlier override")
            node[leaf] = yaml.safe_load(raw.strip())
        return tree


class YAMLCascadingSettingsSource(SectionSource):
    """`<section>.yaml` at the root, merged with the same file in the environment directory."""

    @functools.cached_property
    def load_paths(self) -> list[Path]:
        root = self.state["root"]
        paths = [config_directory(root)]
        env_path = environment_path(root, self.state["env"])
        if env_path != paths[0]:
            paths.append(env_path)
        return paths

    def load(self) -> dict[str, t.Any]:
        sections: dict[str, t.Any] = {}
        for name in self.settings_cls.model_fields:
            if name in LocatorFields:
                continue
            for directory in self.load_paths:
                fn = directory / f"{name}.yaml"
                if not fn.exists():
                    continue
                layer = yaml.safe_load(fn.read_text(encoding="utf8"))
                current = sections.get(name)
                if isinstance(current, dict) and isinstance(layer, dict):
                    sections[name] = merge_layers(current, layer)
                else:
                    sections[name] = layer
        return sections


class YAMLSecretsSource(SectionSource):
    """Plain `secrets.yaml` in the environment directory; a missing file means no secrets."""

    def load(self) -> dict[str, t.Any]:
        fn = environment_path(self.state["root"], self.state["env"]) / "secrets.yaml"
        if not fn.exists():
            return {}
        return yaml.safe_load(fn.read_text(encoding="utf8")) or {}
