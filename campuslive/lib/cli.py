from __future__ import annotations

import enum
import pathlib
import typing as t

import click
import pydantic as p
from click import *  # noqa: F401, F403 # pyright: ignore [reportWildcardImportFromLibrary]

# Commands import this module as `click`: stock click plus the parameter types below.


class EnumType(click.ParamType):
    """The value of any member of an enum, e.g. `-r faculty` for `UserRole.Faculty`."""

    def __init__(self, enum_cls: type[enum.Enum]):
        self.enum_cls = enum_cls
        self.name = enum_cls.__name__

    def convert(
        self, value: str | enum.Enum | None, param: click.Parameter | None, ctx: click.Context | None
    ) -> enum.Enum | None:
        if value is None or isinstance(value, self.enum_cls):
            return value
        try:
            return self.enum_cls(value)
        except ValueError:
            choices = ", ".join(str(m.value) for m in self.enum_cls)
            self.fail(f"{value!r} is not one of: {choices}", param, ctx)


class JSONObjectType(click.ParamType):
    """A JSON object given on the command line, e.g. '{"grade": "A"}'"""

    name = "JSON"

    def convert(
        self, value: str | dict[str, t.Any] | None, param: click.Parameter | None, ctx: click.Context | None
    ) -> dict[str, t.Any] | None:
        if value is None or isinstance(value, dict):
            return value
        try:
            parsed = p.TypeAdapter(dict[str, t.Any]).validate_json(value)
        except p.ValidationError:
            self.fail(f"{value!r} is not a JSON object", param, ctx)
        return parsed


class ConfigRootType(click.ParamType):
    """An existing configuration directory, as a path or `file://` URI; converted to an absolute `file://` URI."""

    name = "PATH"

    def convert(
        self, value: str | pathlib.Path | p.FileUrl | None, param: click.Parameter | None, ctx: click.Context | None
    ) -> p.FileUrl | None:
        if value is None or isinstance(value, p.FileUrl):
            return value

        if isinstance(value, str) and "://" in value:
            try:
                url = p.AnyUrl(value)
            except p.ValidationError:
                self.fail(f"{value!r} is not a valid URI", param, ctx)
            if url.scheme != "file" or not url.path:
                self.fail(f"{value}: only file:// URIs are supported", param, ctx)
            value = url.path

        path = pathlib.Path(value).absolute()
        if not path.is_dir():
            self.fail(f"{path}: no such directory", param, ctx)
        return p.FileUrl(f"file://{path}")
