"""Wiring helpers for routes and commands that take their collaborators from the container."""

from __future__ import annotations

__all__ = [
    "NotReady",
    "Provide",
    "as_",
    "inject",
]

import typing as t

from dependency_injector.wiring import inject, Provide, TypeModifier

SectionT = t.TypeVar("SectionT")


def as_(section: t.Callable[[t.Any], SectionT]) -> TypeModifier:
    """Coerce an injected configuration mapping, e.g. `Provide["config.web", as_(WebSettings)]`."""
    return TypeModifier(section)


class NotReady(object):
    """Held by boot-time providers until `CampusLiveContainer.boot` replaces it."""

    __slots__ = ()

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "<NotReady>"
