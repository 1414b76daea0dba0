from __future__ import annotations

import typing as t

import pydantic as p
import pydantic_core.core_schema as core_schema
import shortuuid

# user IDs are issued by the identity provider and are opaque to this service
UserID = t.NewType("UserID", str)
CourseID = t.NewType("CourseID", str)

_Alphabet: t.Final[frozenset[str]] = frozenset(shortuuid.get_alphabet())
_KeyLength: t.Final[int] = 22


class PrefixedKey(str):
    """Server-issued identifier of the form `<prefix>_<shortuuid>`.

    Calling the class with no argument mints a fresh key; calling it with a
    string validates that string.
    """

    prefix: t.ClassVar[str]

    def __init_subclass__(cls, prefix: str, **kwargs: t.Any) -> None:
        super().__init_subclass__(**kwargs)
        cls.prefix = prefix

    def __new__(cls, value: str | None = None, /) -> t.Self:
        if value is None:
            return super().__new__(cls, f"{cls.prefix}_{shortuuid.uuid()}")

        head, sep, key = value.partition("_")
        if head != cls.prefix or not sep:
            raise ValueError(f"invalid {cls.__name__}: expected prefix {cls.prefix}_")
        if len(key) != _KeyLength or not _Alphabet.issuperset(key):
            raise ValueError(f"invalid {cls.__name__}: malformed key {key!r}")
        return super().__new__(cls, value)

    @property
    def key(self) -> str:
        return self[len(self.prefix) + 1 :]

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} {self.key}>"

    @classmethod
    def __get_pydantic_core_schema__(cls, src: t.Any, handler: p.GetCoreSchemaHandler) -> core_schema.CoreSchema:
        return core_schema.no_info_after_validator_function(
            cls,
            core_schema.str_schema(),
            serialization=core_schema.to_string_ser_schema(),
        )


# fmt: off
class ConnectionID(PrefixedKey, prefix="conn"): ...
class EventID(PrefixedKey, prefix="event"): ...
