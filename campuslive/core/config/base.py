import typing as t

from pydantic_settings import BaseSettings as PydanticBaseSettings

from campuslive.model import BaseModel


class BaseSettings(PydanticBaseSettings, BaseModel):  # pyright: ignore [reportIncompatibleVariableOverride]
    """A configuration section.

    Sections arrive from the container as plain mappings (`di.as_(WebSettings)`),
    so a mapping is accepted positionally; keyword arguments take precedence
    over its entries.
    """

    def __init__(self, values: t.Mapping[str, t.Any] | None = None, /, **kwargs: t.Any):
        super().__init__(**{**(values or {}), **kwargs})
