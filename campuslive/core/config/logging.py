"""Schema of the `logging` section, dumped by alias straight into `logging.config.dictConfig`."""

import typing as t

import pydantic as p

from .base import BaseSettings

LogLevel = t.Literal["NOTSET", "TRACE", "DEBUG", "INFO", "WARNING", "WARN", "ERROR", "FATAL", "CRITICAL"]


class BaseFormatterSettings(BaseSettings):
    format: str | None = None
    datefmt: str | None = None
    log_colors: dict[str, str] | None = None
    no_color: bool = False


class ColoredFormatterSettings(BaseFormatterSettings):
    # dictConfig treats "()" as a factory and passes the other keys as kwargs
    factory: t.Literal["colorlog.TTYColoredFormatter", "colorlog.ColoredFormatter"] = p.Field(alias="()")


class ExtraFormatterSettings(BaseFormatterSettings):
    factory: t.Literal["campuslive.lib.logging.ExtraFormatter"] = p.Field(alias="()")
    # resolved by dictConfig, e.g. ext://colorlog.ColoredFormatter
    base: str
    stream: p.AnyUrl | None = None
    indent: bool | None = None

    @p.field_serializer("stream")
    def serialize_stream(self, v: p.AnyUrl | None) -> str | None:
        return None if v is None else str(v)


FormatterSettings = t.Annotated[ColoredFormatterSettings | ExtraFormatterSettings, p.Field(discriminator="factory")]


class StreamHandlerSettings(BaseSettings):
    class_: t.Literal["colorlog.StreamHandler", "logging.StreamHandler"] = p.Field(alias="class")
    formatter: str
    level: LogLevel = "NOTSET"
    stream: p.AnyUrl

    @p.field_serializer("stream")
    def serialize_stream(self, v: p.AnyUrl) -> str:
        return str(v)


class NullHandlerSettings(BaseSettings):
    class_: t.Literal["logging.NullHandler"] = p.Field(alias="class")
    level: LogLevel = "NOTSET"


HandlerSettings = t.Annotated[StreamHandlerSettings | NullHandlerSettings, p.Field(discriminator="class_")]


class LoggerSettings(BaseSettings):
    level: LogLevel = "NOTSET"
    propagate: bool = True
    handlers: list[str] | None = None


class RootLoggerSettings(BaseSettings):
    handlers: list[str]
    level: LogLevel = "NOTSET"


class LoggingSettings(BaseSettings):
    version: t.Literal[1]
    disable_existing_loggers: bool = True
    formatters: dict[str, FormatterSettings]
    handlers: dict[str, HandlerSettings]
    root: RootLoggerSettings
    loggers: dict[str, LoggerSettings] = {}
