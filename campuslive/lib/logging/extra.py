import json
import logging
import string
import textwrap
import typing as t

import pydantic_core
import pygments
from pygments.formatters import Terminal256Formatter
from pygments.lexers.data import JsonLexer  # pyright: ignore [reportMissingTypeStubs]
from pygments.style import Style

ReservedKeys: t.Final[frozenset[str]] = frozenset(
    {
        "args",
        "asctime",
        "color_message",
        "created",
        "exc_info",
        "exc_text",
        "filename",
        "funcName",
        "levelname",
        "levelno",
        "lineno",
        "message",
        "module",
        "msecs",
        "msg",
        "name",
        "pathname",
        "process",
        "processName",
        "relativeCreated",
        "stack_info",
        "taskName",
        "thread",
        "threadName",
    }
)


def encode_extra(obj: t.Any) -> t.Any:
    return pydantic_core.to_jsonable_python(obj, fallback=repr)


class ExtraFormatter(logging.Formatter):
    """Formats with `base`, then appends whatever was passed as `extra=` as JSON.

    The JSON is highlighted when `stream` is a terminal and color is not disabled.
    """

    def __init__(
        self,
        base: type[logging.Formatter],
        format: str | None = None,
        datefmt: str | None = None,
        indent: bool | None = False,
        pyg_style: str | type[Style] = "monokai",
        style: t.Literal["%", "{", "$"] = "%",
        validate: bool = True,
        *,
        stream: t.IO[str] | None = None,
        defaults: t.Any = None,
        **kwargs: t.Any,
    ):
        if stream is not None:
            kwargs["stream"] = stream
        self.base = base(format, datefmt=datefmt, style=style, validate=validate, defaults=defaults, **kwargs)
        self.stream = stream
        self.pyg_style = pyg_style
        self.indent = bool(indent)

    def format(self, record: logging.LogRecord) -> str:
        if "color_message" in record.__dict__:
            record.msg = record.__dict__.pop("color_message")

        msg = record.getMessage()
        if "\n" in msg:
            # continuation lines line up under the first
            formatted = self.base.format(record)
            idx = formatted.find(msg)
            indent = " " * len([c for c in formatted[:idx] if c in string.printable])
            line, *lines = msg.splitlines()
            body = textwrap.indent("\n".join(lines), prefix=indent)
            record.msg = record.message = f"{line}\n{body}"
            record.args = None
        message = self.base.format(record)

        d = record.__dict__
        extra = {k: d[k] for k in d.keys() - ReservedKeys}
        if not extra:
            return message

        js = json.dumps(extra, sort_keys=True, indent=(4 if self.indent else None), default=encode_extra)
        if self.highlight:
            hl = pygments.highlight  # pyright: ignore [reportUnknownMemberType, reportUnknownVariableType]
            js = hl(js, JsonLexer(), Terminal256Formatter(style=self.pyg_style), None)
        return message + " " + js.strip()

    @property
    def highlight(self) -> bool:
        if getattr(self.base, "no_color", False) or self.stream is None:
            return False
        return self.stream.isatty()

    def __getattr__(self, name: str) -> t.Any:
        if name == "base":
            raise AttributeError(name)
        return getattr(self.base, name)
