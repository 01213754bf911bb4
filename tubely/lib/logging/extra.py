import json
import logging
import pydoc
import string
import textwrap
import typing as t

import pygments
from pygments.formatters import Terminal256Formatter
from pygments.lexers.data import JsonLexer  # pyright: ignore [reportMissingTypeStubs]
from pygments.style import Style

from .json import JSONEncoder
from .style import LogStyle

ReservedKeys = frozenset({
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
    "log_color",
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
})


def _resolve_formatter(base: str | type[logging.Formatter]) -> type[logging.Formatter]:
    if isinstance(base, str):
        located = pydoc.locate(base)
        if not (isinstance(located, type) and issubclass(located, logging.Formatter)):
            raise ValueError(f"not a logging.Formatter: {base}")
        return located
    return base


class ExtraFormatter(logging.Formatter):
    """Wrap a base formatter and append the record's ``extra`` context as JSON.

    The context is syntax-highlighted when the handler's stream is a TTY.
    """

    def __init__(
        self,
        base: str | type[logging.Formatter],
        format: str | None = None,
        datefmt: str | None = None,
        indent: bool | None = True,
        pyg_style: t.Type[Style] = LogStyle,
        style: t.Literal["%", "{", "$"] = "%",
        validate: bool = True,
        *,
        defaults: t.Any = None,
        **kwargs: t.Any,
    ):
        formatter_cls = _resolve_formatter(base)
        self.base = formatter_cls(format, datefmt=datefmt, style=style, validate=validate, defaults=defaults, **kwargs)
        self.pyg_style = pyg_style
        self.indent = bool(indent)
        self.no_color = bool(kwargs.get("no_color", False))

    def format(self, record: logging.LogRecord) -> str:
        msg = record.getMessage()
        if "\n" in msg:
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

        js = json.dumps(extra, sort_keys=True, indent=(4 if self.indent else None), cls=JSONEncoder)
        if self._stream_isatty() and not self.no_color:
            hl = pygments.highlight  # pyright: ignore [reportUnknownMemberType, reportUnknownVariableType]
            js = hl(js, JsonLexer(), Terminal256Formatter[str](style=self.pyg_style), None)
        return message + " " + js.strip()

    @staticmethod
    def _stream_isatty() -> bool:
        for handler in logging.root.handlers:
            stream = getattr(handler, "stream", None)
            if stream is not None and hasattr(stream, "isatty"):
                return stream.isatty()
        return False

    def __getattr__(self, name: str) -> t.Any:
        return getattr(self.base, name)
