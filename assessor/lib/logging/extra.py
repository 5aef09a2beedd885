import importlib
import json
import logging
import string
import sys
import textwrap
import typing as t

import pygments
from pygments.formatters import Terminal256Formatter
from pygments.lexers.data import JsonLexer  # pyright: ignore [reportMissingTypeStubs]
from pygments.style import Style

from assessor.lib.json import JSONEncoder, JSONValue

from .style import LogStyle

ReservedKeys = frozenset(logging.makeLogRecord({}).__dict__) | {"message", "asctime", "color_message"}


def resolve(dotted: str) -> t.Any:
    module, _, name = dotted.rpartition(".")
    return getattr(importlib.import_module(module), name)


class ExtraFormatter(logging.Formatter):
    """
    Wraps a base formatter and appends the record's `extra=` mapping as JSON,
    highlighted when writing to a terminal
    """

    def __init__(
        self,
        base: type[logging.Formatter] | str,
        format: str | None = None,
        datefmt: str | None = None,
        indent: bool | None = None,
        no_color: bool = False,
        pyg_style: type[Style] = LogStyle,
        style: t.Literal["%", "{", "$"] = "%",
        **kwargs: t.Any,
    ):
        base_cls = resolve(base) if isinstance(base, str) else base
        if no_color:
            # colorlog's log_colors are meaningless to plain formatters
            kwargs.pop("log_colors", None)
        self.base = base_cls(format, datefmt=datefmt, style=style, **kwargs)
        self.pyg_style = pyg_style
        self.indent = indent
        self.color = not no_color and sys.stderr.isatty()

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

        encoder = JSONEncoder()

        def encode(obj: t.Any) -> JSONValue:
            try:
                return encoder.default(obj)
            except TypeError:
                return repr(obj)

        js = json.dumps(extra, sort_keys=True, indent=(4 if self.indent else None), default=encode)
        if self.color:
            hl = pygments.highlight  # pyright: ignore [reportUnknownMemberType, reportUnknownVariableType]
            js = hl(js, JsonLexer(), Terminal256Formatter(style=self.pyg_style), None)
        return message + " " + js.strip()
