"""Terminal output shared by designcli and the clients it generates.

Generated clients import this module through :mod:`designcli.runtime`, so
a response body printed by a generated command and a table printed by
``designcli inspect`` follow the same rules:

* response bodies, tables and JSON go to stdout, nothing else does;
* status lines, request dumps, warnings and errors go to stderr;
* ``auto`` picks Rich on a colour-capable terminal and plain text when
  stdout is piped;
* ``NO_COLOR``, ``TERM=dumb`` and ``--no-color`` turn colour off.

The CLI callback installs an :class:`OutputManager` with
:func:`set_output`. Other modules call the module-level helpers.
"""

from __future__ import annotations

import json
import os
import sys
from enum import Enum
from typing import Any, NamedTuple, Optional

from rich.console import Console
from rich.markup import escape
from rich.syntax import Syntax
from rich.table import Table


class OutputFormat(str, Enum):
    """Output formats accepted by ``--json``/``--plain`` and ``output.format``."""

    AUTO = "auto"
    JSON = "json"
    PLAIN = "plain"
    RICH = "rich"


class _Level(NamedTuple):
    prefix: str
    style: Optional[str]
    quiet_hides: bool


_LEVELS = {
    "info": _Level("", None, True),
    "success": _Level("", "green", True),
    "suggest": _Level("→ ", "dim", True),
    "warning": _Level("Warning: ", "yellow", False),
    "error": _Level("Error: ", "bold red", False),
    "debug": _Level("[debug] ", "dim", False),
}


class OutputManager:
    """Write data to stdout and diagnostics to stderr in one output format.

    Args:
        format: Requested format. ``AUTO`` is resolved here, once.
        no_color: Disable colour and Rich markup.
        quiet: Hide ``info``, ``success`` and ``suggest`` messages.
        verbose: Show ``debug`` messages.
    """

    def __init__(
        self,
        format: OutputFormat = OutputFormat.AUTO,
        no_color: bool = False,
        quiet: bool = False,
        verbose: bool = False,
    ) -> None:
        self._no_color = no_color or _should_disable_color()
        self._quiet = quiet
        self._verbose = verbose
        self._format = _resolve_format(format, self._no_color)

        self._stdout = Console(
            file=sys.stdout,
            no_color=self._no_color,
            force_terminal=(self._format == OutputFormat.RICH),
        )
        self._stderr = Console(file=sys.stderr, no_color=self._no_color, stderr=True)

    @property
    def format(self) -> OutputFormat:
        return self._format

    # ------------------------------------------------------------------ #
    # stdout
    # ------------------------------------------------------------------ #

    def format_response(self, data: Any, pretty: bool = False) -> None:
        """Print a decoded or raw response body.

        Text that is not JSON is printed unchanged. JSON is compact in
        plain mode unless *pretty* is set, indented in JSON mode and
        highlighted in Rich mode.
        """
        decoded, is_json = _decode_body(data)
        if not is_json:
            if self._format == OutputFormat.RICH:
                self._stdout.print(decoded, markup=False, highlight=False)
            else:
                self.print_data(decoded)
            return

        indent = 2 if pretty or self._format != OutputFormat.PLAIN else None
        text = json.dumps(decoded, indent=indent, ensure_ascii=False, default=str)
        if self._format == OutputFormat.RICH:
            self._stdout.print(Syntax(text, "json", theme="monokai", word_wrap=True))
        else:
            self.print_data(text)

    def print_data(self, text: str) -> None:
        print(text, file=sys.stdout, flush=True)

    def print_table(
        self,
        headers: list[str],
        rows: list[list[str]],
        title: Optional[str] = None,
    ) -> None:
        """Print rows as a Rich table, JSON records keyed by header, or TSV."""
        if self._format == OutputFormat.JSON:
            records = [dict(zip(headers, row)) for row in rows]
            self.print_data(json.dumps(records, indent=2, ensure_ascii=False))
            return
        if self._format == OutputFormat.PLAIN:
            for line in [headers, *rows]:
                self.print_data("\t".join(line))
            return

        table = Table(title=title, header_style="bold cyan")
        for header in headers:
            table.add_column(header)
        for row in rows:
            table.add_row(*row)
        self._stdout.print(table)

    # ------------------------------------------------------------------ #
    # stderr
    # ------------------------------------------------------------------ #

    def info(self, message: str) -> None:
        self._diagnostic("info", message)

    def success(self, message: str) -> None:
        self._diagnostic("success", message)

    def suggest(self, message: str) -> None:
        self._diagnostic("suggest", message)

    def warning(self, message: str) -> None:
        self._diagnostic("warning", message)

    def error(self, message: str) -> None:
        self._diagnostic("error", message)

    def debug(self, message: str) -> None:
        if self._verbose:
            self._diagnostic("debug", message)

    def _diagnostic(self, level: str, message: str) -> None:
        spec = _LEVELS[level]
        if spec.quiet_hides and self._quiet:
            return
        line = f"{spec.prefix}{message}"
        if self._no_color:
            print(line, file=sys.stderr, flush=True)
            return
        markup = escape(line)
        if spec.style:
            markup = f"[{spec.style}]{markup}[/{spec.style}]"
        self._stderr.print(markup, highlight=False, soft_wrap=True)


def _resolve_format(requested: OutputFormat, no_color: bool) -> OutputFormat:
    if requested != OutputFormat.AUTO:
        return requested
    return OutputFormat.RICH if _is_tty() and not no_color else OutputFormat.PLAIN


def _decode_body(data: Any) -> tuple[Any, bool]:
    """Return *data* decoded from JSON text when possible, and whether it is JSON."""
    if not isinstance(data, str):
        return data, True
    try:
        return json.loads(data), True
    except (json.JSONDecodeError, TypeError):
        return data, False


def _is_tty() -> bool:
    return hasattr(sys.stdout, "isatty") and sys.stdout.isatty()


def _should_disable_color() -> bool:
    """True when ``NO_COLOR`` is set (any value) or ``TERM=dumb``."""
    if os.environ.get("NO_COLOR") is not None:
        return True
    return os.environ.get("TERM") == "dumb"


# ------------------------------------------------------------------ #
# Global instance
# ------------------------------------------------------------------ #

_output: Optional[OutputManager] = None


def get_output() -> OutputManager:
    """Return the installed :class:`OutputManager`, creating a default one lazily."""
    global _output
    if _output is None:
        _output = OutputManager()
    return _output


def set_output(output: OutputManager) -> None:
    global _output
    _output = output


def reset_output() -> None:
    """Forget the installed manager so the next call binds the current streams."""
    global _output
    _output = None


def format_response(data: Any, pretty: bool = False) -> None:
    get_output().format_response(data, pretty)


def info(message: str) -> None:
    get_output().info(message)


def success(message: str) -> None:
    get_output().success(message)


def warning(message: str) -> None:
    get_output().warning(message)


def error(message: str) -> None:
    get_output().error(message)


def suggest(message: str) -> None:
    get_output().suggest(message)


def debug(message: str) -> None:
    get_output().debug(message)
