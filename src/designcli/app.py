"""Typer application and console entry point of designcli.

``designcli`` has three command groups:

* ``generate`` writes a client package for a definition;
* ``inspect`` previews the commands, signers and downloads it would get;
* ``config`` edits the defaults stored in the global config file.

:func:`main` is the ``designcli`` console script. A
:class:`~designcli.exceptions.DesignCLIError` ends the run with that
error's exit code; anything else is treated as a bug, and its traceback is
kept in a crash log under the data directory.
"""

from __future__ import annotations

import logging
import signal
import sys
import traceback
from datetime import datetime
from pathlib import Path
from typing import Any

import typer

from designcli import __version__
from designcli.commands.config import config_app
from designcli.commands.generate import generate_command
from designcli.commands.inspect import inspect_app
from designcli.exit_codes import EXIT_GENERIC_FAILURE, EXIT_INTERRUPTED
from designcli.output import OutputFormat


app = typer.Typer(
    name="designcli",
    help="Generate command line clients from API definitions.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)

app.command("generate")(generate_command)
app.add_typer(inspect_app, name="inspect", help="Preview what a definition generates.")
app.add_typer(config_app, name="config", help="Read and edit the global configuration.")


def _print_version(value: bool) -> None:
    if value:
        typer.echo(f"designcli {__version__}")
        raise typer.Exit()


def _configured_format() -> tuple[OutputFormat, str | None]:
    """Output format from the global config, with the reason it was ignored if any."""
    from designcli.config import load_global_config
    from designcli.exceptions import ConfigError

    try:
        return OutputFormat(load_global_config().output.format), None
    except ConfigError as exc:
        return OutputFormat.AUTO, str(exc)


@app.callback()
def main_callback(
    version: bool = typer.Option(
        False, "--version", callback=_print_version, is_eager=True,
        help="Print the designcli version and exit.",
    ),
    json_output: bool = typer.Option(False, "--json", help="Print data as JSON."),
    plain_output: bool = typer.Option(False, "--plain", help="Print data as plain text."),
    no_color: bool = typer.Option(False, "--no-color", help="Disable colours."),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only print data and problems."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Print debug messages."),
) -> None:
    """Set up output and logging for the sub-command about to run.

    ``--json`` and ``--plain`` override ``output.format`` from the global
    config.
    """
    from designcli.output import OutputManager, set_output, warning

    logging.basicConfig(format="%(levelname)s %(name)s: %(message)s", stream=sys.stderr)
    logging.getLogger("designcli").setLevel(logging.DEBUG if verbose else logging.WARNING)

    ignored = None
    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN
    else:
        fmt, ignored = _configured_format()

    set_output(OutputManager(format=fmt, no_color=no_color, quiet=quiet, verbose=verbose))
    if ignored is not None:
        warning(f"Ignoring output format from config: {ignored}")


def _exit_on_sigint() -> None:
    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(EXIT_INTERRUPTED)

    signal.signal(signal.SIGINT, _handler)


def _write_crash_log(exc: Exception) -> Path:
    """Save the traceback of *exc* as ``logs/crash-<timestamp>.log`` in the data directory."""
    from designcli.config import get_data_dir

    logs_dir = get_data_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    log_path = logs_dir / f"crash-{datetime.now():%Y%m%d-%H%M%S}.log"
    log_path.write_text("".join(traceback.format_exception(type(exc), exc, exc.__traceback__)))
    return log_path


def main() -> None:
    """Run designcli and exit with the code matching the outcome."""
    from designcli.exceptions import DesignCLIError
    from designcli.output import error

    _exit_on_sigint()
    try:
        app()
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(EXIT_INTERRUPTED)
    except DesignCLIError as exc:
        error(str(exc))
        sys.exit(exc.exit_code)
    except Exception as exc:
        error(f"Unexpected error. Debug log: {_write_crash_log(exc)}")
        sys.exit(EXIT_GENERIC_FAILURE)
