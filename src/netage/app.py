"""Typer application and CLI entry point for netage.

This module builds the root Typer application, registers the built-in
sub-commands (``process``, ``lint``, ``profiles``, ``plugins``,
``build``), and maps failures to exit codes.

The :func:`main` function is the console-script entry point declared in
``pyproject.toml``. Argument-parsing failures exit with
:data:`~netage.exit_codes.EXIT_INVALID_USAGE` (127),
:class:`~netage.exceptions.NetageError` with its ``exit_code``, and
unexpected exceptions write a crash log under the data directory and exit
with :data:`~netage.exit_codes.EXIT_GENERIC_FAILURE`.

See Also:
    :mod:`netage.config`: Profile and global configuration resolution.
    :mod:`netage.output`: Output formatting initialised in :func:`main_callback`.
"""

from __future__ import annotations

import logging
import signal
import sys
import traceback
from datetime import datetime
from typing import Any, Optional

import click
import typer
from rich.logging import RichHandler

from netage import __version__
from netage.commands.build import BUILD_CONTEXT_SETTINGS, build_command
from netage.commands.process import lint_command, process_command
from netage.commands.profiles import plugins_command, profiles_command
from netage.exit_codes import EXIT_GENERIC_FAILURE, EXIT_INVALID_USAGE, EXIT_SUCCESS


app = typer.Typer(
    name="netage",
    help="Apply the Netage publishing style to HTML specification documents.",
    add_completion=False,
    rich_markup_mode="rich",
)

app.command("process")(process_command)
app.command("lint")(lint_command)
app.command("profiles")(profiles_command)
app.command("plugins")(plugins_command)
app.command("build", context_settings=BUILD_CONTEXT_SETTINGS)(build_command)


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"netage {__version__}")
        raise typer.Exit()


def _configure_logging(verbose: bool, console: Any) -> None:
    """Send ``netage.*`` log records to stderr through Rich.

    Library modules only create loggers; this is the one place that
    attaches a handler.
    """
    package_logger = logging.getLogger("netage")
    for handler in list(package_logger.handlers):
        if isinstance(handler, RichHandler):
            package_logger.removeHandler(handler)
    package_logger.addHandler(
        RichHandler(console=console, show_path=False, show_time=False)
    )
    package_logger.setLevel(logging.DEBUG if verbose else logging.WARNING)


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    profile: Optional[str] = typer.Option(
        None, "--profile", "-p", help="Profile name to use."
    ),
    json_output: bool = typer.Option(False, "--json", help="JSON output format."),
    plain_output: bool = typer.Option(False, "--plain", help="Plain text output."),
    no_color: bool = typer.Option(False, "--no-color", help="Disable color output."),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Suppress non-essential output."
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug output."),
) -> None:
    """Root callback executed before every sub-command.

    Initialises the global :class:`~netage.output.OutputManager` and the
    log handler from the flags, and stores the profile override in
    ``ctx.obj`` for the sub-commands.
    """
    from netage.output import OutputFormat, OutputManager, set_output

    fmt = OutputFormat.AUTO
    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN

    output = OutputManager(format=fmt, no_color=no_color, quiet=quiet, verbose=verbose)
    set_output(output)
    _configure_logging(verbose, output.stderr_console)

    ctx.ensure_object(dict)
    ctx.obj["profile"] = profile
    ctx.obj["verbose"] = verbose

    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit()


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def _write_crash_log(exc: Exception) -> str:
    """Write the current traceback to the data directory and return its path."""
    from netage.config import get_data_dir

    logs_dir = get_data_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    log_path = logs_dir / f"crash-{timestamp}.log"
    log_path.write_text(traceback.format_exc())
    return str(log_path)


def main() -> None:
    """CLI entry point invoked by the ``netage`` console script.

    Raises:
        SystemExit: Always.
    """
    _setup_signal_handlers()
    try:
        rv = app(standalone_mode=False)
    except click.UsageError as exc:
        exc.show()
        sys.exit(EXIT_INVALID_USAGE)
    except click.ClickException as exc:
        exc.show()
        sys.exit(exc.exit_code)
    except click.Abort:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)
    except Exception as exc:
        from netage.exceptions import NetageError
        from netage.output import error

        if isinstance(exc, NetageError):
            error(str(exc))
            sys.exit(exc.exit_code)
        log_path = _write_crash_log(exc)
        error(f"Unexpected error. Debug log: {log_path}")
        sys.exit(EXIT_GENERIC_FAILURE)
    sys.exit(rv if isinstance(rv, int) else EXIT_SUCCESS)
