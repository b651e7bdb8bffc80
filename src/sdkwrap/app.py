"""Typer application and CLI entry point for sdkwrap.

This module builds the root Typer application and registers the built-in
sub-commands (``generate``, ``inspect``, ``config``). :func:`main` is the
console-script entry point declared in ``pyproject.toml``: it installs a
SIGINT handler, invokes the app, maps :class:`~sdkwrap.exceptions.SdkwrapError`
to its exit code, and writes a crash log for anything unexpected.

See Also:
    :mod:`sdkwrap.config`: Generator configuration resolution.
    :mod:`sdkwrap.output`: Output formatting initialised in :func:`main_callback`.
"""

from __future__ import annotations

import logging
import signal
import sys
import traceback
from datetime import datetime
from typing import Any

import typer
from rich.logging import RichHandler

from sdkwrap import __version__
from sdkwrap.exit_codes import EXIT_GENERIC_FAILURE


app = typer.Typer(
    name="sdkwrap",
    help="Generate scripting-language wrapper functions for a compiled API client.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)

# ------------------------------------------------------------------ #
# Built-in commands
# ------------------------------------------------------------------ #

from sdkwrap.commands.config import config_app  # noqa: E402
from sdkwrap.commands.generate import generate_command  # noqa: E402
from sdkwrap.commands.inspect import inspect_app  # noqa: E402

app.command("generate")(generate_command)
app.add_typer(inspect_app, name="inspect", help="Inspect endpoints and types.")
app.add_typer(config_app, name="config", help="Configuration management.")


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"sdkwrap {__version__}")
        raise typer.Exit()


def _configure_logging(verbose: bool, console: Any) -> None:
    """Route the ``sdkwrap`` logger to stderr through Rich when *verbose*.

    Without ``--verbose`` library log records are dropped; commands report
    what matters through :mod:`sdkwrap.output`.
    """
    logger = logging.getLogger("sdkwrap")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.propagate = False
    if verbose:
        logger.setLevel(logging.DEBUG)
        logger.addHandler(RichHandler(console=console, show_path=False, markup=False))
    else:
        logger.setLevel(logging.WARNING)
        logger.addHandler(logging.NullHandler())


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    json_output: bool = typer.Option(
        False, "--json", help="JSON output format."
    ),
    plain_output: bool = typer.Option(
        False, "--plain", help="Plain text output."
    ),
    no_color: bool = typer.Option(
        False, "--no-color", help="Disable color output."
    ),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Suppress non-essential output."
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable debug output."
    ),
) -> None:
    """Root callback executed before every sub-command.

    Initialises the global :class:`~sdkwrap.output.OutputManager` and the
    ``sdkwrap`` logger from the global flags.
    """
    from sdkwrap.output import OutputFormat, OutputManager, set_output

    fmt = OutputFormat.AUTO
    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN

    output = OutputManager(format=fmt, no_color=no_color, quiet=quiet, verbose=verbose)
    set_output(output)
    _configure_logging(verbose, output.stderr_console)

    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def _write_crash_log(exc: Exception) -> str:
    """Write the current traceback under the data directory and return its path."""
    from sdkwrap.config import get_data_dir

    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    log_path = get_data_dir() / f"crash-{timestamp}.log"
    log_path.write_text(f"{type(exc).__name__}: {exc}\n\n{traceback.format_exc()}")
    return str(log_path)


def main() -> None:
    """CLI entry point invoked by the ``sdkwrap`` console script.

    Unhandled :class:`~sdkwrap.exceptions.SdkwrapError` instances cause a
    clean exit with the error's ``exit_code``. All other exceptions produce
    a crash log and a generic failure exit.

    Raises:
        SystemExit: Always raised (either by Typer or explicitly).
    """
    _setup_signal_handlers()
    try:
        app()
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)
    except Exception as exc:
        from sdkwrap.exceptions import SdkwrapError
        from sdkwrap.output import error

        if isinstance(exc, SdkwrapError):
            error(str(exc))
            sys.exit(exc.exit_code)
        log_path = _write_crash_log(exc)
        error(f"Unexpected error. Debug log: {log_path}")
        sys.exit(EXIT_GENERIC_FAILURE)
