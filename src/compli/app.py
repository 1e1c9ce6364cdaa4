"""The ``compli`` command line.

Six top-level commands are registered on :data:`app`: ``login``,
``login_automate`` and ``logout`` from :mod:`compli.commands.session`, and
``profiles``, ``upload`` and ``version`` from :mod:`compli.commands.profiles`.
Global flags (output format, colour, verbosity, request timeout) are
handled once in :func:`main_callback`.

:func:`main` is the console script. Errors that escape a command end the
process with exit code 1, after writing a crash log for anything that is
not a :class:`~compli.exceptions.CompliError`.
"""

from __future__ import annotations

import logging
import signal
import sys
import traceback
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

import typer
from rich.logging import RichHandler

from compli import __version__
from compli.commands.profiles import profiles_command, upload_command, version_command
from compli.commands.session import login_automate_command, login_command, logout_command
from compli.exit_codes import EXIT_GENERIC_FAILURE, EXIT_INTERRUPTED


app = typer.Typer(
    name="compli",
    help="Log in to compliance-reporting servers and manage profiles.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)

app.command("login")(login_command)
app.command("login_automate")(login_automate_command)
app.command("logout")(logout_command)
app.command("profiles")(profiles_command)
app.command("upload")(upload_command)
app.command("version")(version_command)


def _show_version(value: bool) -> None:
    if not value:
        return
    typer.echo(f"compli {__version__}")
    raise typer.Exit()


def _configure_logging(verbose: bool, output: Any) -> None:
    """Route library log records to stderr through Rich when ``--verbose`` is set."""
    root = logging.getLogger("compli")
    for handler in list(root.handlers):
        if isinstance(handler, RichHandler):
            root.removeHandler(handler)
    if not verbose:
        root.setLevel(logging.WARNING)
        return
    handler = RichHandler(console=output.stderr_console, show_path=False)
    root.addHandler(handler)
    root.setLevel(logging.DEBUG)


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        callback=_show_version,
        is_eager=True,
        help="Show version and exit.",
    ),
    json_output: bool = typer.Option(False, "--json", help="Print listings as JSON."),
    plain_output: bool = typer.Option(False, "--plain", help="Print listings as tab-separated text."),
    no_color: bool = typer.Option(False, "--no-color", help="Never use colour or markup."),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Only print errors and requested data."
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Show debug messages and library logs."
    ),
    timeout: Optional[float] = typer.Option(
        None, "--timeout", help="HTTP request timeout in seconds."
    ),
) -> None:
    """Prepare output, logging and the shared context before any command runs.

    A caller that already put an :class:`~compli.context.AppContext` into
    ``obj`` (the test suite does) keeps it; otherwise one is built from the
    resolved settings, the default session store and the HTTP exchanger.
    """
    from compli.auth.store import SessionStore
    from compli.client.exchanger import HttpTokenExchanger
    from compli.config import resolve_config
    from compli.context import CONTEXT_KEY, AppContext
    from compli.output import OutputFormat, OutputManager, set_output

    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN
    else:
        fmt = OutputFormat.AUTO
    output = OutputManager(format=fmt, no_color=no_color, quiet=quiet, verbose=verbose)
    set_output(output)
    _configure_logging(verbose, output)

    obj = ctx.ensure_object(dict)
    if CONTEXT_KEY in obj:
        return
    config = resolve_config(cli_timeout=timeout)
    obj[CONTEXT_KEY] = AppContext(
        store=SessionStore(),
        exchanger=HttpTokenExchanger(timeout=config.request.timeout),
        config=config,
    )


def _cancel(signum: int, frame: Any) -> None:  # noqa: ANN401
    sys.stderr.write("\nCancelled.\n")
    sys.exit(EXIT_INTERRUPTED)


def _setup_signal_handlers() -> None:
    signal.signal(signal.SIGINT, _cancel)


def _write_crash_log(exc: Exception) -> Path:
    """Save the active traceback under ``<data_dir>/logs`` and return its path."""
    from compli.config import get_data_dir

    logs_dir = get_data_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    log_path = logs_dir / f"crash-{datetime.now():%Y%m%d-%H%M%S}.log"
    log_path.write_text(
        f"compli {__version__}\n{' '.join(sys.argv)}\n\n{traceback.format_exc()}",
        encoding="utf-8",
    )
    return log_path


def main() -> None:
    """Console-script entry point.

    A :class:`~compli.exceptions.CompliError` that escapes a command is
    printed and turned into its ``exit_code``. Any other exception is
    written to a crash log and exits with :data:`EXIT_GENERIC_FAILURE`.
    """
    from compli.exceptions import CompliError
    from compli.output import error

    _setup_signal_handlers()
    try:
        app()
    except KeyboardInterrupt:
        _cancel(signal.SIGINT, None)
    except CompliError as exc:
        error(str(exc))
        sys.exit(exc.exit_code)
    except Exception as exc:
        log_path = _write_crash_log(exc)
        error(f"Unexpected error. Debug log: {log_path}")
        sys.exit(EXIT_GENERIC_FAILURE)
