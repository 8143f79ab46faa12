"""Typer application and console entry point for openapi-to-skills.

The root :data:`app` carries three commands:

* ``convert`` writes a skill bundle for an OpenAPI document
  (:mod:`openapi_to_skills.commands.convert`).
* ``inspect`` previews the resources, schemas and auth schemes a document
  would produce, without writing anything
  (:mod:`openapi_to_skills.commands.inspect`).
* ``config`` reads and edits the user's ``convert`` defaults
  (:mod:`openapi_to_skills.commands.config`).

:func:`main` is the ``openapi-to-skills`` console script. Errors from the
conversion pipeline leave with their own exit code; anything else is treated
as a bug, its traceback goes to a crash log under the data directory, and the
process exits with :data:`~openapi_to_skills.exit_codes.EXIT_GENERIC_FAILURE`.

See Also:
    :mod:`openapi_to_skills.output`: The output manager configured by
    :func:`main_callback`.
"""

from __future__ import annotations

import signal
import sys
import traceback
from datetime import datetime
from pathlib import Path
from typing import Any

import typer

from openapi_to_skills import __version__
from openapi_to_skills.exit_codes import EXIT_GENERIC_FAILURE

_CANCELLED_EXIT_CODE = 130


app = typer.Typer(
    name="openapi-to-skills",
    help="Convert OpenAPI 3.0 specifications into Agent Skill reference bundles.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)

# ------------------------------------------------------------------ #
# Commands
# ------------------------------------------------------------------ #

from openapi_to_skills.commands.config import config_app  # noqa: E402
from openapi_to_skills.commands.convert import convert_command  # noqa: E402
from openapi_to_skills.commands.inspect import inspect_app  # noqa: E402

app.command("convert")(convert_command)
app.add_typer(inspect_app, name="inspect", help="Preview what a spec converts into.")
app.add_typer(config_app, name="config", help="View and edit convert defaults.")


def _show_version(value: bool) -> None:
    if value:
        typer.echo(f"openapi-to-skills {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        callback=_show_version,
        is_eager=True,
        help="Print the version and exit.",
    ),
    json_output: bool = typer.Option(
        False, "--json", help="Print tables and data as JSON."
    ),
    plain_output: bool = typer.Option(
        False, "--plain", help="Print tables and data as tab-separated text."
    ),
    no_color: bool = typer.Option(
        False, "--no-color", help="Never use colour or Rich markup."
    ),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Only report warnings and errors."
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Also report debug messages."
    ),
) -> None:
    """Configure output before any command runs.

    Builds the process-wide :class:`~openapi_to_skills.output.OutputManager`
    and hands the ``openapi_to_skills`` logger to it, so warnings raised
    while parsing or writing show up on stderr next to the CLI's own
    messages.

    Raises:
        typer.BadParameter: If both ``--json`` and ``--plain`` are given.
    """
    from openapi_to_skills.output import OutputFormat, OutputManager, set_output

    if json_output and plain_output:
        raise typer.BadParameter("--json and --plain cannot be combined.")

    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN
    else:
        fmt = OutputFormat.AUTO

    manager = OutputManager(format=fmt, no_color=no_color, quiet=quiet, verbose=verbose)
    set_output(manager)
    manager.configure_logging()

    ctx.ensure_object(dict)
    ctx.obj.update(quiet=quiet, verbose=verbose)


def _setup_signal_handlers() -> None:
    """Exit quietly with status 130 on Ctrl-C."""

    def _on_sigint(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(_CANCELLED_EXIT_CODE)

    signal.signal(signal.SIGINT, _on_sigint)


def _write_crash_log(exc: BaseException) -> Path:
    """Save the traceback of *exc* under ``<data dir>/logs`` and return its path."""
    from openapi_to_skills.config import get_data_dir

    logs_dir = get_data_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    log_path = logs_dir / f"crash-{datetime.now():%Y%m%d-%H%M%S}.log"
    log_path.write_text("".join(traceback.format_exception(exc)), encoding="utf-8")
    return log_path


def main() -> None:
    """Run the CLI and turn uncaught errors into exit codes.

    Raises:
        SystemExit: Always, either from Typer or from the error mapping.
    """
    from openapi_to_skills.exceptions import SkillsError
    from openapi_to_skills.output import error

    _setup_signal_handlers()
    try:
        app()
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(_CANCELLED_EXIT_CODE)
    except SkillsError as exc:
        error(str(exc))
        sys.exit(exc.exit_code)
    except Exception as exc:
        log_path = _write_crash_log(exc)
        error(f"Unexpected error: {exc}. Traceback saved to {log_path}")
        sys.exit(EXIT_GENERIC_FAILURE)
