"""Terminal output for the openapi-to-skills CLI.

Two streams, two jobs:

* **stdout** carries data a user may pipe somewhere else: ``inspect``
  tables, ``config show`` and the file list of ``convert --dry-run``.
* **stderr** carries everything else. Progress lines, the conversion
  summary panel, warnings and errors all go here.

The format of stdout data is chosen once per process. ``--json`` and
``--plain`` force it; otherwise Rich tables are used on an interactive
terminal and tab-separated text when piped. Colour is off with
``--no-color``, ``NO_COLOR`` or ``TERM=dumb``.

:class:`OutputManager` holds these choices. The CLI callback installs one
with :func:`set_output`; the module-level helpers (:func:`info`,
:func:`error` and friends) forward to it so library code never has to carry
a manager around. Library modules that only need diagnostics use
:mod:`logging` instead, and :meth:`OutputManager.configure_logging` sends
those records to the same stderr console.
"""

from __future__ import annotations

import json
import logging
import os
import sys
from enum import Enum
from typing import Any, Optional

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.syntax import Syntax
from rich.table import Table

_LIBRARY_LOGGER = "openapi_to_skills"
_HANDLER_MARKER = "_openapi_to_skills"


class OutputFormat(str, Enum):
    """How stdout data is rendered. ``AUTO`` becomes ``RICH`` or ``PLAIN``."""

    AUTO = "auto"
    JSON = "json"
    PLAIN = "plain"
    RICH = "rich"


class OutputManager:
    """Routes data to stdout and diagnostics to stderr.

    Args:
        format: Format for stdout data. ``AUTO`` picks ``RICH`` on a colour
            capable TTY and ``PLAIN`` otherwise.
        no_color: Print diagnostics without colour or markup.
        quiet: Drop info, success, suggestion and panel messages.
        verbose: Show debug messages and debug-level log records.
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

        if format != OutputFormat.AUTO:
            self._format = format
        elif _is_tty() and not self._no_color:
            self._format = OutputFormat.RICH
        else:
            self._format = OutputFormat.PLAIN

        self._stdout = Console(
            file=sys.stdout,
            no_color=self._no_color,
            force_terminal=self._format == OutputFormat.RICH,
        )
        self._stderr = Console(file=sys.stderr, no_color=self._no_color, stderr=True)

    @property
    def format(self) -> OutputFormat:
        return self._format

    @property
    def is_quiet(self) -> bool:
        return self._quiet

    @property
    def is_verbose(self) -> bool:
        return self._verbose

    def configure_logging(self) -> None:
        """Attach a Rich handler for the ``openapi_to_skills`` logger.

        Any handler installed by an earlier call is removed first, so the
        logger never ends up with two. Records stop propagating to the root
        logger. The level is ``DEBUG`` when verbose, ``ERROR`` when quiet
        and ``WARNING`` otherwise.
        """
        logger = logging.getLogger(_LIBRARY_LOGGER)
        for existing in [h for h in logger.handlers if getattr(h, _HANDLER_MARKER, False)]:
            logger.removeHandler(existing)

        handler = RichHandler(
            console=self._stderr,
            show_time=False,
            show_path=False,
            markup=False,
        )
        setattr(handler, _HANDLER_MARKER, True)
        logger.addHandler(handler)
        logger.propagate = False
        if self._verbose:
            logger.setLevel(logging.DEBUG)
        elif self._quiet:
            logger.setLevel(logging.ERROR)
        else:
            logger.setLevel(logging.WARNING)

    # ------------------------------------------------------------------ #
    # stdout
    # ------------------------------------------------------------------ #

    def print_data(self, text: str) -> None:
        """Write one line of data to stdout."""
        print(text, file=sys.stdout, flush=True)

    def format_data(self, data: Any) -> None:
        """Print a dict or list to stdout.

        JSON mode dumps it indented, plain mode writes one ``key<TAB>value``
        line per dict entry (or one line per list item) and Rich mode shows
        highlighted JSON.
        """
        if self._format == OutputFormat.PLAIN:
            if isinstance(data, dict):
                lines = [f"{key}\t{value}" for key, value in data.items()]
            elif isinstance(data, list):
                lines = [str(item) for item in data]
            else:
                lines = [str(data)]
            for line in lines:
                self.print_data(line)
            return

        text = json.dumps(data, indent=2, ensure_ascii=False, default=str)
        if self._format == OutputFormat.JSON:
            self.print_data(text)
        else:
            self._stdout.print(Syntax(text, "json", theme="monokai", word_wrap=True))

    def print_table(
        self,
        headers: list[str],
        rows: list[list[str]],
        title: Optional[str] = None,
    ) -> None:
        """Print rows to stdout.

        JSON mode emits a list of objects keyed by header, plain mode emits
        tab-separated lines with the headers first, and Rich mode draws a
        :class:`~rich.table.Table` (the only mode that shows *title*).
        """
        if self._format == OutputFormat.JSON:
            records = [dict(zip(headers, row)) for row in rows]
            self.print_data(json.dumps(records, indent=2, ensure_ascii=False))
        elif self._format == OutputFormat.PLAIN:
            for row in [headers, *rows]:
                self.print_data("\t".join(row))
        else:
            table = Table(title=title, show_header=True, header_style="bold cyan")
            for header in headers:
                table.add_column(header)
            for row in rows:
                table.add_row(*row)
            self._stdout.print(table)

    # ------------------------------------------------------------------ #
    # stderr
    # ------------------------------------------------------------------ #

    def _diagnostic(self, plain: str, markup: str) -> None:
        if self._no_color:
            print(plain, file=sys.stderr, flush=True)
        else:
            self._stderr.print(markup)

    def info(self, message: str) -> None:
        """Progress or status line. Hidden when quiet."""
        if not self._quiet:
            self._diagnostic(message, escape(message))

    def success(self, message: str) -> None:
        """Green status line. Hidden when quiet."""
        if not self._quiet:
            self._diagnostic(message, f"[green]{escape(message)}[/green]")

    def warning(self, message: str) -> None:
        """Always shown, prefixed with ``Warning:``."""
        self._diagnostic(f"Warning: {message}", f"[yellow]Warning:[/yellow] {escape(message)}")

    def error(self, message: str) -> None:
        """Always shown, prefixed with ``Error:``."""
        self._diagnostic(f"Error: {message}", f"[bold red]Error:[/bold red] {escape(message)}")

    def suggest(self, message: str) -> None:
        """Dimmed next-step hint with an arrow. Hidden when quiet."""
        if not self._quiet:
            self._diagnostic(f"→ {message}", f"[dim]→ {escape(message)}[/dim]")

    def debug(self, message: str) -> None:
        """Shown only when verbose, prefixed with ``[debug]``."""
        if self._verbose:
            self._diagnostic(f"[debug] {message}", f"[dim]\\[debug] {escape(message)}[/dim]")

    def panel(self, message: str, title: Optional[str] = None) -> None:
        """Boxed multi-line summary. Hidden when quiet.

        Without colour the title (if any) and the body are printed as plain
        lines.
        """
        if self._quiet:
            return
        if not self._no_color:
            self._stderr.print(Panel(escape(message), title=title, expand=False))
            return
        if title:
            print(title, file=sys.stderr, flush=True)
        print(message, file=sys.stderr, flush=True)


def _is_tty() -> bool:
    return hasattr(sys.stdout, "isatty") and sys.stdout.isatty()


def _should_disable_color() -> bool:
    """True when ``NO_COLOR`` is set to anything or ``TERM`` is ``dumb``."""
    return "NO_COLOR" in os.environ or os.environ.get("TERM") == "dumb"


# ------------------------------------------------------------------ #
# Process-wide manager
# ------------------------------------------------------------------ #

_output: Optional[OutputManager] = None


def get_output() -> OutputManager:
    """Return the installed manager, creating a default one on first use."""
    global _output
    if _output is None:
        _output = OutputManager()
    return _output


def set_output(output: OutputManager) -> None:
    global _output
    _output = output


def reset_output() -> None:
    """Forget the installed manager. Tests call this between cases."""
    global _output
    _output = None


def format_data(data: Any) -> None:
    get_output().format_data(data)


def print_data(text: str) -> None:
    get_output().print_data(text)


def print_table(headers: list[str], rows: list[list[str]], title: Optional[str] = None) -> None:
    get_output().print_table(headers, rows, title)


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


def panel(message: str, title: Optional[str] = None) -> None:
    get_output().panel(message, title)
