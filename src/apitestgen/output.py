"""Console output for the apitestgen CLI.

Generated file paths and plan tables go to stdout so they can be piped;
progress, errors and hints go to stderr. Rich styling is used only when
stdout is a terminal and colour has not been turned off through
``NO_COLOR``, ``TERM=dumb`` or ``--no-color``.

The command modules call the module-level helpers (:func:`error`,
:func:`print_paths`, ...), which forward to the :class:`OutputManager`
installed by :func:`~apitestgen.app.main_callback`.
"""

from __future__ import annotations

import json
import os
import sys
from enum import Enum
from pathlib import Path
from typing import Any, Iterable, Optional

from rich.console import Console
from rich.table import Table


class OutputFormat(str, Enum):
    """How stdout data is rendered. ``AUTO`` picks ``RICH`` on a colour TTY."""

    AUTO = "auto"
    JSON = "json"
    PLAIN = "plain"
    RICH = "rich"


class OutputManager:
    """Writes generator results to stdout and diagnostics to stderr.

    Args:
        format: Format for stdout data; ``AUTO`` is resolved here.
        no_color: Print diagnostics as plain text without Rich markup.
        quiet: Drop progress messages and hints. Errors still show.
        verbose: Show ``debug`` messages.
    """

    def __init__(
        self,
        format: OutputFormat = OutputFormat.AUTO,
        no_color: bool = False,
        quiet: bool = False,
        verbose: bool = False,
    ) -> None:
        self._no_color = no_color or _color_disabled_by_env()
        self._quiet = quiet
        self._verbose = verbose

        if format == OutputFormat.AUTO:
            rich = sys.stdout.isatty() and not self._no_color
            format = OutputFormat.RICH if rich else OutputFormat.PLAIN
        self._format = format

        self._stdout = Console(
            file=sys.stdout,
            no_color=self._no_color,
            force_terminal=(format == OutputFormat.RICH),
        )
        self._stderr = Console(file=sys.stderr, no_color=self._no_color, stderr=True)

    @property
    def format(self) -> OutputFormat:
        return self._format

    # stdout

    def print_data(self, text: str) -> None:
        print(text, file=sys.stdout, flush=True)

    def _print_json(self, data: Any) -> None:
        self.print_data(json.dumps(data, indent=2, ensure_ascii=False))

    def print_paths(self, paths: Iterable[Path]) -> None:
        """Print the files a run wrote: a JSON array, or one path per line."""
        names = [str(path) for path in paths]
        if self._format == OutputFormat.JSON:
            self._print_json(names)
        else:
            for name in names:
                self.print_data(name)

    def print_table(
        self,
        headers: list[str],
        rows: list[list[str]],
        title: Optional[str] = None,
    ) -> None:
        """Print *rows* as objects keyed by *headers* (JSON), TSV (plain) or a Rich table.

        *title* is only shown by the Rich table.
        """
        if self._format == OutputFormat.JSON:
            self._print_json([dict(zip(headers, row)) for row in rows])
        elif self._format == OutputFormat.PLAIN:
            for line in [headers, *rows]:
                self.print_data("\t".join(line))
        else:
            table = Table(title=title, show_header=True, header_style="bold cyan")
            for header in headers:
                table.add_column(header)
            for row in rows:
                table.add_row(*row)
            self._stdout.print(table)

    # stderr

    def _diagnose(self, text: str, markup: str) -> None:
        if self._no_color:
            print(text, file=sys.stderr, flush=True)
        else:
            self._stderr.print(markup)

    def info(self, message: str) -> None:
        if not self._quiet:
            self._diagnose(message, message)

    def success(self, message: str) -> None:
        if not self._quiet:
            self._diagnose(message, f"[green]{message}[/green]")

    def suggest(self, message: str) -> None:
        """Hint at the next command to run, e.g. ``pytest`` on the output."""
        if not self._quiet:
            self._diagnose(f"→ {message}", f"[dim]→ {message}[/dim]")

    def error(self, message: str) -> None:
        self._diagnose(f"Error: {message}", f"[bold red]Error:[/bold red] {message}")

    def debug(self, message: str) -> None:
        if self._verbose:
            self._diagnose(f"[debug] {message}", f"[dim]\\[debug] {message}[/dim]")


def _color_disabled_by_env() -> bool:
    return os.environ.get("NO_COLOR") is not None or os.environ.get("TERM") == "dumb"


_output: Optional[OutputManager] = None


def get_output() -> OutputManager:
    """Return the installed :class:`OutputManager`, creating a default one."""
    global _output
    if _output is None:
        _output = OutputManager()
    return _output


def set_output(output: OutputManager) -> None:
    global _output
    _output = output


def reset_output() -> None:
    """Forget the installed manager so the next call builds a fresh one."""
    global _output
    _output = None


def print_paths(paths: Iterable[Path]) -> None:
    get_output().print_paths(paths)


def print_table(
    headers: list[str],
    rows: list[list[str]],
    title: Optional[str] = None,
) -> None:
    get_output().print_table(headers, rows, title)


def info(message: str) -> None:
    get_output().info(message)


def success(message: str) -> None:
    get_output().success(message)


def suggest(message: str) -> None:
    get_output().suggest(message)


def error(message: str) -> None:
    get_output().error(message)


def debug(message: str) -> None:
    get_output().debug(message)
