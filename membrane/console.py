"""Clean console interface for the membrane simulation.

Usage:
    from membrane.console import console

    with console.spinner("Building BVH..."):
        do_work()

    console.success("Done", detail="600 frames")
    console.warn("Collider geometry not loaded yet")
    console.error("Failed", detail=str(err))
    console.summary("Run", {"steps": 600, "skipped": 0})

Messages and details are printed as plain text, never parsed as rich
markup, so values like `['analytic', 'cast']` or `(V>=3, 3)` show verbatim.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Mapping, Optional

from rich.console import Console as RichConsole
from rich.panel import Panel
from rich.table import Table
from rich.text import Text


class Console:
    """Minimal logging interface with rich output. `quiet` silences all but errors."""

    __slots__ = ('_console', 'quiet')

    def __init__(self, *, quiet: bool = False, rich_console: Optional[RichConsole] = None) -> None:
        self._console = rich_console if rich_console is not None else RichConsole()
        self.quiet = quiet

    def _line(self, mark: str, mark_style: str, message: str, detail: Optional[str]) -> Text:
        text = Text(mark, style=mark_style)
        text.append(f" {message}")
        if detail:
            text.append(f" {detail}", style="dim")
        return text

    @contextmanager
    def spinner(self, message: str):
        """Show a spinner while work is in progress."""
        if self.quiet:
            yield
            return
        with self._console.status(Text(message, style="bold cyan"), spinner="dots"):
            yield

    def success(self, message: str, *, detail: Optional[str] = None) -> None:
        if not self.quiet:
            self._console.print(self._line("✓", "bold green", message, detail))

    def warn(self, message: str, *, detail: Optional[str] = None) -> None:
        if not self.quiet:
            self._console.print(self._line("⚠", "yellow", message, detail))

    def error(self, message: str, *, detail: Optional[str] = None) -> None:
        self._console.print(self._line("✗", "bold red", message, detail))

    def info(self, message: str, *, detail: Optional[str] = None) -> None:
        if not self.quiet:
            self._console.print(self._line("•", "blue", message, detail))

    def header(self, title: str, **fields: object) -> None:
        """Panel with one `key: value` line per field."""
        if self.quiet:
            return
        body = Text()
        for i, (key, value) in enumerate(fields.items()):
            if i:
                body.append("\n")
            body.append(f"{key}: ", style="bold")
            body.append(str(value))
        self._console.print(Panel(body, title=Text(title, style="cyan"), border_style="blue"))

    def summary(self, title: str, values: Mapping[str, Any]) -> None:
        """Two-column table of scalar results; floats get four significant digits."""
        if self.quiet:
            return
        table = Table(title=title, show_header=False, border_style="green")
        table.add_column(style="bold")
        table.add_column(justify="right")
        for key, value in values.items():
            table.add_row(key, f"{value:.4g}" if isinstance(value, float) else str(value))
        self._console.print(table)


console = Console()
