"""Rich console helpers for terminal output."""

import json
from collections.abc import Iterable
from typing import Any

import typer
from rich.console import Console as RichConsole
from rich.table import Table


class Console:
    """Wrapper around rich.Console with JSON-aware convenience methods.

    In JSON mode every decorative print is suppressed so stdout carries only
    the JSON document written by emit_json().
    """

    def __init__(self) -> None:
        self._console = RichConsole()
        self._json_mode = False

    def set_json_mode(self, enabled: bool) -> None:
        self._json_mode = enabled

    def print(self, *args: Any, **kwargs: Any) -> None:
        if not self._json_mode:
            self._console.print(*args, **kwargs)

    def print_success(self, message: str) -> None:
        if not self._json_mode:
            self._console.print(f"[green]✓[/green] {message}")

    def print_error(self, message: str) -> None:
        # Errors are shown even in JSON mode, on stderr.
        RichConsole(stderr=True).print(f"[red]✗[/red] {message}")

    def print_warning(self, message: str) -> None:
        if not self._json_mode:
            self._console.print(f"[yellow]⚠[/yellow] {message}")

    def print_fields(
        self, title: str, rows: Iterable[tuple[str, object | None]]
    ) -> None:
        """Render label/value pairs as a two-column table; None shows as '-'."""
        table = Table(title=title, show_header=False, title_justify="left")
        table.add_column("Field", style="cyan", no_wrap=True)
        table.add_column("Value", overflow="fold")
        for label, value in rows:
            table.add_row(label, "-" if value is None else str(value))
        self.print(table)

    def emit_json(self, data: Any) -> None:
        """Write a JSON document to stdout regardless of mode."""
        typer.echo(json.dumps(data, indent=2))


# Global console instance
console = Console()
