"""Terminal output for renderctl commands."""

import json
from enum import Enum
from typing import Any, Mapping

import yaml
from rich.console import Console
from rich.panel import Panel
from rich.syntax import Syntax
from rich.table import Table


class OutputFormat(str, Enum):
    """Supported output formats."""

    TABLE = "table"
    JSON = "json"
    YAML = "yaml"
    RAW = "raw"


def flatten(record: Mapping[str, Any], prefix: str = "") -> dict[str, Any]:
    """Flatten nested sections into dotted keys, e.g. ``monitor.max_wait``."""
    flat: dict[str, Any] = {}
    for key, value in record.items():
        name = f"{prefix}{key}"
        if isinstance(value, Mapping) and value:
            flat.update(flatten(value, prefix=f"{name}."))
        else:
            flat[name] = value
    return flat


class OutputFormatter:
    """Status lines, records and banners for the deploy commands.

    Status lines go to stdout and are silenced by ``quiet``; errors always go
    to stderr. Records printed with ``print_data`` follow the selected format.
    ``color`` forces colour on or off; ``None`` colours only a terminal.
    """

    def __init__(
        self,
        format: OutputFormat = OutputFormat.TABLE,
        color: bool | None = True,
        quiet: bool = False,
    ):
        self.format = format
        self.quiet = quiet
        no_color = True if color is False else None
        self._out = Console(force_terminal=color, no_color=no_color, highlight=color is not False)
        self._err = Console(stderr=True, force_terminal=color, no_color=no_color, highlight=False)
        self.color = self._out.is_terminal and not self._out.no_color

    def print(self, message: str, style: str | None = None) -> None:
        if not self.quiet:
            self._out.print(message, style=style)

    def print_info(self, message: str) -> None:
        self.print(f"[blue]ℹ[/blue] {message}")

    def print_success(self, message: str) -> None:
        self.print(f"[green]✓[/green] {message}")

    def print_warning(self, message: str) -> None:
        self.print(f"[yellow]Warning:[/yellow] {message}")

    def print_error(self, message: str) -> None:
        self._err.print(f"[red]Error:[/red] {message}")

    def print_panel(self, content: str, title: str | None = None, style: str = "blue") -> None:
        """Print a bordered banner, such as the final deploy summary."""
        if not self.quiet:
            self._out.print(Panel(content, title=title, border_style=style))

    def print_data(self, record: Mapping[str, Any], title: str | None = None) -> None:
        """Print a single record in the configured format.

        JSON and YAML keep nested sections; table and raw output flatten them
        into dotted keys.
        """
        if self.format == OutputFormat.JSON:
            self._print_document(json.dumps(record, indent=2, default=str), "json")
        elif self.format == OutputFormat.YAML:
            self._print_document(
                yaml.safe_dump(dict(record), default_flow_style=False, allow_unicode=True, sort_keys=False),
                "yaml",
            )
        elif self.format == OutputFormat.RAW:
            for key, value in flatten(record).items():
                self._print_plain(f"{key}: {value}")
        else:
            table = Table(title=title, show_header=True, header_style="bold cyan")
            table.add_column("Field", style="dim")
            table.add_column("Value")
            for key, value in flatten(record).items():
                table.add_row(key, str(value))
            self._out.print(table)

    def _print_document(self, text: str, lexer: str) -> None:
        if self.color:
            self._out.print(Syntax(text, lexer, theme="monokai"))
        else:
            self._print_plain(text.rstrip("\n"))

    def _print_plain(self, text: str) -> None:
        self._out.print(text, markup=False, emoji=False, highlight=False, soft_wrap=True)


def format_duration(seconds: float) -> str:
    """Format seconds as ``42.0s``, ``2.5m`` or ``1.2h``."""
    if seconds < 60:
        return f"{seconds:.1f}s"
    if seconds < 3600:
        return f"{seconds / 60:.1f}m"
    return f"{seconds / 3600:.1f}h"
