"""
CLI utility helpers: consoles and output formatting.
"""

from __future__ import annotations

import json
from typing import Any

from rich.console import Console
from rich.table import Table

console = Console()
err_console = Console(stderr=True)


def print_json(payload: Any) -> None:
    console.print_json(json.dumps(payload, default=str, ensure_ascii=False))


def print_pairs(pairs: list[tuple[str, Any]], *, title: str = "") -> None:
    """Render key/value pairs as a two-column table."""
    table = Table(title=title or None, show_header=False)
    table.add_column("Field", style="bold cyan")
    table.add_column("Value")
    for key, value in pairs:
        table.add_row(key, str(value))
    console.print(table)


def fail(message: str, code: str = "ERROR") -> None:
    err_console.print(f"[bold red]Error[/bold red] ({code}): {message}")
