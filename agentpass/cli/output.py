"""
AgentPass CLI - Rich Output Helpers

Functions:
    print_table    - Print a formatted table
    print_json     - Print formatted JSON
    print_error    - Print error message
    print_success  - Print success message
    print_warning  - Print warning message
"""

from __future__ import annotations

import json
from typing import Optional

from rich.console import Console
from rich.json import JSON
from rich.table import Table

console = Console()
err_console = Console(stderr=True)


def print_table(
    title: str,
    columns: list[str],
    rows: list[list[str]],
    styles: Optional[list[str]] = None,
) -> None:
    table = Table(title=title)

    for i, col in enumerate(columns):
        style = styles[i] if styles and i < len(styles) else None
        table.add_column(col, style=style)

    for row in rows:
        padded_row = list(row) + [""] * (len(columns) - len(row))
        table.add_row(*padded_row[:len(columns)])

    console.print(table)


def print_json(data: dict | list, indent: int = 2) -> None:
    console.print(JSON(json.dumps(data, indent=indent, default=str, ensure_ascii=False)))


def print_error(message: str, hint: Optional[str] = None) -> None:
    err_console.print(f"[bold red]Error:[/bold red] {message}")
    if hint:
        err_console.print(f"[yellow]Hint:[/yellow] {hint}")


def print_success(message: str) -> None:
    console.print(f"[bold green]Success:[/bold green] {message}")


def print_warning(message: str) -> None:
    console.print(f"[bold yellow]Warning:[/bold yellow] {message}")
