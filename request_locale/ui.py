"""
Console output for the request-locale CLI - Rich formatting with colors and boxes.
"""

from __future__ import annotations

from typing import Any

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

console = Console()

BADGE = "[bold white on dark_cyan] RL [/bold white on dark_cyan]"
DEFAULT_BORDER_COLOR = "cyan"
DEFAULT_PANEL_WIDTH = 70


# ============================================================================
# STATUS MESSAGES
# ============================================================================


def success(message: str, details: str = "", badge: bool = True):
    """Green success message with ✓

    Args:
        message: Main success message
        details: Optional additional details (dimmed)
        badge: Show RL badge (default: True)
    """
    prefix = f"{BADGE} " if badge else ""
    console.print(f"{prefix}[green]✓[/green] {message}")
    if details:
        console.print(f"    [dim]{details}[/dim]")


def error(message: str, details: str = "", badge: bool = True):
    """Red error message with ✗"""
    prefix = f"{BADGE} " if badge else ""
    console.print(f"{prefix}[red]✗[/red] {message}")
    if details:
        console.print(f"    [red]{details}[/red]")


def warning(message: str, details: str = "", badge: bool = True):
    """Yellow warning with ⚠"""
    prefix = f"{BADGE} " if badge else ""
    console.print(f"{prefix}[yellow]⚠[/yellow] {message}")
    if details:
        console.print(f"    [dim]{details}[/dim]")


def info(message: str, badge: bool = False):
    prefix = f"{BADGE} [dim]│[/dim] " if badge else ""
    console.print(f"{prefix}{message}")


# ============================================================================
# BOXES AND TABLES
# ============================================================================


def status_box(
    title: str,
    items: dict[str, str],
    border_color: str = DEFAULT_BORDER_COLOR,
    width: int | None = DEFAULT_PANEL_WIDTH,
):
    """Display a boxed status with key-value pairs

    Example:
        status_box(
            "RESOLVED LOCALE",
            {"Language": "FR", "Country": "FR", "Matched by": "from_subdomain"},
        )
    """
    table = Table(show_header=False, box=None, padding=(0, 1))
    table.add_column("Key", style="dim", no_wrap=True)
    table.add_column("Value", style="white")

    for key, value in items.items():
        table.add_row(f"{key}:", value)

    panel = Panel(
        table,
        title=f"[bold]{title}[/bold]",
        border_style=border_color,
        padding=(1, 2),
        expand=False,
        width=width,
    )
    console.print(panel)


def data_table(
    columns: list[dict[str, Any]],
    rows: list[list[Any]],
    title: str | None = None,
    border_style: str = "dim",
) -> Table:
    """Create and display a data table

    Args:
        columns: List of column dicts with 'name', optional 'style', 'justify'
        rows: List of row data (list of values matching column order)
        title: Optional table title
        border_style: Border style (default: "dim")

    Returns:
        The created Table object
    """
    table = Table(title=title, border_style=border_style, title_style="bold", padding=(0, 1))

    for col in columns:
        table.add_column(
            col["name"],
            style=col.get("style", "white"),
            justify=col.get("justify", "left"),
        )

    for row in rows:
        table.add_row(*[str(cell) for cell in row])

    console.print()
    console.print(table)
    console.print()

    return table
