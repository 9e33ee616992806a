"""Rich console utilities for the telemetry agent CLI."""

from typing import List

from rich.console import Console
from rich.table import Table
from rich.theme import Theme

from ._packages import Package

custom_theme = Theme(
    {
        "info": "cyan",
        "warning": "yellow",
        "error": "bold red",
        "success": "bold green",
        "highlight": "magenta",
    }
)

# Shared console instance
console = Console(theme=custom_theme, color_system="auto")


def build_packages_table(packages: List[Package], os_name: str = "") -> Table:
    """
    Build a table of installed packages.

    Args:
        packages: Packages to display
        os_name: OS name shown in the title (optional)

    Returns:
        Rich Table
    """
    title = "Installed Packages"
    if os_name:
        title += f" ({os_name})"

    table = Table(title=title, title_style="bold")
    table.add_column("Package", style="cyan")
    table.add_column("Version")
    table.add_column("Repository", style="highlight")
    table.add_column("Component")

    for package in packages:
        table.add_row(
            package.name,
            package.version,
            package.repository.name or "-",
            package.repository.component or "-",
        )
    return table


def print_packages_table(packages: List[Package], os_name: str = "") -> None:
    """Print installed packages, or a notice when there are none."""
    if not packages:
        console.print("[warning]No installed packages found[/warning]")
        return
    console.print(build_packages_table(packages, os_name))
