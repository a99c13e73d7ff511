"""Rich console formatting utilities.

Provides consistent formatting for CLI output using Rich.
"""

from __future__ import annotations

import sys
from typing import TYPE_CHECKING

from rich.console import Console
from rich.table import Table

from shrinkctl.core.theme import get_theme
from shrinkctl.models.outcome import ShrinkState

if TYPE_CHECKING:
    from shrinkctl.models.outcome import Outcome


def _detect_color_system() -> str | None:
    """Detect the best color system for the current terminal.

    Returns "truecolor" for interactive terminals to enable full hex color support,
    None otherwise to let Rich auto-detect.
    """
    if sys.stdout.isatty():
        return "truecolor"
    return None


# Shared console instances (theme loaded once at import)
console = Console(theme=get_theme(), color_system=_detect_color_system())
err_console = Console(theme=get_theme(), stderr=True, color_system=_detect_color_system())


def create_outcome_table(title: str = "Shrink Results") -> Table:
    """Create a pre-configured table for displaying outcomes.

    Args:
        title: Table title.

    Returns:
        Rich Table configured for outcome display.
    """
    table = Table(
        title=title,
        show_header=True,
        header_style="bold_header",
        border_style="border",
        row_styles=["", "on grey7"],
    )
    table.add_column("Disk", no_wrap=True)
    table.add_column("State")
    table.add_column("Original (GB)", style="info", justify="right")
    table.add_column("Final (GB)", style="info", justify="right")
    table.add_column("Saved (GB)", justify="right")
    return table


def state_style(outcome: Outcome) -> str:
    """Pick the theme style for an outcome's state."""
    if outcome.is_success:
        return "state_success"
    if outcome.state == ShrinkState.DELETED.value:
        return "state_deleted"
    if outcome.is_failure:
        return "state_failed"
    return "state_skipped"


def format_outcome_row(outcome: Outcome) -> tuple[str, str, str, str, str]:
    """Format an outcome as a table row with styling.

    Args:
        outcome: The outcome to format.

    Returns:
        Tuple of (name, state, original, final, saved) with Rich markup.
    """
    style = state_style(outcome)
    saved = f"{outcome.space_saved_gb:.2f}"
    if outcome.space_saved_gb > 0:
        saved = f"[success]{saved}[/]"
    return (
        f"[text]{outcome.name}[/]",
        f"[{style}]{outcome.state}[/]",
        f"{outcome.original_size_gb:.2f}",
        f"{outcome.final_size_gb:.2f}",
        saved,
    )


def print_info(message: str) -> None:
    """Print an info message."""
    console.print(f"[info]{message}[/]")


def print_warning(message: str) -> None:
    """Print a warning message."""
    err_console.print(f"[warning]Warning:[/] {message}")


def print_error(message: str) -> None:
    """Print an error message."""
    err_console.print(f"[error]Error:[/] {message}")


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[success]{message}[/]")
