"""Scan command implementation.

Lists the disks the shrink command would process.
"""

import json
from pathlib import Path
from typing import Annotated

import typer
from rich.table import Table

from shrinkctl.models.disk import DiskTask
from shrinkctl.scanners.disk import DiskScanner
from shrinkctl.utils.formatting import console, print_info


def scan(
    paths: Annotated[
        list[Path],
        typer.Argument(help="Disk files or directories containing disks."),
    ],
    recurse: Annotated[
        bool,
        typer.Option("--recurse/--no-recurse", help="Search directories recursively."),
    ] = True,
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Output as JSON."),
    ] = False,
) -> None:
    """List candidate disks without changing anything.

    Examples:
        shrinkctl scan D:\\Profiles
        shrinkctl scan D:\\Profiles --json
    """
    tasks = list(DiskScanner(paths, recurse=recurse).scan())

    if not tasks:
        print_info("No disks found.")
        return

    if json_output:
        _print_json(tasks)
        return

    _print_table(tasks)
    total = sum(t.size_gb for t in tasks)
    console.print(f"\n[dim]Found {len(tasks)} disk(s) ({total:.2f} GB total)[/dim]")


def _print_table(tasks: list[DiskTask]) -> None:
    """Display disks as a Rich table."""
    table = Table(
        title="Disks",
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("Disk", no_wrap=True)
    table.add_column("Size (GB)", style="info", justify="right")
    table.add_column("Last Used", style="muted")
    table.add_column("Path", style="dim", overflow="fold")

    for task in tasks:
        name = task.name if task.is_disk_format else f"[warning]{task.name}[/]"
        table.add_row(
            name,
            f"{task.size_gb:.2f}",
            task.last_used.strftime("%Y-%m-%d %H:%M"),
            str(task.path),
        )

    console.print(table)


def _print_json(tasks: list[DiskTask]) -> None:
    """Print disks as JSON for scripting."""
    output = [
        {
            "name": t.name,
            "path": str(t.path),
            "size_bytes": t.length,
            "last_access": t.last_access.isoformat(),
            "last_write": t.last_write.isoformat(),
            "extension": t.extension,
        }
        for t in tasks
    ]
    console.print_json(json.dumps(output))
