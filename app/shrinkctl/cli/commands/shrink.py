"""Shrink command implementation.

Runs the shrink pipeline over every disk found under the given paths.
"""

import threading
from pathlib import Path
from typing import Annotated, Any

import typer
from pydantic import ValidationError

from shrinkctl.cli.display import print_outcome_line, print_outcomes_table, print_summary
from shrinkctl.compactors.diskpart import DiskpartBackend
from shrinkctl.core.batch import create_orchestrator, run_batch
from shrinkctl.core.config import ConfigError, ShrinkConfig, load_config_or_default
from shrinkctl.scanners.disk import DiskScanner
from shrinkctl.utils.formatting import print_error, print_info, print_warning
from shrinkctl.volumes.powershell import PowerShellVolumeAdapter


def shrink(
    paths: Annotated[
        list[Path],
        typer.Argument(help="Disk files or directories containing disks."),
    ],
    delete_older_than: Annotated[
        int | None,
        typer.Option(
            "--delete-older-than",
            help="Delete disks not used for this many days.",
            min=0,
        ),
    ] = None,
    ignore_less_than: Annotated[
        int | None,
        typer.Option(
            "--ignore-less-than",
            help="Leave disks smaller than this many GB alone.",
            min=0,
        ),
    ] = None,
    ratio_free_space: Annotated[
        float | None,
        typer.Option(
            "--ratio-free-space",
            help="Minimum reclaimable fraction of a disk (default 0.05).",
        ),
    ] = None,
    max_retries: Annotated[
        int | None,
        typer.Option("--max-retries", help="Compaction attempts per disk.", min=1),
    ] = None,
    output: Annotated[
        Path | None,
        typer.Option(
            "--output",
            "-o",
            help="Results file (.csv or .jsonl).",
        ),
    ] = None,
    threads: Annotated[
        int | None,
        typer.Option("--threads", "-t", help="Disks processed in parallel.", min=1),
    ] = None,
    passthru: Annotated[
        bool | None,
        typer.Option(
            "--passthru/--no-passthru",
            help="Print each outcome as JSON as soon as it is available.",
        ),
    ] = None,
    recurse: Annotated[
        bool,
        typer.Option("--recurse/--no-recurse", help="Search directories recursively."),
    ] = True,
    config_path: Annotated[
        Path | None,
        typer.Option("--config", "-c", help="Config file to use."),
    ] = None,
) -> None:
    """Shrink virtual disks to reclaim unused space.

    Each disk is classified against the configured thresholds, inspected,
    and compacted if enough space can be reclaimed. One result row per
    disk is appended to the results file.

    Examples:
        shrinkctl shrink D:\\Profiles
        shrinkctl shrink D:\\Profiles --delete-older-than 90 --ignore-less-than 5
        shrinkctl shrink user.vhdx --ratio-free-space 0.2 --passthru
    """
    overrides: dict[str, Any] = {
        "delete_older_than_days": delete_older_than,
        "ignore_less_than_gb": ignore_less_than,
        "ratio_free_space": ratio_free_space,
        "max_compaction_retries": max_retries,
        "output_path": output,
        "threads": threads,
        "passthru": passthru,
    }
    config = _resolve_config(config_path, overrides)

    tasks = list(DiskScanner(paths, recurse=recurse).scan())
    if not tasks:
        print_info("No disks found.")
        return

    _warn_missing_tools()

    stop_event = threading.Event()
    orchestrator = create_orchestrator(config, stop_event=stop_event)

    try:
        outcomes = run_batch(
            tasks,
            orchestrator,
            threads=config.threads,
            on_outcome=print_outcome_line if config.passthru else None,
            stop_event=stop_event,
        )
    except KeyboardInterrupt:
        stop_event.set()
        print_warning("Interrupted; remaining disks and compaction retries were cancelled.")
        raise typer.Exit(code=130) from None

    if not config.passthru:
        print_outcomes_table(outcomes)
    print_summary(outcomes)
    print_info(f"Results appended to {config.effective_output_path}")

    if any(o.is_failure for o in outcomes):
        raise typer.Exit(code=1)


def _resolve_config(config_path: Path | None, overrides: dict[str, Any]) -> ShrinkConfig:
    """Load the config file and apply command-line overrides.

    Raises:
        typer.Exit: If the config is invalid.
    """
    try:
        base = load_config_or_default(config_path)
    except ConfigError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from None

    updates = {key: value for key, value in overrides.items() if value is not None}
    try:
        return ShrinkConfig.model_validate({**base.model_dump(), **updates})
    except ValidationError as e:
        print_error(f"Invalid option: {e}")
        raise typer.Exit(code=1) from None


def _warn_missing_tools() -> None:
    """Warn when the mount or compaction tooling is missing.

    Disks can still be skipped, ignored or deleted without them.
    """
    if not PowerShellVolumeAdapter().is_available():
        print_warning("PowerShell not found; disks cannot be mounted on this system.")
    if not DiskpartBackend().is_available():
        print_warning("diskpart not found; disks cannot be compacted on this system.")
