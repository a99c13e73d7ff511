"""Main CLI application entry point.

Defines the Typer application and global options.
"""

import logging
from typing import Annotated

import typer
from rich.logging import RichHandler

from shrinkctl import __version__
from shrinkctl.cli.commands import config, results, scan, shrink
from shrinkctl.utils.formatting import err_console

# Create main Typer app
app = typer.Typer(
    name="shrinkctl",
    help="Reclaim unused space in virtual disk containers.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"shrinkctl version {__version__}")
        raise typer.Exit()


def configure_logging(verbose: bool, quiet: bool) -> None:
    """Send log records to stderr through Rich.

    Args:
        verbose: Log debug messages.
        quiet: Log errors only.
    """
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.ERROR
    else:
        level = logging.WARNING

    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=verbose)],
        force=True,
    )


@app.callback()
def main(
    ctx: typer.Context,
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Enable verbose output.",
        ),
    ] = False,
    quiet: Annotated[
        bool,
        typer.Option(
            "--quiet",
            "-q",
            help="Suppress non-essential output.",
        ),
    ] = False,
) -> None:
    """shrinkctl - Reclaim unused space in virtual disk containers.

    Compacts profile disks that have grown, deletes stale ones, and
    records one result row per disk.
    """
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    configure_logging(verbose, quiet)


# Register commands
app.command(name="shrink")(shrink.shrink)
app.command(name="scan")(scan.scan)
app.add_typer(results.app, name="results")
app.add_typer(config.app, name="config")


if __name__ == "__main__":
    app()
