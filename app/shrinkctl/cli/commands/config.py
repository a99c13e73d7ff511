"""Config command implementation.

Shows the effective configuration and writes a default config file.
"""

from pathlib import Path
from typing import Annotated

import tomli_w
import typer

from shrinkctl.core.config import (
    ConfigError,
    ShrinkConfig,
    load_config_or_default,
    save_config,
)
from shrinkctl.core.paths import get_config_path
from shrinkctl.utils.formatting import console, print_error, print_success, print_warning

app = typer.Typer(
    help="Show or create the shrinkctl configuration.",
    no_args_is_help=True,
)


@app.command()
def show(
    config_path: Annotated[
        Path | None,
        typer.Option("--config", "-c", help="Config file to read."),
    ] = None,
) -> None:
    """Show the effective configuration."""
    try:
        config = load_config_or_default(config_path)
    except ConfigError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from None

    data = config.model_dump(exclude_none=True, mode="json")
    data["output_path"] = str(config.effective_output_path)
    data["diagnostics_dir"] = str(config.effective_diagnostics_dir)
    console.print(tomli_w.dumps(data), markup=False, highlight=False)


@app.command()
def init(
    config_path: Annotated[
        Path | None,
        typer.Option("--config", "-c", help="Where to write the config file."),
    ] = None,
    force: Annotated[
        bool,
        typer.Option("--force", "-f", help="Overwrite an existing config file."),
    ] = False,
) -> None:
    """Write a config file with default settings."""
    target = config_path or get_config_path()
    if target.exists() and not force:
        print_warning(f"Config already exists: {target} (use --force to overwrite)")
        raise typer.Exit(code=1)

    try:
        saved = save_config(ShrinkConfig(), target)
    except ConfigError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from None

    print_success(f"Config written to {saved}")
