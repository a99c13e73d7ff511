"""CLI package for shrinkctl.

This package contains the Typer application and all subcommands.
"""

from shrinkctl.cli.main import app

__all__ = ["app"]
