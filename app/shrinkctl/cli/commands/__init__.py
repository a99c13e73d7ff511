"""CLI commands for shrinkctl.

This package contains all subcommand implementations.
"""

from shrinkctl.cli.commands import config, results, scan, shrink

__all__ = ["config", "results", "scan", "shrink"]
