"""Results command for viewing past outcomes.

This module provides the `shrinkctl results` command for viewing the
outcome rows appended by previous shrink runs.
"""

from pathlib import Path
from typing import Annotated

import typer

from shrinkctl.cli.display import print_outcomes_json, print_outcomes_table
from shrinkctl.core.config import ConfigError, load_config_or_default
from shrinkctl.core.reporter import read_outcomes
from shrinkctl.utils.formatting import print_error, print_info

app = typer.Typer(
    name="results",
    help="View results of previous shrink runs.",
    invoke_without_command=True,
)


@app.callback(invoke_without_command=True)
def results(
    ctx: typer.Context,
    limit: Annotated[
        int,
        typer.Option(
            "--limit",
            "-n",
            help="Maximum number of results to show.",
        ),
    ] = 20,
    output: Annotated[
        Path | None,
        typer.Option(
            "--output",
            "-o",
            help="Results file to read (default: configured results file).",
        ),
    ] = None,
    state: Annotated[
        str | None,
        typer.Option("--state", "-s", help="Only show results with this state."),
    ] = None,
    json_output: Annotated[
        bool,
        typer.Option(
            "--json",
            help="Output as JSON.",
        ),
    ] = False,
) -> None:
    """Show results of previous shrink runs, newest first.

    Examples:
        shrinkctl results                   # Show last 20 results
        shrinkctl results -n 100            # Show last 100 results
        shrinkctl results --state Success   # Only compacted disks
        shrinkctl results --json            # JSON output for scripting
    """
    if ctx.invoked_subcommand is not None:
        return

    if output is None:
        try:
            output = load_config_or_default().effective_output_path
        except ConfigError as e:
            print_error(str(e))
            raise typer.Exit(code=1) from None

    outcomes = read_outcomes(output)
    if state:
        outcomes = [o for o in outcomes if o.state == state]
    outcomes = outcomes[:limit]

    if not outcomes:
        print_info("No results found.")
        return

    if json_output:
        print_outcomes_json(outcomes)
    else:
        print_outcomes_table(outcomes, title=f"Results ({output.name})")
