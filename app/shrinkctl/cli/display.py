"""Shared Rich display functions for outcomes.

Provides the results table and run summary used by the shrink and
results commands.
"""

import json

from shrinkctl.models.outcome import Outcome
from shrinkctl.utils.formatting import (
    console,
    create_outcome_table,
    format_outcome_row,
    print_success,
    print_warning,
)


def print_outcomes_table(outcomes: list[Outcome], title: str = "Shrink Results") -> None:
    """Print outcomes as a Rich table.

    Args:
        outcomes: Outcomes to display.
        title: Table title.
    """
    table = create_outcome_table(title)
    for outcome in outcomes:
        table.add_row(*format_outcome_row(outcome))
    console.print(table)


def print_outcomes_json(outcomes: list[Outcome]) -> None:
    """Print outcomes as a JSON array for scripting."""
    console.print_json(json.dumps([o.to_dict() for o in outcomes]))


def print_outcome_line(outcome: Outcome) -> None:
    """Print one outcome as a compact JSON line."""
    console.print(json.dumps(outcome.to_dict()), markup=False, highlight=False, soft_wrap=True)


def print_summary(outcomes: list[Outcome]) -> None:
    """Print a one-line summary of a run.

    Args:
        outcomes: All outcomes produced by the run.
    """
    compacted = sum(1 for o in outcomes if o.is_success)
    failed = sum(1 for o in outcomes if o.is_failure)
    saved = sum(o.space_saved_gb for o in outcomes)

    console.print(
        f"\n[muted]Processed {len(outcomes)} disk(s): "
        f"{compacted} compacted, {failed} failed, {saved:.2f} GB reclaimed[/]"
    )
    if failed:
        print_warning(f"{failed} disk(s) did not complete. See the results file for details.")
    elif outcomes:
        print_success("All disks processed.")
