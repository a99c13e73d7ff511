"""Data models for shrinkctl.

This module exports the core data structures used throughout the application.
"""

from shrinkctl.models.disk import (
    DISK_EXTENSIONS,
    DiskTask,
    PartitionSizing,
    bytes_to_gb,
)
from shrinkctl.models.outcome import (
    OUTCOME_FIELDS,
    Outcome,
    OutcomeBuilder,
    ShrinkState,
    free_space_state,
)

__all__ = [
    "DISK_EXTENSIONS",
    "OUTCOME_FIELDS",
    "DiskTask",
    "Outcome",
    "OutcomeBuilder",
    "PartitionSizing",
    "ShrinkState",
    "bytes_to_gb",
    "free_space_state",
]
