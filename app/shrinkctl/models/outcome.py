"""Outcome models for shrink processing.

This module defines the terminal states a disk can end in and the
single record produced for each processed disk.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from shrinkctl.models.disk import DiskTask, bytes_to_gb


class ShrinkState(str, Enum):
    """Fixed terminal states of the shrink pipeline.

    Mount failures are reported with the adapter's error text instead of
    one of these values, and the free-space check uses a formatted state
    (see :func:`free_space_state`).
    """

    FILE_IS_NOT_DISK_FORMAT = "FileIsNotDiskFormat"
    DELETED = "Deleted"
    DISK_DELETION_FAILED = "DiskDeletionFailed"
    IGNORED = "Ignored"
    NO_PARTITION_INFO = "NoPartitionInfo"
    SKIPPED_ALREADY_MINIMUM = "SkippedAlreadyMinimum"
    DISK_SHRINK_FAILED = "DiskShrinkFailed"
    SUCCESS = "Success"


# States that mean no work failed, even though nothing was reclaimed
_NON_FAILURE_STATES: frozenset[str] = frozenset(
    {
        ShrinkState.FILE_IS_NOT_DISK_FORMAT.value,
        ShrinkState.DELETED.value,
        ShrinkState.IGNORED.value,
        ShrinkState.SKIPPED_ALREADY_MINIMUM.value,
        ShrinkState.SUCCESS.value,
    }
)

FREE_SPACE_STATE_PREFIX = "LessThan"
FREE_SPACE_STATE_SUFFIX = "%FreeInsideDisk"


def free_space_state(ratio_free_space: float) -> str:
    """Format the state for a disk with too little reclaimable space.

    Args:
        ratio_free_space: Configured minimum free-space ratio.

    Returns:
        State text such as "LessThan5%FreeInsideDisk".
    """
    return f"{FREE_SPACE_STATE_PREFIX}{ratio_free_space * 100:g}{FREE_SPACE_STATE_SUFFIX}"


@dataclass(frozen=True, slots=True)
class Outcome:
    """Result of processing one disk.

    Attributes:
        name: File name of the disk.
        full_path: Absolute path of the disk.
        state: Terminal state (a ShrinkState value or free-form error text).
        original_size_gb: Size before processing.
        final_size_gb: Size after processing.
        space_saved_gb: original_size_gb - final_size_gb.
    """

    name: str
    full_path: str
    state: str
    original_size_gb: float
    final_size_gb: float
    space_saved_gb: float

    @property
    def is_success(self) -> bool:
        """Check if the disk was compacted."""
        return self.state == ShrinkState.SUCCESS.value

    @property
    def is_failure(self) -> bool:
        """Check if processing ended in an error state.

        Skips and the free-space check are not failures.
        """
        if self.state in _NON_FAILURE_STATES:
            return False
        return not (
            self.state.startswith(FREE_SPACE_STATE_PREFIX)
            and self.state.endswith(FREE_SPACE_STATE_SUFFIX)
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for sink storage.

        Returns:
            Dictionary representation of the outcome.
        """
        return {
            "name": self.name,
            "full_path": self.full_path,
            "state": self.state,
            "original_size_gb": self.original_size_gb,
            "final_size_gb": self.final_size_gb,
            "space_saved_gb": self.space_saved_gb,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Outcome:
        """Deserialize from dictionary.

        Sizes are coerced with float() so rows read back from CSV work.

        Raises:
            KeyError: If required fields are missing.
            ValueError: If a size is not numeric.
        """
        return cls(
            name=data["name"],
            full_path=data["full_path"],
            state=data["state"],
            original_size_gb=float(data["original_size_gb"]),
            final_size_gb=float(data["final_size_gb"]),
            space_saved_gb=float(data["space_saved_gb"]),
        )


# Field order used by tabular sinks
OUTCOME_FIELDS: tuple[str, ...] = (
    "name",
    "full_path",
    "state",
    "original_size_gb",
    "final_size_gb",
    "space_saved_gb",
)


@dataclass(frozen=True, slots=True)
class OutcomeBuilder:
    """Carries the invariant fields of one disk's outcome.

    Built once per disk and handed to whichever branch terminates the
    pipeline, so every outcome for that disk shares name, path and
    original size.

    Attributes:
        name: File name of the disk.
        full_path: Absolute path of the disk.
        original_size_gb: Size before processing.
    """

    name: str
    full_path: str
    original_size_gb: float

    @classmethod
    def for_task(cls, task: DiskTask) -> OutcomeBuilder:
        """Create a builder from a disk task."""
        return cls(
            name=task.name,
            full_path=str(task.path),
            original_size_gb=task.size_gb,
        )

    def build(self, state: str | ShrinkState, final_size_gb: float) -> Outcome:
        """Build an outcome with the given state and final size.

        Args:
            state: Terminal state.
            final_size_gb: Size of the disk after processing.

        Returns:
            Outcome with space_saved_gb derived from the sizes.
        """
        state_text = state.value if isinstance(state, ShrinkState) else state
        return Outcome(
            name=self.name,
            full_path=self.full_path,
            state=state_text,
            original_size_gb=self.original_size_gb,
            final_size_gb=final_size_gb,
            space_saved_gb=round(self.original_size_gb - final_size_gb, 2),
        )

    def unchanged(self, state: str | ShrinkState) -> Outcome:
        """Build an outcome for a disk whose size did not change."""
        return self.build(state, self.original_size_gb)

    def deleted(self) -> Outcome:
        """Build an outcome for a disk that was deleted."""
        return self.build(ShrinkState.DELETED, 0.0)

    def compacted(self, final_length: int) -> Outcome:
        """Build a success outcome from the post-compaction byte length.

        A file that grew during compaction is reported at its original
        size, so a success never records negative savings.
        """
        final_size_gb = min(bytes_to_gb(final_length), self.original_size_gb)
        return self.build(ShrinkState.SUCCESS, final_size_gb)
