"""Disk models for shrink processing.

This module defines the immutable inputs of the shrink pipeline: the disk
file being processed and the partition resize bounds reported for it.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path

# Container formats the pipeline knows how to compact
DISK_EXTENSIONS: frozenset[str] = frozenset({".vhd", ".vhdx"})

BYTES_PER_GB = 1024**3


def bytes_to_gb(size_bytes: int) -> float:
    """Convert a byte count to gigabytes rounded to two decimals.

    Args:
        size_bytes: Size in bytes.

    Returns:
        Size in GB (1024**3 bytes), rounded to 2 decimal places.
    """
    return round(size_bytes / BYTES_PER_GB, 2)


@dataclass(frozen=True, slots=True)
class DiskTask:
    """A single disk file to be processed.

    Attributes:
        path: Absolute path to the disk file.
        length: Size of the file in bytes.
        last_access: Last access time (timezone-aware).
        last_write: Last modification time (timezone-aware).
        extension: Lower-cased filename extension including the dot.
    """

    path: Path
    length: int
    last_access: datetime
    last_write: datetime
    extension: str

    def __post_init__(self) -> None:
        """Validate task data after initialization."""
        if not self.path.is_absolute():
            msg = f"Disk path must be absolute, got {self.path}"
            raise ValueError(msg)
        if self.length < 0:
            msg = f"Disk length cannot be negative, got {self.length}"
            raise ValueError(msg)

    @property
    def name(self) -> str:
        """File name of the disk."""
        return self.path.name

    @property
    def size_gb(self) -> float:
        """Size of the disk in GB."""
        return bytes_to_gb(self.length)

    @property
    def last_used(self) -> datetime:
        """Most recent of the access and write times.

        Access time alone is not trustworthy for differencing disks, whose
        parent is read without its access time being updated.
        """
        return max(self.last_access, self.last_write)

    @property
    def is_disk_format(self) -> bool:
        """Check if the file has a virtual disk extension."""
        return self.extension in DISK_EXTENSIONS

    @classmethod
    def from_path(cls, path: Path) -> DiskTask:
        """Build a task from the file's current metadata.

        Args:
            path: Path to the disk file.

        Returns:
            DiskTask populated from os.stat().

        Raises:
            OSError: If the file cannot be stat'ed.
        """
        absolute = path.resolve()
        stat = absolute.stat()
        return cls(
            path=absolute,
            length=stat.st_size,
            last_access=datetime.fromtimestamp(stat.st_atime, tz=UTC),
            last_write=datetime.fromtimestamp(stat.st_mtime, tz=UTC),
            extension=absolute.suffix.lower(),
        )


@dataclass(frozen=True, slots=True)
class PartitionSizing:
    """Supported size range of a disk's data partition.

    Attributes:
        size_min: Smallest size in bytes the live data permits.
        size_max: Size in bytes the partition could be grown back to.
    """

    size_min: int
    size_max: int

    def __post_init__(self) -> None:
        """Validate sizing data after initialization."""
        if self.size_min < 0 or self.size_max < 0:
            msg = "Partition sizes cannot be negative"
            raise ValueError(msg)
