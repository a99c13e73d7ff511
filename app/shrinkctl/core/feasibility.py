"""Resize feasibility checks.

Compaction is slow, so a disk is only compacted when its partition can
actually give back a worthwhile share of the container.
"""

from enum import Enum

from shrinkctl.models.disk import PartitionSizing


class Feasibility(Enum):
    """Result of checking whether a mounted disk is worth shrinking.

    Attributes:
        NOT_WORTH_SHRINKING: Partition cannot shrink below the container size.
        TOO_LITTLE_FREE_SPACE: Reclaimable fraction is below the threshold.
        SHRINKABLE: Disk should be compacted.
    """

    NOT_WORTH_SHRINKING = "not_worth_shrinking"
    TOO_LITTLE_FREE_SPACE = "too_little_free_space"
    SHRINKABLE = "shrinkable"


def used_ratio(sizing: PartitionSizing, disk_byte_length: int) -> float:
    """Fraction of the container occupied by the partition's minimum size.

    Args:
        sizing: Supported partition sizes.
        disk_byte_length: Current container size in bytes (must be > 0).

    Returns:
        size_min / disk_byte_length.
    """
    return sizing.size_min / disk_byte_length


def assess(
    sizing: PartitionSizing,
    disk_byte_length: int,
    ratio_free_space: float,
) -> Feasibility:
    """Decide whether compacting the disk is worthwhile.

    The ratio is taken against the pre-shrink container length, not the
    partition's maximum size.

    Args:
        sizing: Supported partition sizes of the disk's data partition.
        disk_byte_length: Current container size in bytes.
        ratio_free_space: Minimum reclaimable fraction required.

    Returns:
        Feasibility of shrinking the disk.
    """
    if disk_byte_length <= 0 or sizing.size_min > disk_byte_length:
        return Feasibility.NOT_WORTH_SHRINKING

    if used_ratio(sizing, disk_byte_length) > 1 - ratio_free_space:
        return Feasibility.TOO_LITTLE_FREE_SPACE

    return Feasibility.SHRINKABLE
