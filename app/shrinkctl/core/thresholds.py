"""Threshold evaluation for disk classification.

Decides, before anything is mounted, whether a disk should be skipped,
deleted, ignored, or handed on to the shrink pipeline.
"""

from datetime import UTC, datetime, timedelta
from enum import Enum

from shrinkctl.core.config import ShrinkConfig
from shrinkctl.models.disk import DiskTask


class Decision(Enum):
    """Classification of a disk against the configured thresholds.

    Attributes:
        PROCEED: Disk should be inspected and possibly compacted.
        DELETE: Disk has not been used within the retention window.
        IGNORE: Disk is below the minimum size worth processing.
        SKIP: File is not a virtual disk.
    """

    PROCEED = "proceed"
    DELETE = "delete"
    IGNORE = "ignore"
    SKIP = "skip"


def evaluate(
    task: DiskTask,
    config: ShrinkConfig,
    now: datetime | None = None,
) -> Decision:
    """Classify a disk against the configured thresholds.

    The format check always runs first. Deletion takes priority over the
    size threshold, so a tiny stale disk is deleted rather than ignored.

    Args:
        task: Disk to classify.
        config: Shrink configuration.
        now: Reference time for the age check. Defaults to the current time.

    Returns:
        Decision for the disk.
    """
    if not task.is_disk_format:
        return Decision.SKIP

    if config.deletion_enabled:
        reference = now or datetime.now(UTC)
        cutoff = reference - timedelta(days=config.delete_older_than_days)
        if task.last_used < cutoff:
            return Decision.DELETE

    if config.ignore_enabled and task.size_gb < config.ignore_less_than_gb:
        return Decision.IGNORE

    return Decision.PROCEED
