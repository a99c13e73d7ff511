"""Per-disk shrink orchestration.

Sequences classification, inspection and compaction of one disk:

1. classify: SKIP, IGNORE and DELETE end the run
2. mount: a mount failure ends the run with the error text as state
3. optimize and query sizing: NoPartitionInfo ends the run
4. assess: SkippedAlreadyMinimum or LessThanX%FreeInsideDisk end the run
5. dismount, then compact: DiskShrinkFailed or Success

Every step returns an Outcome when it ends the run; _finish is the only
place an Outcome leaves the orchestrator, so each disk is reported once.
"""

import logging
from collections.abc import Callable
from datetime import UTC, datetime

from shrinkctl.core.compaction import CompactionRetryEngine
from shrinkctl.core.config import ShrinkConfig
from shrinkctl.core.errors import CompactionFailed, MountError, SizeQueryError
from shrinkctl.core.feasibility import Feasibility, assess
from shrinkctl.core.reporter import OutcomeReporter
from shrinkctl.core.thresholds import Decision, evaluate
from shrinkctl.models.disk import DiskTask
from shrinkctl.models.outcome import Outcome, OutcomeBuilder, ShrinkState, free_space_state
from shrinkctl.volumes.base import VolumeAdapter

logger = logging.getLogger(__name__)

# Used when a mount fails without any error text
MOUNT_FAILED_STATE = "DiskMountFailed"


def _utcnow() -> datetime:
    return datetime.now(UTC)


class ShrinkOrchestrator:
    """Runs the shrink pipeline for one disk at a time.

    Holds no per-disk state, so a single instance can serve several
    worker threads processing different disks.

    Attributes:
        config: Shrink configuration.
    """

    def __init__(
        self,
        config: ShrinkConfig,
        volumes: VolumeAdapter,
        compactor: CompactionRetryEngine,
        reporter: OutcomeReporter,
        *,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        """Initialize the orchestrator.

        Args:
            config: Shrink configuration.
            volumes: Adapter used to mount and inspect disks.
            compactor: Retry engine used to compact disks.
            reporter: Sink receiving one outcome per disk.
            clock: Source of the current time for the age check.
        """
        self._config = config
        self._volumes = volumes
        self._compactor = compactor
        self._reporter = reporter
        self._clock = clock

    @property
    def config(self) -> ShrinkConfig:
        """Shrink configuration."""
        return self._config

    def shrink(self, task: DiskTask) -> Outcome:
        """Process one disk and report its outcome.

        Args:
            task: Disk to process.

        Returns:
            The outcome that was reported for the disk.
        """
        builder = OutcomeBuilder.for_task(task)
        return self._finish(self._run(task, builder))

    def _run(self, task: DiskTask, builder: OutcomeBuilder) -> Outcome:
        decision = evaluate(task, self._config, now=self._clock())
        logger.debug("%s classified as %s", task.name, decision.value)

        if decision is Decision.SKIP:
            return builder.unchanged(ShrinkState.FILE_IS_NOT_DISK_FORMAT)
        if decision is Decision.DELETE:
            return self._delete(task, builder)
        if decision is Decision.IGNORE:
            return builder.unchanged(ShrinkState.IGNORED)

        stopped = self._inspect(task, builder)
        if stopped is not None:
            return stopped

        return self._compact(task, builder)

    def _delete(self, task: DiskTask, builder: OutcomeBuilder) -> Outcome:
        """Remove a disk that has not been used within the retention window."""
        try:
            task.path.unlink()
        except OSError as e:
            logger.warning("Failed to delete %s: %s", task.path, e)
            return builder.unchanged(ShrinkState.DISK_DELETION_FAILED)

        logger.info("Deleted %s (last used %s)", task.path, task.last_used.isoformat())
        return builder.deleted()

    def _inspect(self, task: DiskTask, builder: OutcomeBuilder) -> Outcome | None:
        """Mount the disk and decide whether compaction is worthwhile.

        The disk is dismounted before this returns, whatever the result.

        Returns:
            A terminal outcome, or None when the disk should be compacted.
        """
        try:
            with self._volumes.mounted(task.path) as handle:
                self._volumes.optimize_volume(handle)
                try:
                    sizing = self._volumes.query_supported_partition_size(handle)
                except SizeQueryError as e:
                    logger.warning("No partition information for %s: %s", task.name, e)
                    return builder.unchanged(ShrinkState.NO_PARTITION_INFO)
        except MountError as e:
            logger.warning("Failed to mount %s: %s", task.path, e)
            return builder.unchanged(str(e) or MOUNT_FAILED_STATE)

        feasibility = assess(sizing, task.length, self._config.ratio_free_space)
        logger.debug(
            "%s: size_min=%d size_max=%d length=%d -> %s",
            task.name,
            sizing.size_min,
            sizing.size_max,
            task.length,
            feasibility.value,
        )

        if feasibility is Feasibility.NOT_WORTH_SHRINKING:
            return builder.unchanged(ShrinkState.SKIPPED_ALREADY_MINIMUM)
        if feasibility is Feasibility.TOO_LITTLE_FREE_SPACE:
            return builder.unchanged(free_space_state(self._config.ratio_free_space))
        return None

    def _compact(self, task: DiskTask, builder: OutcomeBuilder) -> Outcome:
        """Compact the (unmounted) disk."""
        try:
            new_length = self._compactor.compact(
                task.path,
                max_retries=self._config.max_compaction_retries,
                backoff_seconds=self._config.retry_backoff_seconds,
            )
        except CompactionFailed as e:
            logger.warning("%s", e)
            return builder.unchanged(ShrinkState.DISK_SHRINK_FAILED)

        if new_length > task.length:
            logger.warning(
                "%s grew during compaction (%d -> %d bytes)", task.name, task.length, new_length
            )
        return builder.compacted(new_length)

    def _finish(self, outcome: Outcome) -> Outcome:
        """Report the outcome; the single exit point of the pipeline."""
        logger.info(
            "%s: %s (%.2f GB -> %.2f GB)",
            outcome.name,
            outcome.state,
            outcome.original_size_gb,
            outcome.final_size_gb,
        )
        self._reporter.report(outcome)
        return outcome
