"""Batch execution across many disks.

Provides the orchestrator factory and the thread fan-out used by the
CLI. The orchestrator itself processes one disk per call; running
several disks at once happens only here.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterable
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import TYPE_CHECKING

from shrinkctl.compactors.diskpart import DiskpartBackend
from shrinkctl.core.compaction import CompactionRetryEngine
from shrinkctl.core.orchestrator import ShrinkOrchestrator
from shrinkctl.core.reporter import open_sink
from shrinkctl.volumes.powershell import PowerShellVolumeAdapter

if TYPE_CHECKING:
    from shrinkctl.core.config import ShrinkConfig
    from shrinkctl.models.disk import DiskTask
    from shrinkctl.models.outcome import Outcome

logger = logging.getLogger(__name__)


def create_orchestrator(
    config: ShrinkConfig,
    stop_event: threading.Event | None = None,
) -> ShrinkOrchestrator:
    """Build an orchestrator wired to the system collaborators.

    Args:
        config: Shrink configuration.
        stop_event: Event that stops compaction retries when set.

    Returns:
        Orchestrator using PowerShell for mounting, diskpart for
        compaction and the configured sink for outcomes.
    """
    compactor = CompactionRetryEngine(
        DiskpartBackend(),
        config.effective_diagnostics_dir,
        stop_event=stop_event,
    )
    return ShrinkOrchestrator(
        config=config,
        volumes=PowerShellVolumeAdapter(),
        compactor=compactor,
        reporter=open_sink(config.effective_output_path),
    )


def run_batch(
    tasks: Iterable[DiskTask],
    orchestrator: ShrinkOrchestrator,
    threads: int = 1,
    on_outcome: Callable[[Outcome], None] | None = None,
    stop_event: threading.Event | None = None,
) -> list[Outcome]:
    """Process disks, optionally several at a time.

    Args:
        tasks: Disks to process. Each disk must appear once.
        orchestrator: Orchestrator processing single disks.
        threads: Number of disks processed concurrently.
        on_outcome: Called with each outcome as soon as it is available.
        stop_event: Set on KeyboardInterrupt so disks still running stop
            retrying. Disks not yet started are cancelled.

    Returns:
        Outcomes in completion order.
    """
    outcomes: list[Outcome] = []

    def _collect(outcome: Outcome) -> None:
        outcomes.append(outcome)
        if on_outcome is not None:
            on_outcome(outcome)

    if threads <= 1:
        try:
            for task in tasks:
                _collect(orchestrator.shrink(task))
        except KeyboardInterrupt:
            if stop_event is not None:
                stop_event.set()
            raise
        return outcomes

    with ThreadPoolExecutor(max_workers=threads, thread_name_prefix="shrink") as pool:
        futures = [pool.submit(orchestrator.shrink, task) for task in tasks]
        logger.debug("Submitted %d disk(s) to %d worker(s)", len(futures), threads)
        try:
            for future in as_completed(futures):
                _collect(future.result())
        except KeyboardInterrupt:
            # Cancel queued disks before waking the running ones
            pool.shutdown(wait=False, cancel_futures=True)
            if stop_event is not None:
                stop_event.set()
            raise

    return outcomes
