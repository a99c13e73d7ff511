"""Compaction retry engine.

The compaction tool fails intermittently (file contention, timing)
without anything actually being wrong with the disk, so each disk gets a
bounded number of attempts with a fixed pause in between. The output of
every failed attempt is kept for postmortem.
"""

import logging
import threading
import time
from collections.abc import Callable
from pathlib import Path

from shrinkctl.compactors.base import CompactionBackend
from shrinkctl.core.errors import CompactionAttemptError, CompactionFailed
from shrinkctl.core.paths import ensure_dir

logger = logging.getLogger(__name__)


def diagnostic_filename(disk_name: str, attempt: int) -> str:
    """Name of the file holding the output of a failed attempt.

    Args:
        disk_name: File name of the disk.
        attempt: 1-based attempt number.

    Returns:
        File name unique per disk and attempt.
    """
    return f"{disk_name}-compaction-attempt-{attempt}.log"


class CompactionRetryEngine:
    """Runs a compaction backend with bounded retries.

    Attributes:
        backend: Backend performing single compaction attempts.
        diagnostics_dir: Directory receiving output of failed attempts.
    """

    def __init__(
        self,
        backend: CompactionBackend,
        diagnostics_dir: Path,
        *,
        sleep: Callable[[float], None] = time.sleep,
        stop_event: threading.Event | None = None,
    ) -> None:
        """Initialize the engine.

        Args:
            backend: Backend performing single compaction attempts.
            diagnostics_dir: Directory receiving output of failed attempts.
            sleep: Function used to pause between attempts.
            stop_event: When set, no further attempts are started.
        """
        self._backend = backend
        self._diagnostics_dir = diagnostics_dir
        self._sleep = sleep
        self._stop_event = stop_event

    @property
    def backend(self) -> CompactionBackend:
        """Backend performing single compaction attempts."""
        return self._backend

    @property
    def diagnostics_dir(self) -> Path:
        """Directory receiving output of failed attempts."""
        return self._diagnostics_dir

    def compact(self, path: Path, max_retries: int, backoff_seconds: float) -> int:
        """Compact a disk image, retrying failed attempts.

        Stops at the first successful attempt.

        Args:
            path: Path to the unmounted disk image.
            max_retries: Maximum number of attempts (at least 1).
            backoff_seconds: Pause between attempts.

        Returns:
            Byte length of the image after compaction.

        Raises:
            CompactionFailed: If every attempt failed or a stop was requested.
        """
        attempts = max(1, max_retries)

        for attempt in range(1, attempts + 1):
            if attempt > 1 and self._stop_requested():
                msg = f"Compaction of {path.name} stopped after {attempt - 1} attempt(s)"
                raise CompactionFailed(msg, attempts=attempt - 1)

            try:
                new_length = self._backend.compact(path)
            except CompactionAttemptError as e:
                logger.warning(
                    "Compaction attempt %d/%d for %s failed: %s",
                    attempt,
                    attempts,
                    path.name,
                    e,
                )
                self._write_diagnostics(path, attempt, e)
                if attempt < attempts:
                    self._sleep(backoff_seconds)
                continue

            logger.info(
                "Compacted %s with %s on attempt %d",
                path.name,
                self._backend.name,
                attempt,
            )
            return new_length

        msg = f"Compaction of {path.name} failed after {attempts} attempt(s)"
        raise CompactionFailed(msg, attempts=attempts)

    def _stop_requested(self) -> bool:
        return self._stop_event is not None and self._stop_event.is_set()

    def _write_diagnostics(self, path: Path, attempt: int, error: CompactionAttemptError) -> None:
        """Persist the output of a failed attempt.

        Losing a diagnostic file must not change the attempt's outcome,
        so write failures are only logged.
        """
        target = self._diagnostics_dir / diagnostic_filename(path.name, attempt)
        try:
            ensure_dir(self._diagnostics_dir, "diagnostics")
            target.write_text("\n".join([str(error), "", *error.output, ""]), encoding="utf-8")
        except (OSError, RuntimeError) as e:
            logger.warning("Could not write compaction diagnostics to %s: %s", target, e)
            return
        logger.debug("Wrote compaction diagnostics to %s", target)
