"""Outcome reporting to an append-only sink.

Each processed disk produces one record. Records from concurrent
workers never interleave: every destination file has its own lock and
each record is written with a single write call.
"""

import csv
import io
import json
import logging
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import TextIO

from shrinkctl.core.paths import ensure_dir
from shrinkctl.models.outcome import OUTCOME_FIELDS, Outcome

logger = logging.getLogger(__name__)

_LOCKS: dict[Path, threading.Lock] = {}
_LOCKS_GUARD = threading.Lock()


def _lock_for(path: Path) -> threading.Lock:
    """Return the process-wide lock guarding a sink file."""
    key = path.resolve()
    with _LOCKS_GUARD:
        lock = _LOCKS.get(key)
        if lock is None:
            lock = _LOCKS[key] = threading.Lock()
        return lock


class OutcomeReporter(ABC):
    """Abstract base class for outcome sinks.

    report() is best effort: losing one audit record must not hide the
    outcome that was already determined, so write failures are logged
    and swallowed here rather than propagated to the pipeline.
    """

    @property
    @abstractmethod
    def destination(self) -> str:
        """Human-readable identifier of where records go."""

    @abstractmethod
    def _write(self, outcome: Outcome) -> None:
        """Append one record. May raise OSError."""

    def report(self, outcome: Outcome) -> None:
        """Append an outcome to the sink.

        Args:
            outcome: Outcome of one processed disk.
        """
        try:
            self._write(outcome)
        except (OSError, RuntimeError) as e:
            logger.warning(
                "Failed to record outcome for %s to %s: %s",
                outcome.name,
                self.destination,
                e,
            )
            return
        logger.debug("Recorded outcome %s for %s", outcome.state, outcome.name)


class _FileSink(OutcomeReporter):
    """Shared plumbing for sinks that append to a local file."""

    def __init__(self, path: Path) -> None:
        self._path = path

    @property
    def path(self) -> Path:
        """Sink file path."""
        return self._path

    @property
    def destination(self) -> str:
        """Return the sink file path."""
        return str(self._path)

    def _write(self, outcome: Outcome) -> None:
        ensure_dir(self._path.parent, "results")
        with _lock_for(self._path):
            is_new = not self._path.exists() or self._path.stat().st_size == 0
            text = self._format(outcome, is_new)
            with self._path.open(mode="a", encoding="utf-8", newline="") as f:
                f.write(text)
                f.flush()

    @abstractmethod
    def _format(self, outcome: Outcome, is_new: bool) -> str:
        """Render one record, with a header when the file is new."""


class CsvOutcomeSink(_FileSink):
    """Appends outcomes as CSV rows, writing a header to a new file."""

    def _format(self, outcome: Outcome, is_new: bool) -> str:
        buffer = io.StringIO()
        writer = csv.DictWriter(buffer, fieldnames=OUTCOME_FIELDS, lineterminator="\n")
        if is_new:
            writer.writeheader()
        writer.writerow(outcome.to_dict())
        return buffer.getvalue()


class JsonLinesOutcomeSink(_FileSink):
    """Appends outcomes as JSON Lines."""

    def _format(self, outcome: Outcome, is_new: bool) -> str:
        return json.dumps(outcome.to_dict(), separators=(",", ":")) + "\n"


def _is_json_lines(path: Path) -> bool:
    return path.suffix.lower() in (".jsonl", ".json")


def open_sink(path: Path) -> OutcomeReporter:
    """Create a sink for a file, choosing the format by suffix.

    Args:
        path: Sink file. ".jsonl" and ".json" give JSON Lines, anything
            else CSV.

    Returns:
        OutcomeReporter appending to the file.
    """
    if _is_json_lines(path):
        return JsonLinesOutcomeSink(path)
    return CsvOutcomeSink(path)


def read_outcomes(path: Path, limit: int | None = None) -> list[Outcome]:
    """Read outcomes back from a sink file, newest first.

    Corrupt records are skipped with a warning.

    Args:
        path: Sink file written by open_sink().
        limit: Maximum number of outcomes to return. None returns all.

    Returns:
        List of outcomes, newest first. Empty if the file doesn't exist.
    """
    if not path.exists():
        return []

    with path.open(encoding="utf-8", newline="") as f:
        if _is_json_lines(path):
            outcomes = _read_json_lines(f)
        else:
            outcomes = _read_csv(f)

    outcomes.reverse()
    if limit is not None:
        return outcomes[:limit]
    return outcomes


def _read_csv(f: TextIO) -> list[Outcome]:
    outcomes: list[Outcome] = []
    for row_num, row in enumerate(csv.DictReader(f), start=2):
        try:
            outcomes.append(Outcome.from_dict(row))
        except (KeyError, TypeError, ValueError) as e:
            logger.warning("Skipping corrupt result row %d: %s", row_num, str(e))
    return outcomes


def _read_json_lines(f: TextIO) -> list[Outcome]:
    outcomes: list[Outcome] = []
    for line_num, line in enumerate(f, start=1):
        line = line.strip()
        if not line:
            continue
        try:
            outcomes.append(Outcome.from_dict(json.loads(line)))
        except (json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
            logger.warning("Skipping corrupt result line %d: %s", line_num, str(e))
    return outcomes
