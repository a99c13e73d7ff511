"""Pytest configuration and shared fixtures.

This module contains fixtures used across all test modules.
"""

from collections.abc import Callable
from datetime import UTC, datetime
from pathlib import Path
from typing import Any
from unittest.mock import MagicMock

import pytest
from shrinkctl.core.reporter import OutcomeReporter
from shrinkctl.models.disk import BYTES_PER_GB, DiskTask
from shrinkctl.models.outcome import Outcome
from shrinkctl.volumes.base import MountHandle, VolumeAdapter

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)


@pytest.fixture(autouse=True)
def isolated_xdg(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Keep config and state files of every test inside tmp_path."""
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg-config"))
    monkeypatch.setenv("XDG_STATE_HOME", str(tmp_path / "xdg-state"))
    return tmp_path


class RecordingReporter(OutcomeReporter):
    """Reporter that keeps outcomes in memory."""

    def __init__(self) -> None:
        self.outcomes: list[Outcome] = []

    @property
    def destination(self) -> str:
        return "memory"

    def _write(self, outcome: Outcome) -> None:
        self.outcomes.append(outcome)


@pytest.fixture
def reporter() -> RecordingReporter:
    """In-memory outcome reporter."""
    return RecordingReporter()


@pytest.fixture
def make_task(tmp_path: Path) -> Callable[..., DiskTask]:
    """Factory for disk tasks backed by a real (empty) file in tmp_path."""

    def _make(
        name: str = "profile_jdoe.vhdx",
        size_gb: float = 10,
        last_used: datetime = NOW,
        create: bool = True,
    ) -> DiskTask:
        path = tmp_path / name
        if create:
            path.write_bytes(b"")
        return DiskTask(
            path=path,
            length=int(size_gb * BYTES_PER_GB),
            last_access=last_used,
            last_write=last_used,
            extension=path.suffix.lower(),
        )

    return _make


@pytest.fixture
def volumes() -> MagicMock:
    """Mock volume adapter whose mounted() behaves like the real one."""
    adapter = MagicMock(spec=VolumeAdapter)
    handle = MountHandle(path=Path("/disks/profile.vhdx"), disk_number=3)
    adapter.mount.return_value = handle

    def _mounted(path: Path) -> Any:
        return VolumeAdapter.mounted(adapter, path)

    adapter.mounted.side_effect = _mounted
    return adapter


@pytest.fixture
def diskpart_success_output() -> str:
    """Sample diskpart output for a successful compaction."""
    return """
Microsoft DiskPart version 10.0.20348.1

Copyright (C) Microsoft Corporation.
On computer: FSLOGIX01

DiskPart successfully selected the virtual disk file.

  100 percent completed

DiskPart successfully attached the virtual disk file.

  100 percent completed

DiskPart successfully compacted the virtual disk file.

DiskPart successfully detached the virtual disk file.

Leaving DiskPart...
"""


@pytest.fixture
def diskpart_failure_output() -> str:
    """Sample diskpart output when the file is locked."""
    return """
Microsoft DiskPart version 10.0.20348.1

DiskPart successfully selected the virtual disk file.

Virtual Disk Service error:
The process cannot access the file because it is being used by another process.

Leaving DiskPart...
"""
