"""Disk discovery.

Finds candidate disk files under the paths given on the command line.
"""

import logging
from collections.abc import Iterator
from pathlib import Path

from shrinkctl.models.disk import DISK_EXTENSIONS, DiskTask

logger = logging.getLogger(__name__)


class DiskScanner:
    """Yields disk tasks for files under a set of target paths.

    Files named directly are yielded whatever their extension, so that a
    non-disk file is reported rather than silently dropped. Directories
    are searched for virtual disk files only.

    Args:
        targets: Files and directories to scan.
        recurse: If True, search directories recursively.
    """

    def __init__(self, targets: list[Path], *, recurse: bool = True) -> None:
        self._targets = targets
        self._recurse = recurse

    def scan(self) -> Iterator[DiskTask]:
        """Yield a DiskTask for every discovered file, each path once.

        Yields:
            DiskTask instances in target order, sorted within directories.
        """
        seen: set[Path] = set()
        for target in self._targets:
            for path in self._expand(target):
                resolved = path.resolve()
                if resolved in seen:
                    continue
                seen.add(resolved)
                try:
                    yield DiskTask.from_path(resolved)
                except OSError as e:
                    logger.warning("Cannot read %s: %s", path, e)

    def _expand(self, target: Path) -> Iterator[Path]:
        """Expand one target into candidate files."""
        if target.is_file():
            yield target
            return

        if not target.is_dir():
            logger.warning("Path does not exist: %s", target)
            return

        pattern = "**/*" if self._recurse else "*"
        try:
            candidates = sorted(target.glob(pattern))
        except OSError as e:
            logger.warning("Cannot scan directory %s: %s", target, e)
            return

        for candidate in candidates:
            if candidate.suffix.lower() in DISK_EXTENSIONS and candidate.is_file():
                yield candidate
