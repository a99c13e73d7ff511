"""Abstract base class for volume mount adapters.

This module defines the VolumeAdapter interface the shrink pipeline uses
to mount a disk image and inspect its data partition.
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path

from shrinkctl.core.errors import ShrinkError
from shrinkctl.models.disk import PartitionSizing

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class MountHandle:
    """A mounted disk image.

    Attributes:
        path: Path of the mounted image file.
        disk_number: Number the OS assigned to the attached disk.
        released: True once the image has been dismounted.
    """

    path: Path
    disk_number: int
    released: bool = False


class VolumeAdapter(ABC):
    """Abstract base class for all volume mount adapters.

    Subclasses implement the OS-specific operations. The public
    dismount() and optimize_volume() wrappers are best effort: they log
    failures and never raise.

    Example:
        >>> adapter = PowerShellVolumeAdapter()
        >>> with adapter.mounted(Path("C:/Profiles/user.vhdx")) as handle:
        ...     sizing = adapter.query_supported_partition_size(handle)
    """

    @abstractmethod
    def mount(self, path: Path) -> MountHandle:
        """Attach a disk image without assigning a drive letter.

        Args:
            path: Path to the disk image.

        Returns:
            Handle for the mounted image.

        Raises:
            MountError: If the image cannot be mounted, including when it
                is already in use by another process.
        """

    @abstractmethod
    def query_supported_partition_size(self, handle: MountHandle) -> PartitionSizing:
        """Query the resize bounds of the image's data partition.

        Args:
            handle: Handle of a mounted image.

        Returns:
            Minimum and maximum supported partition sizes.

        Raises:
            SizeQueryError: If the partition or its bounds cannot be read.
        """

    @abstractmethod
    def is_available(self) -> bool:
        """Check if the adapter's tooling is available on this system."""

    @abstractmethod
    def _dismount(self, handle: MountHandle) -> None:
        """Detach the image. May raise ShrinkError or OSError."""

    @abstractmethod
    def _optimize(self, handle: MountHandle) -> None:
        """Optimize the mounted volume. May raise ShrinkError or OSError."""

    def dismount(self, handle: MountHandle) -> None:
        """Detach a mounted image.

        Safe to call repeatedly; a handle that was already released is
        left alone. Failures are logged, never raised.

        Args:
            handle: Handle returned by mount().
        """
        if handle.released:
            return

        try:
            self._dismount(handle)
        except (ShrinkError, OSError) as e:
            logger.warning("Failed to dismount %s: %s", handle.path, e)
            return

        handle.released = True
        logger.debug("Dismounted %s", handle.path)

    def optimize_volume(self, handle: MountHandle) -> None:
        """Optimize the mounted volume before compaction.

        Failures are logged, never raised.

        Args:
            handle: Handle returned by mount().
        """
        try:
            self._optimize(handle)
        except (ShrinkError, OSError) as e:
            logger.warning("Volume optimization failed for %s: %s", handle.path, e)

    @contextmanager
    def mounted(self, path: Path) -> Iterator[MountHandle]:
        """Mount an image for the duration of a with-block.

        The image is dismounted when the block exits, however it exits.

        Args:
            path: Path to the disk image.

        Yields:
            Handle for the mounted image.

        Raises:
            MountError: If the image cannot be mounted.
        """
        handle = self.mount(path)
        try:
            yield handle
        finally:
            self.dismount(handle)
