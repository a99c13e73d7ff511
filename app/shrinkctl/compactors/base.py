"""Abstract base class for compaction backends.

A backend performs exactly one compaction attempt. Retrying, backoff and
diagnostics are handled by the retry engine, so backends stay free to
talk to their tool however it requires.
"""

from abc import ABC, abstractmethod
from pathlib import Path


class CompactionBackend(ABC):
    """Abstract base class for all compaction backends.

    Example:
        >>> backend = DiskpartBackend()
        >>> if backend.is_available():
        ...     new_length = backend.compact(Path("C:/Profiles/user.vhdx"))
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Short name of the backend, used in logs."""

    @abstractmethod
    def compact(self, path: Path) -> int:
        """Compact an unmounted disk image once.

        Args:
            path: Path to the disk image.

        Returns:
            Byte length of the image after compaction.

        Raises:
            CompactionAttemptError: If the attempt did not succeed. The
                error carries the tool output for diagnostics.
        """

    @abstractmethod
    def is_available(self) -> bool:
        """Check if the backend's tool is available on this system."""
