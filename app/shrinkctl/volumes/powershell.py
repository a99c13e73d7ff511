"""Storage-module volume adapter.

Mounts and inspects disk images through the Windows Storage cmdlets
(Mount-DiskImage, Get-PartitionSupportedSize, Optimize-Volume) driven
by a non-interactive PowerShell process.
"""

import json
import logging
import subprocess
from pathlib import Path
from typing import Any

from shrinkctl.core.errors import MountError, ShrinkError, SizeQueryError
from shrinkctl.models.disk import PartitionSizing
from shrinkctl.utils.shell import CommandResult, command_exists, quote_powershell, run_command
from shrinkctl.volumes.base import MountHandle, VolumeAdapter

logger = logging.getLogger(__name__)

# Largest partition on the disk; profile containers carry a single data partition
_DATA_PARTITION = (
    "Get-Partition -DiskNumber {number} -ErrorAction Stop"
    " | Sort-Object -Property Size -Descending"
    " | Select-Object -First 1"
)


class PowerShellError(ShrinkError):
    """Raised when a PowerShell command fails or returns unusable output."""


class PowerShellVolumeAdapter(VolumeAdapter):
    """Volume adapter backed by the Windows Storage cmdlets.

    Attributes:
        executable: PowerShell executable to run.
    """

    # Mount and optimize can take minutes on large disks
    _TIMEOUT: float = 900.0

    def __init__(self, executable: str = "powershell") -> None:
        """Initialize the adapter.

        Args:
            executable: PowerShell executable name or path.
        """
        self._executable = executable

    @property
    def executable(self) -> str:
        """PowerShell executable used for commands."""
        return self._executable

    def is_available(self) -> bool:
        """Check if PowerShell is available."""
        return command_exists(self._executable)

    def mount(self, path: Path) -> MountHandle:
        """Attach the image with Mount-DiskImage and read its disk number."""
        script = (
            f"Mount-DiskImage -ImagePath {quote_powershell(str(path))}"
            " -NoDriveLetter -PassThru -ErrorAction Stop"
            " | Get-DiskImage"
            " | Select-Object -Property Number"
            " | ConvertTo-Json -Compress"
        )
        try:
            data = self._run_json(script)
            number = int(data["Number"])
        except PowerShellError as e:
            raise MountError(str(e)) from e
        except (KeyError, TypeError, ValueError) as e:
            # Mounted, but we could not tell which disk it became
            self._release_quietly(path)
            raise MountError(f"Could not determine disk number for {path}") from e

        logger.info("Mounted %s as disk %d", path, number)
        return MountHandle(path=path, disk_number=number)

    def query_supported_partition_size(self, handle: MountHandle) -> PartitionSizing:
        """Read SizeMin/SizeMax of the data partition."""
        script = (
            _DATA_PARTITION.format(number=handle.disk_number)
            + " | Get-PartitionSupportedSize -ErrorAction Stop"
            " | Select-Object -Property SizeMin, SizeMax"
            " | ConvertTo-Json -Compress"
        )
        try:
            data = self._run_json(script)
            return PartitionSizing(
                size_min=int(data["SizeMin"]),
                size_max=int(data["SizeMax"]),
            )
        except PowerShellError as e:
            raise SizeQueryError(str(e)) from e
        except (KeyError, TypeError, ValueError) as e:
            msg = f"Unexpected partition size output for {handle.path}: {e}"
            raise SizeQueryError(msg) from e

    def _dismount(self, handle: MountHandle) -> None:
        self._run(
            f"Dismount-DiskImage -ImagePath {quote_powershell(str(handle.path))}"
            " -ErrorAction Stop | Out-Null"
        )

    def _optimize(self, handle: MountHandle) -> None:
        logger.info("Optimizing volume on %s", handle.path)
        self._run(
            _DATA_PARTITION.format(number=handle.disk_number)
            + " | Get-Volume -ErrorAction Stop"
            " | Optimize-Volume -Defrag -ErrorAction Stop"
        )

    def _release_quietly(self, path: Path) -> None:
        """Dismount an image whose handle could not be built."""
        self.dismount(MountHandle(path=path, disk_number=-1))

    def _run(self, script: str) -> CommandResult:
        """Run a PowerShell script and fail on a non-zero exit.

        Args:
            script: PowerShell command text.

        Returns:
            CommandResult of the successful run.

        Raises:
            PowerShellError: If PowerShell cannot be started, times out
                or the script fails. The message is the first error line.
        """
        args = [self._executable, "-NoProfile", "-NonInteractive", "-Command", script]
        logger.debug("Running: %s", script)

        try:
            result = run_command(args, timeout=self._TIMEOUT)
        except FileNotFoundError as e:
            raise PowerShellError(f"{self._executable} not found") from e
        except subprocess.TimeoutExpired as e:
            raise PowerShellError(f"PowerShell timed out after {self._TIMEOUT:.0f}s") from e
        except (OSError, ValueError) as e:
            raise PowerShellError(f"Could not run {self._executable}: {e}") from e

        if not result.success:
            raise PowerShellError(_first_error_line(result))
        return result

    def _run_json(self, script: str) -> dict[str, Any]:
        """Run a PowerShell script that emits a single JSON object."""
        result = self._run(script)
        try:
            data = json.loads(result.stdout)
        except json.JSONDecodeError as e:
            raise PowerShellError(f"Invalid JSON from PowerShell: {e}") from e
        if not isinstance(data, dict):
            raise PowerShellError("Expected a JSON object from PowerShell")
        return data


def _first_error_line(result: CommandResult) -> str:
    """Extract the human-readable part of a PowerShell error.

    PowerShell follows the message with position and category lines;
    only the message itself is kept.
    """
    for line in result.stderr.splitlines():
        line = line.strip()
        if line:
            return line
    return f"PowerShell exited with code {result.returncode}"
