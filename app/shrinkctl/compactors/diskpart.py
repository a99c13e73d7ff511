"""Diskpart compaction backend.

Drives diskpart with a generated control script and recognizes success
by the sentence diskpart prints after a completed compaction.
"""

import logging
import subprocess
import tempfile
from pathlib import Path

from shrinkctl.compactors.base import CompactionBackend
from shrinkctl.core.errors import CompactionAttemptError
from shrinkctl.utils.shell import command_exists, run_command

logger = logging.getLogger(__name__)

SUCCESS_SENTENCE = "DiskPart successfully compacted the virtual disk file."


def build_control_script(path: Path) -> str:
    """Build the diskpart script that compacts one disk image.

    Args:
        path: Path to the disk image.

    Returns:
        Script text, one diskpart command per line.
    """
    return "\n".join(
        [
            f'select vdisk file="{path}"',
            "attach vdisk readonly",
            "compact vdisk",
            "detach vdisk",
            "exit",
            "",
        ]
    )


def is_compaction_success(lines: list[str]) -> bool:
    """Check diskpart output for the compaction success sentence."""
    return any(line.strip() == SUCCESS_SENTENCE for line in lines)


class DiskpartBackend(CompactionBackend):
    """Compaction backend that scripts diskpart.

    Each attempt writes its own control file, named after the disk so
    concurrent runs on different disks never share one, and removes it
    before returning.

    Attributes:
        executable: diskpart executable to run.
        control_dir: Directory for control files (system temp dir if None).
    """

    # Compacting a large profile disk can take a long time
    _TIMEOUT: float = 3600.0

    def __init__(
        self,
        executable: str = "diskpart",
        control_dir: Path | None = None,
    ) -> None:
        self._executable = executable
        self._control_dir = control_dir

    @property
    def name(self) -> str:
        """Return the backend name."""
        return "diskpart"

    def is_available(self) -> bool:
        """Check if diskpart is available."""
        return command_exists(self._executable)

    def compact(self, path: Path) -> int:
        """Run one diskpart compaction of the image.

        Args:
            path: Path to the disk image.

        Returns:
            Byte length of the image after compaction.

        Raises:
            CompactionAttemptError: If diskpart did not report success.
        """
        control_file = self._write_control_file(path)
        try:
            lines = self._run_diskpart(control_file)
            if not is_compaction_success(lines):
                raise CompactionAttemptError(
                    f"diskpart did not report a successful compaction of {path.name}",
                    output=lines,
                )
            try:
                return path.stat().st_size
            except OSError as e:
                msg = f"Compacted {path.name} but could not read its size: {e}"
                raise CompactionAttemptError(msg, output=lines) from e
        finally:
            control_file.unlink(missing_ok=True)

    def _write_control_file(self, path: Path) -> Path:
        """Write the control script to a uniquely named temp file."""
        try:
            with tempfile.NamedTemporaryFile(
                mode="w",
                encoding="utf-8",
                prefix=f"shrinkctl-{path.stem}-",
                suffix=".diskpart.txt",
                dir=self._control_dir,
                delete=False,
            ) as f:
                f.write(build_control_script(path))
                return Path(f.name)
        except OSError as e:
            raise CompactionAttemptError(f"Could not write diskpart control file: {e}") from e

    def _run_diskpart(self, control_file: Path) -> list[str]:
        """Run diskpart against a control file and capture its output."""
        args = [self._executable, "/s", str(control_file)]
        logger.debug("Running: %s", " ".join(args))

        try:
            result = run_command(args, timeout=self._TIMEOUT)
        except FileNotFoundError as e:
            raise CompactionAttemptError(f"{self._executable} not found") from e
        except subprocess.TimeoutExpired as e:
            msg = f"diskpart timed out after {self._TIMEOUT:.0f}s"
            raise CompactionAttemptError(msg) from e
        except (OSError, ValueError) as e:
            # Access denied (not elevated) or undecodable console output
            raise CompactionAttemptError(f"Could not run {self._executable}: {e}") from e

        return result.output_lines
