"""Unit tests for PowerShellVolumeAdapter.

Tests for the Storage cmdlet volume adapter implementation.
"""

import subprocess
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from shrinkctl.core.errors import MountError, SizeQueryError
from shrinkctl.models.disk import PartitionSizing
from shrinkctl.utils.shell import CommandResult
from shrinkctl.volumes.base import MountHandle
from shrinkctl.volumes.powershell import PowerShellVolumeAdapter

DISK = Path("/profiles/o'brien.vhdx")

PS_ERROR = """\
Mount-DiskImage : The process cannot access the file because it is being used by another process.
At line:1 char:1
+ Mount-DiskImage -ImagePath 'C:\\Profiles\\user.vhdx' -NoDriveLetter ...
    + CategoryInfo          : NotSpecified: (MSFT_DiskImage ...) [Mount-DiskImage], CimException
"""


def _ok(stdout: str = "") -> CommandResult:
    return CommandResult(stdout=stdout, stderr="", returncode=0)


def _script(mock_run: MagicMock, call: int = 0) -> str:
    """Extract the PowerShell script text from a run_command call."""
    return mock_run.call_args_list[call].args[0][-1]


class TestPowerShellVolumeAdapterBasic:
    """Tests for PowerShellVolumeAdapter basic properties."""

    def test_default_executable(self) -> None:
        assert PowerShellVolumeAdapter().executable == "powershell"

    def test_is_available(self) -> None:
        with patch("shrinkctl.volumes.powershell.command_exists", return_value=True):
            assert PowerShellVolumeAdapter("pwsh").is_available() is True

    @patch("shrinkctl.volumes.powershell.run_command")
    def test_runs_non_interactively(self, mock_run: MagicMock) -> None:
        mock_run.return_value = _ok('{"Number":4}')

        PowerShellVolumeAdapter("pwsh").mount(DISK)

        args = mock_run.call_args.args[0]
        assert args[:4] == ["pwsh", "-NoProfile", "-NonInteractive", "-Command"]


class TestMount:
    """Tests for PowerShellVolumeAdapter.mount."""

    @patch("shrinkctl.volumes.powershell.run_command")
    def test_returns_disk_number(self, mock_run: MagicMock) -> None:
        mock_run.return_value = _ok('{"Number":4}')

        handle = PowerShellVolumeAdapter().mount(DISK)

        assert handle == MountHandle(path=DISK, disk_number=4)
        script = _script(mock_run)
        assert "Mount-DiskImage -ImagePath '/profiles/o''brien.vhdx'" in script
        assert "-NoDriveLetter" in script

    @patch("shrinkctl.volumes.powershell.run_command")
    def test_in_use_error_text_propagates(self, mock_run: MagicMock) -> None:
        """The first line of PowerShell's error becomes the MountError text."""
        mock_run.return_value = CommandResult(stdout="", stderr=PS_ERROR, returncode=1)

        with pytest.raises(MountError) as exc_info:
            PowerShellVolumeAdapter().mount(DISK)

        assert str(exc_info.value).startswith("Mount-DiskImage : The process cannot access")
        assert "CategoryInfo" not in str(exc_info.value)

    @patch("shrinkctl.volumes.powershell.run_command")
    def test_error_without_stderr(self, mock_run: MagicMock) -> None:
        mock_run.return_value = CommandResult(stdout="", stderr="", returncode=5)

        with pytest.raises(MountError, match="exited with code 5"):
            PowerShellVolumeAdapter().mount(DISK)

    @patch("shrinkctl.volumes.powershell.run_command")
    def test_missing_powershell(self, mock_run: MagicMock) -> None:
        mock_run.side_effect = FileNotFoundError

        with pytest.raises(MountError, match="not found"):
            PowerShellVolumeAdapter().mount(DISK)

    @patch("shrinkctl.volumes.powershell.run_command")
    def test_timeout(self, mock_run: MagicMock) -> None:
        mock_run.side_effect = subprocess.TimeoutExpired(cmd="powershell", timeout=1)

        with pytest.raises(MountError, match="timed out"):
            PowerShellVolumeAdapter().mount(DISK)

    @patch("shrinkctl.volumes.powershell.run_command")
    def test_not_elevated(self, mock_run: MagicMock) -> None:
        mock_run.side_effect = PermissionError(13, "The requested operation requires elevation")

        with pytest.raises(MountError, match="requires elevation"):
            PowerShellVolumeAdapter().mount(DISK)

    @patch("shrinkctl.volumes.powershell.run_command")
    def test_undecodable_output(self, mock_run: MagicMock) -> None:
        mock_run.side_effect = UnicodeDecodeError("utf-8", b"\x81", 0, 1, "invalid start byte")

        with pytest.raises(MountError, match="Could not run powershell"):
            PowerShellVolumeAdapter().mount(DISK)

    @patch("shrinkctl.volumes.powershell.run_command")
    def test_unusable_output_releases_image(self, mock_run: MagicMock) -> None:
        """An image mounted without a readable disk number is dismounted again."""
        mock_run.side_effect = [_ok('{"Number":null}'), _ok()]

        with pytest.raises(MountError, match="disk number"):
            PowerShellVolumeAdapter().mount(DISK)

        assert "Dismount-DiskImage" in _script(mock_run, 1)

    @patch("shrinkctl.volumes.powershell.run_command")
    def test_invalid_json(self, mock_run: MagicMock) -> None:
        mock_run.return_value = _ok("not json")

        with pytest.raises(MountError, match="Invalid JSON"):
            PowerShellVolumeAdapter().mount(DISK)


class TestQuerySupportedPartitionSize:
    """Tests for PowerShellVolumeAdapter.query_supported_partition_size."""

    @patch("shrinkctl.volumes.powershell.run_command")
    def test_parses_sizes(self, mock_run: MagicMock) -> None:
        mock_run.return_value = _ok('{"SizeMin":2147483648,"SizeMax":10736369664}')

        sizing = PowerShellVolumeAdapter().query_supported_partition_size(
            MountHandle(path=DISK, disk_number=4)
        )

        assert sizing == PartitionSizing(size_min=2147483648, size_max=10736369664)
        script = _script(mock_run)
        assert "Get-Partition -DiskNumber 4" in script
        assert "Get-PartitionSupportedSize" in script

    @patch("shrinkctl.volumes.powershell.run_command")
    def test_command_failure(self, mock_run: MagicMock) -> None:
        mock_run.return_value = CommandResult(
            stdout="", stderr="No MSFT_Partition objects found\n", returncode=1
        )

        with pytest.raises(SizeQueryError, match="No MSFT_Partition"):
            PowerShellVolumeAdapter().query_supported_partition_size(
                MountHandle(path=DISK, disk_number=4)
            )

    @patch("shrinkctl.volumes.powershell.run_command")
    def test_missing_fields(self, mock_run: MagicMock) -> None:
        mock_run.return_value = _ok('{"SizeMin":1}')

        with pytest.raises(SizeQueryError, match="Unexpected partition size output"):
            PowerShellVolumeAdapter().query_supported_partition_size(
                MountHandle(path=DISK, disk_number=4)
            )

    @patch("shrinkctl.volumes.powershell.run_command")
    def test_array_output_rejected(self, mock_run: MagicMock) -> None:
        mock_run.return_value = _ok("[1, 2]")

        with pytest.raises(SizeQueryError, match="JSON object"):
            PowerShellVolumeAdapter().query_supported_partition_size(
                MountHandle(path=DISK, disk_number=4)
            )


class TestDismountAndOptimize:
    """Tests for the best-effort operations."""

    @patch("shrinkctl.volumes.powershell.run_command")
    def test_dismount(self, mock_run: MagicMock) -> None:
        mock_run.return_value = _ok()
        handle = MountHandle(path=DISK, disk_number=4)

        PowerShellVolumeAdapter().dismount(handle)

        assert handle.released is True
        assert "Dismount-DiskImage -ImagePath '/profiles/o''brien.vhdx'" in _script(mock_run)

    @patch("shrinkctl.volumes.powershell.run_command")
    def test_dismount_failure_not_raised(self, mock_run: MagicMock) -> None:
        mock_run.return_value = CommandResult(stdout="", stderr="busy\n", returncode=1)
        handle = MountHandle(path=DISK, disk_number=4)

        PowerShellVolumeAdapter().dismount(handle)

        assert handle.released is False

    @patch("shrinkctl.volumes.powershell.run_command")
    def test_optimize(self, mock_run: MagicMock) -> None:
        mock_run.return_value = _ok()

        PowerShellVolumeAdapter().optimize_volume(MountHandle(path=DISK, disk_number=4))

        script = _script(mock_run)
        assert "Get-Partition -DiskNumber 4" in script
        assert "Optimize-Volume -Defrag" in script

    @patch("shrinkctl.volumes.powershell.run_command")
    def test_optimize_failure_not_raised(self, mock_run: MagicMock) -> None:
        mock_run.side_effect = FileNotFoundError

        PowerShellVolumeAdapter().optimize_volume(MountHandle(path=DISK, disk_number=4))
