"""Volume mount adapters for inspecting disk images.

This module provides the abstract adapter interface and the concrete
implementation built on the Windows Storage cmdlets.
"""

from shrinkctl.volumes.base import MountHandle, VolumeAdapter
from shrinkctl.volumes.powershell import PowerShellVolumeAdapter

__all__ = ["MountHandle", "PowerShellVolumeAdapter", "VolumeAdapter"]
