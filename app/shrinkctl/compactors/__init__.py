"""Compaction backends for reclaiming space in disk images.

This module provides the abstract backend interface and the diskpart
implementation.
"""

from shrinkctl.compactors.base import CompactionBackend
from shrinkctl.compactors.diskpart import DiskpartBackend

__all__ = ["CompactionBackend", "DiskpartBackend"]
