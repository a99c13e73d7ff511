"""Disk discovery for shrinkctl."""

from shrinkctl.scanners.disk import DiskScanner

__all__ = ["DiskScanner"]
