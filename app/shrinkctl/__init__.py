"""shrinkctl - Reclaim unused space in virtual disk containers."""

__version__ = "0.1.0"
