"""Shrink configuration and settings.

This module provides the configuration model and I/O functions for
shrinkctl. Every option can be overridden from the command line.

Configuration is stored in ~/.config/shrinkctl/config.toml
"""

import logging
import os
import tomllib
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Annotated

import tomli_w
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from shrinkctl.core.paths import get_config_path, get_diagnostics_dir, get_results_path

logger = logging.getLogger(__name__)


class ShrinkConfig(BaseModel):
    """Configuration for disk shrink processing.

    Attributes:
        delete_older_than_days: Delete disks unused for this many days (0 = disabled).
        ignore_less_than_gb: Leave disks smaller than this alone (0 = disabled).
        ratio_free_space: Minimum fraction of the disk that must be reclaimable.
        max_compaction_retries: Compaction attempts before giving up.
        retry_backoff_seconds: Pause between compaction attempts.
        output_path: Outcome sink file (.csv or .jsonl). None = default location.
        diagnostics_dir: Where failed compaction output is kept. None = default.
        passthru: Also print each outcome as it is produced.
        threads: Number of disks processed in parallel by the CLI.
    """

    model_config = ConfigDict(extra="forbid")

    delete_older_than_days: Annotated[
        int,
        Field(ge=0, description="Delete disks unused for N days (0 = disabled)"),
    ] = 0
    ignore_less_than_gb: Annotated[
        int,
        Field(ge=0, description="Ignore disks smaller than N GB (0 = disabled)"),
    ] = 0
    ratio_free_space: Annotated[
        float,
        Field(ge=0.0, lt=1.0, description="Minimum reclaimable fraction of the disk"),
    ] = 0.05
    max_compaction_retries: Annotated[
        int,
        Field(ge=1, le=1000, description="Compaction attempts before giving up"),
    ] = 30
    retry_backoff_seconds: Annotated[
        int,
        Field(ge=0, le=3600, description="Seconds to wait between attempts"),
    ] = 1
    output_path: Annotated[
        Path | None,
        Field(description="Outcome sink file (None = default state location)"),
    ] = None
    diagnostics_dir: Annotated[
        Path | None,
        Field(description="Directory for failed compaction output"),
    ] = None
    passthru: Annotated[
        bool,
        Field(description="Print each outcome as it is produced"),
    ] = False
    threads: Annotated[
        int,
        Field(ge=1, le=64, description="Disks processed in parallel"),
    ] = 1

    @property
    def effective_output_path(self) -> Path:
        """Configured sink path, or the default under the state directory."""
        return self.output_path or get_results_path()

    @property
    def effective_diagnostics_dir(self) -> Path:
        """Configured diagnostics directory, or the default one."""
        return self.diagnostics_dir or get_diagnostics_dir()

    @property
    def deletion_enabled(self) -> bool:
        """Check if stale disks should be deleted."""
        return self.delete_older_than_days > 0

    @property
    def ignore_enabled(self) -> bool:
        """Check if small disks should be ignored."""
        return self.ignore_less_than_gb > 0


class ConfigError(Exception):
    """Base exception for configuration errors."""


class ConfigNotFoundError(ConfigError):
    """Raised when the config file is not found."""


class ConfigParseError(ConfigError):
    """Raised when the config file cannot be parsed."""


def load_config(path: Path | None = None) -> ShrinkConfig:
    """Load configuration from a TOML file.

    Args:
        path: Path to the config file. If None, uses default config path.

    Returns:
        Validated ShrinkConfig object.

    Raises:
        ConfigNotFoundError: If the config file doesn't exist.
        ConfigParseError: If the TOML syntax is invalid.
        ConfigError: If the content doesn't match the schema.
    """
    config_path = path or get_config_path()

    if not config_path.exists():
        raise ConfigNotFoundError(f"Config not found: {config_path}")

    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigParseError(f"Invalid TOML syntax: {e}") from e
    except OSError as e:
        raise ConfigError(f"Failed to read config: {e}") from e

    try:
        return ShrinkConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid config content: {e}") from e


def load_config_or_default(path: Path | None = None) -> ShrinkConfig:
    """Load configuration, falling back to defaults when no file exists.

    An explicitly given path must exist.

    Raises:
        ConfigError: If the file exists but is invalid, or an explicit
            path is missing.
    """
    try:
        return load_config(path)
    except ConfigNotFoundError:
        if path is not None:
            raise
        logger.debug("No config file found, using defaults")
        return ShrinkConfig()


def save_config(config: ShrinkConfig, path: Path | None = None) -> Path:
    """Save configuration to a TOML file.

    The file is written atomically by first writing to a temporary file
    and then using os.replace() for atomic rename.

    Args:
        config: The ShrinkConfig object to save.
        path: Path to save the config. If None, uses default config path.

    Returns:
        Path where the config was saved.

    Raises:
        ConfigError: If the file cannot be written.
    """
    config_path = path or get_config_path()
    config_path.parent.mkdir(parents=True, exist_ok=True)

    data = _config_to_dict(config)

    tmp_path: Path | None = None
    try:
        with NamedTemporaryFile(
            mode="wb",
            dir=config_path.parent,
            delete=False,
            suffix=".tmp",
        ) as f:
            tmp_path = Path(f.name)
            tomli_w.dump(data, f)
        os.replace(str(tmp_path), str(config_path))
    except OSError as e:
        if tmp_path is not None and tmp_path.exists():
            tmp_path.unlink()
        raise ConfigError(f"Failed to write config: {e}") from e

    return config_path


def _config_to_dict(config: ShrinkConfig) -> dict[str, object]:
    """Convert ShrinkConfig to a dictionary for TOML serialization.

    TOML has no null, so unset paths are left out.
    """
    data = config.model_dump(exclude_none=True)
    for key in ("output_path", "diagnostics_dir"):
        if key in data:
            data[key] = str(data[key])
    return data
