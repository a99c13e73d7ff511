"""XDG-compliant path management for shrinkctl.

This module provides standardized paths following the XDG Base Directory
Specification for configuration and state storage.

XDG defaults:
- Config: ~/.config/shrinkctl/
- State: ~/.local/state/shrinkctl/
"""

import os
from pathlib import Path

# Application identifier for directory naming
APP_NAME = "shrinkctl"


def _get_xdg_dir(env_var: str, default_subdir: str) -> Path:
    """Get XDG directory respecting environment variable override.

    Args:
        env_var: XDG environment variable name (e.g., "XDG_CONFIG_HOME").
        default_subdir: Default subdirectory under home (e.g., ".config").

    Returns:
        Path to the application-specific directory.
    """
    base = os.environ.get(env_var)
    if base:
        return Path(base) / APP_NAME
    return Path.home() / default_subdir / APP_NAME


def get_config_dir() -> Path:
    """Get the configuration directory path.

    Returns:
        Path to ~/.config/shrinkctl/ (or XDG_CONFIG_HOME/shrinkctl/).
    """
    return _get_xdg_dir("XDG_CONFIG_HOME", ".config")


def get_state_dir() -> Path:
    """Get the state directory path.

    State data includes the outcome sink and compaction diagnostics,
    which should persist between runs but are not configuration.

    Returns:
        Path to ~/.local/state/shrinkctl/ (or XDG_STATE_HOME/shrinkctl/).
    """
    return _get_xdg_dir("XDG_STATE_HOME", ".local/state")


def get_config_path() -> Path:
    """Get the default configuration file path.

    Returns:
        Path to ~/.config/shrinkctl/config.toml.
    """
    return get_config_dir() / "config.toml"


def get_theme_path() -> Path:
    """Get the user theme override path.

    Returns:
        Path to ~/.config/shrinkctl/theme.toml.
    """
    return get_config_dir() / "theme.toml"


def get_results_path() -> Path:
    """Get the default outcome sink path.

    Returns:
        Path to ~/.local/state/shrinkctl/results.csv.
    """
    return get_state_dir() / "results.csv"


def get_diagnostics_dir() -> Path:
    """Get the directory for failed compaction output.

    Returns:
        Path to ~/.local/state/shrinkctl/diagnostics/.
    """
    return get_state_dir() / "diagnostics"


def ensure_dir(path: Path, name: str) -> Path:
    """Create directory if it doesn't exist.

    Args:
        path: Directory path to create.
        name: Human-readable name for error messages.

    Returns:
        The created/existing directory path.

    Raises:
        RuntimeError: If directory cannot be created.
    """
    try:
        path.mkdir(parents=True, exist_ok=True)
    except PermissionError as e:
        msg = f"Cannot create {name} directory {path}: Permission denied"
        raise RuntimeError(msg) from e
    except OSError as e:
        msg = f"Cannot create {name} directory {path}: {e}"
        raise RuntimeError(msg) from e
    return path
